import django_filters
from django.db.models import Q

from travelxguide.users.models import User


class UserFilter(django_filters.FilterSet):
    """Admin user-management filters. Non-admins only ever see themselves."""

    role = django_filters.ChoiceFilter(choices=User.Role.choices)
    blocked = django_filters.BooleanFilter(field_name="is_blocked")
    verified = django_filters.BooleanFilter(field_name="is_account_verified")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = User
        fields = ["role", "blocked", "verified", "search"]

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(email__icontains=value)
            | Q(name__icontains=value)
            | Q(username__icontains=value),
        )
