import django_filters

from travelxguide.guides.models import GuideApplication
from travelxguide.guides.models import search_terms


class ApprovedGuideFilter(django_filters.FilterSet):
    # Case-insensitive substring of any single list item
    destination = django_filters.CharFilter(method="filter_terms")
    language = django_filters.CharFilter(method="filter_terms")

    class Meta:
        model = GuideApplication
        fields = ["destination", "language"]

    def filter_terms(self, queryset, name, value):
        needle = search_terms([value]).strip("\n")
        if not needle:
            return queryset
        return queryset.filter(**{f"{name}_terms__contains": needle})


class GuideApplicationFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=GuideApplication.Status.choices)

    class Meta:
        model = GuideApplication
        fields = ["status"]
