import django_filters

from travelxguide.notifications.models import Notification


class NotificationFilter(django_filters.FilterSet):
    unread = django_filters.BooleanFilter(field_name="is_read", exclude=True)
    type = django_filters.ChoiceFilter(
        field_name="notification_type",
        choices=Notification.Type.choices,
    )

    class Meta:
        model = Notification
        fields = ["unread", "type"]
