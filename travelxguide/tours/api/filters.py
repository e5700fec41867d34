import django_filters

from travelxguide.tours.models import Tour


class TourFilter(django_filters.FilterSet):
    category = django_filters.ChoiceFilter(choices=Tour.Category.choices)
    difficulty = django_filters.ChoiceFilter(choices=Tour.Difficulty.choices)
    location = django_filters.CharFilter(lookup_expr="icontains")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    starts_after = django_filters.DateFilter(
        field_name="start_date", lookup_expr="gte"
    )

    class Meta:
        model = Tour
        fields = [
            "category",
            "difficulty",
            "location",
            "min_price",
            "max_price",
            "starts_after",
        ]
