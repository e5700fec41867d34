from django.contrib import admin

from travelxguide.tours import models


@admin.register(models.Tour)
class TourAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "title",
        "host",
        "location",
        "start_date",
        "status",
        "category",
    ]
    search_fields = ["title", "location", "host__email"]
    list_filter = ["status", "category", "difficulty", "created_at"]
    raw_id_fields = ["host", "approved_by"]
    # Status changes go through the API workflow so they are audited
    readonly_fields = ["status", "approved_by", "approved_at", "duration"]
