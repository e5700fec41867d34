from django.contrib import admin

from travelxguide.guides import models


@admin.register(models.GuideApplication)
class GuideApplicationAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "email", "status", "hourly_rate", "rating"]
    search_fields = ["name", "email", "phone"]
    list_filter = ["status", "is_active", "created_at"]
    raw_id_fields = ["applicant", "reviewed_by"]
