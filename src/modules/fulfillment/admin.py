from django.contrib import admin

from modules.fulfillment.models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ["order_number", "type", "status", "assigned_to", "priority", "completed_at"]
    list_filter = ["type", "status", "priority"]
    search_fields = ["order_number", "assigned_to"]
    readonly_fields = ["completed_at"]
