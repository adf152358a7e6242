from django.contrib import admin

from modules.staff.models import StaffMember


@admin.register(StaffMember)
class StaffMemberAdmin(admin.ModelAdmin):
    list_display = ["username", "name", "role", "is_active"]
    list_filter = ["role", "is_active"]
    search_fields = ["username", "name", "email"]
