from django.contrib import admin

from modules.customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ["email", "name", "total_orders", "total_spent", "last_order_date"]
    search_fields = ["email", "name"]
