from django.contrib import admin

from modules.orders.models import Order, OrderNumberSequence


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        "order_number",
        "customer_name",
        "status",
        "payment_method",
        "payment_status",
        "total",
        "assigned_to",
        "created_at",
    ]
    list_filter = ["status", "payment_method", "payment_status", "refund_status"]
    search_fields = ["order_number", "customer_name", "customer_email"]
    readonly_fields = ["order_number", "total", "discount", "offer", "idempotency_key"]


@admin.register(OrderNumberSequence)
class OrderNumberSequenceAdmin(admin.ModelAdmin):
    list_display = ["year", "last_value"]
