from django.contrib import admin

from modules.offers.models import Offer, OfferUsage


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = ["code", "title", "discount_type", "discount_value", "is_active", "used_count"]
    list_filter = ["discount_type", "is_active", "one_time_per_user"]
    search_fields = ["code", "title"]
    readonly_fields = ["used_count"]


@admin.register(OfferUsage)
class OfferUsageAdmin(admin.ModelAdmin):
    list_display = ["offer", "customer_id", "customer_email", "used_at"]
    search_fields = ["customer_id", "customer_email"]
