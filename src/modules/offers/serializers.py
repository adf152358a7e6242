"""Offer DRF serializers for API input/output.

Field names and enumeration values are the wire contract consumed by the
storefront and by reporting; they are serialized verbatim.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.offers.constants import OFFER_CODE_MAX_LENGTH, DiscountType
from modules.offers.models import Offer

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class ValidateOfferSerializer(serializers.Serializer):
    offer_code = serializers.CharField(required=False, allow_blank=True)
    offer_id = serializers.CharField(required=False, allow_blank=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    customer_id = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get("offer_code") and not attrs.get("offer_id"):
            raise serializers.ValidationError("Offer ID or code is required.")
        return attrs


class EligibleOffersQuerySerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    customer_id = serializers.CharField(required=False, allow_blank=True)


class OfferWriteSerializer(serializers.Serializer):
    code = serializers.CharField(
        max_length=OFFER_CODE_MAX_LENGTH, required=False, allow_blank=True, allow_null=True
    )
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    discount_type = serializers.ChoiceField(choices=DiscountType.choices)
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    max_discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    min_order_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    valid_from = serializers.DateTimeField()
    valid_until = serializers.DateTimeField()
    is_active = serializers.BooleanField(required=False, default=True)
    customer_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    customer_emails = serializers.ListField(
        child=serializers.EmailField(), required=False, allow_null=True
    )
    customer_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    customer_ids = serializers.ListField(
        child=serializers.CharField(), required=False, allow_null=True
    )
    usage_limit = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    one_time_per_user = serializers.BooleanField(required=False, default=False)


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class OfferSerializer(serializers.ModelSerializer):
    class Meta:
        model = Offer
        fields = [
            "id",
            "code",
            "title",
            "description",
            "discount_type",
            "discount_value",
            "max_discount",
            "min_order_amount",
            "valid_from",
            "valid_until",
            "is_active",
            "customer_email",
            "customer_emails",
            "customer_id",
            "customer_ids",
            "usage_limit",
            "used_count",
            "one_time_per_user",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PublicOfferSerializer(serializers.ModelSerializer):
    """What a customer may see about an offer (no audience or counters)."""

    class Meta:
        model = Offer
        fields = [
            "id",
            "code",
            "title",
            "description",
            "discount_type",
            "discount_value",
            "max_discount",
            "min_order_amount",
            "valid_until",
        ]
        read_only_fields = fields


class ValidatedOfferSerializer(serializers.Serializer):
    offer = PublicOfferSerializer()
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
