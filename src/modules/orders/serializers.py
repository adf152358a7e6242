"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus, PaymentMethod, RefundStatus
from modules.orders.models import Order

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    sku = serializers.CharField(required=False, allow_blank=True, default="")
    title = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class CustomerInputSerializer(serializers.Serializer):
    name = serializers.CharField()
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    user_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ShippingAddressInputSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default="")
    address_line1 = serializers.CharField()
    address_line2 = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    city = serializers.CharField()
    state = serializers.CharField()
    pincode = serializers.CharField()
    country = serializers.CharField(required=False, default="India")


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    items = OrderItemInputSerializer(many=True, allow_empty=False)
    subtotal = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )
    shipping = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )
    customer = CustomerInputSerializer()
    shipping_address = ShippingAddressInputSerializer()
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices, required=False, default=PaymentMethod.COD
    )
    payment_confirmed = serializers.BooleanField(required=False, default=False)
    payment_reference = serializers.CharField(required=False, allow_blank=True, default="")
    offer_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class AssignSerializer(serializers.Serializer):
    worker_id = serializers.CharField(allow_null=True, allow_blank=True)


class RefundUpdateSerializer(serializers.Serializer):
    refund_status = serializers.ChoiceField(choices=RefundStatus.choices)
    refund_reference = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class OrderDetailsUpdateSerializer(serializers.Serializer):
    tracking_number = serializers.CharField(required=False, allow_blank=True)
    courier_company = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer with the full order snapshot."""

    customer = serializers.SerializerMethodField()
    refund_eligible = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "items",
            "subtotal",
            "shipping",
            "discount",
            "total",
            "offer_id",
            "customer",
            "user_id",
            "shipping_address",
            "payment_method",
            "payment_status",
            "payment_reference",
            "status",
            "assigned_to",
            "refund_status",
            "refund_reference",
            "refund_notes",
            "refund_eligible",
            "tracking_number",
            "courier_company",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_customer(self, order: Order) -> dict:
        return {
            "name": order.customer_name,
            "email": order.customer_email,
            "phone": order.customer_phone,
        }


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list."""

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_name",
            "status",
            "payment_method",
            "payment_status",
            "total",
            "assigned_to",
            "created_at",
        ]
        read_only_fields = fields


class RefundDetailsSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    order_number = serializers.CharField()
    status = serializers.CharField()
    payment_method = serializers.CharField()
    payment_status = serializers.CharField()
    payment_reference = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    refund_status = serializers.CharField(allow_null=True)
    refund_reference = serializers.CharField()
    refund_notes = serializers.CharField()
    can_refund = serializers.BooleanField()
