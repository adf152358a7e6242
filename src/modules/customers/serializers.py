from rest_framework import serializers

from modules.customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            "id",
            "email",
            "name",
            "phone",
            "user_id",
            "total_orders",
            "total_spent",
            "last_order_date",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
