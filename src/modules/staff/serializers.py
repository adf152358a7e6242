from __future__ import annotations

from rest_framework import serializers

from modules.staff.models import StaffMember


class StaffMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = StaffMember
        fields = ["username", "name", "email", "role", "is_active"]
        read_only_fields = fields
