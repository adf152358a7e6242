"""Task DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.fulfillment.constants import TaskPriority, TaskStatus, TaskType
from modules.fulfillment.models import Task

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateTaskSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    type = serializers.ChoiceField(choices=TaskType.choices)
    assigned_to = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    priority = serializers.ChoiceField(
        choices=TaskPriority.choices, required=False, default=TaskPriority.MEDIUM
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class UpdateTaskSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TaskStatus.choices, required=False)
    assigned_to = serializers.CharField(required=False)
    priority = serializers.ChoiceField(choices=TaskPriority.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Nothing to update.")
        return attrs


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class TaskSerializer(serializers.ModelSerializer):
    class Meta:
        model = Task
        fields = [
            "id",
            "order_id",
            "order_number",
            "type",
            "status",
            "assigned_to",
            "assigned_by",
            "priority",
            "notes",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class WorkflowStepStateSerializer(serializers.Serializer):
    type = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    order = serializers.IntegerField()
    required = serializers.BooleanField()
    completed = serializers.BooleanField()
    task_id = serializers.CharField(allow_null=True)
    task_status = serializers.CharField(allow_null=True)
    assigned_to = serializers.CharField(allow_null=True)


class WorkflowSummarySerializer(serializers.Serializer):
    order_id = serializers.CharField()
    order_number = serializers.CharField()
    progress_percent = serializers.IntegerField()
    current_step = serializers.CharField(allow_null=True)
    steps = WorkflowStepStateSerializer(many=True)
