"""Task API views.

``/api/v1/tasks/``: elevated staff create and manage tasks; workers list
and update the tasks assigned to them.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.fulfillment.dtos import CreateTaskDTO, UpdateTaskDTO
from modules.fulfillment.models import Task
from modules.fulfillment.repositories.django_repository import TaskDjangoRepository
from modules.fulfillment.serializers import (
    CreateTaskSerializer,
    TaskSerializer,
    UpdateTaskSerializer,
)
from modules.fulfillment.services import TaskService
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.staff.permissions import IsStaffMember
from modules.staff.repositories.django_repository import StaffDjangoRepository

TASK_FILTERS = ("order_id", "assigned_to", "status", "type")


def build_task_service() -> TaskService:
    return TaskService(
        task_repository=TaskDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        staff_repository=StaffDjangoRepository(),
    )


class TaskViewSet(GenericViewSet):
    queryset = Task.objects.all()
    permission_classes = [IsStaffMember]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_task_service()

    def list(self, request: Request) -> Response:
        """GET /api/v1/tasks/?order_id=&assigned_to=&status=&type="""
        filters = {key: request.query_params.get(key) for key in TASK_FILTERS}
        tasks = self._service.list_tasks(request.actor, filters)
        return Response(TaskSerializer(tasks, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        task = self._service.get_task_for(pk, request.actor)
        return Response(TaskSerializer(task).data)

    def create(self, request: Request) -> Response:
        serializer = CreateTaskSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = self._service.create_task(
            CreateTaskDTO(**serializer.validated_data), request.actor
        )
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = UpdateTaskSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = self._service.update_task(
            pk, UpdateTaskDTO(**serializer.validated_data), request.actor
        )
        return Response(TaskSerializer(task).data)
