"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions propagate to ``api_exception_handler``, which maps
each one to its HTTP status; the view never swallows exceptions.

Order creation is the checkout endpoint and accepts anonymous callers;
every other action requires a resolved staff ``Actor``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.fulfillment.repositories.django_repository import TaskDjangoRepository
from modules.fulfillment.serializers import WorkflowSummarySerializer
from modules.fulfillment.views import build_task_service
from modules.offers.repositories.django_repository import OfferDjangoRepository
from modules.orders.dtos import CreateOrderDTO, OrderDetailsUpdateDTO, RefundUpdateDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    AssignSerializer,
    CreateOrderSerializer,
    OrderDetailsUpdateSerializer,
    OrderListSerializer,
    OrderSerializer,
    RefundDetailsSerializer,
    RefundUpdateSerializer,
    TransitionSerializer,
)
from modules.orders.services import OrderService
from modules.staff.permissions import IsStaffMember
from modules.staff.repositories.django_repository import StaffDjangoRepository


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    filterset_class = OrderFilter
    search_fields = ["order_number", "customer_name", "customer_email"]
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            offer_repository=OfferDjangoRepository(),
            staff_repository=StaffDjangoRepository(),
            task_repository=TaskDjangoRepository(),
        )

    def get_permissions(self):
        if self.action == "create":
            return [AllowAny()]
        return [IsStaffMember()]

    def get_throttles(self) -> list[BaseThrottle]:
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        Returns 200 if the key was already used, 201 for new orders.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)

        idempotency_key = request.headers.get("Idempotency-Key")
        dto = CreateOrderDTO(
            **create_serializer.validated_data,
            idempotency_key=idempotency_key,
        )
        replay = bool(
            idempotency_key
            and OrderDjangoRepository().get_by_idempotency_key(idempotency_key)
        )
        order = self._service.create_order(dto)

        out = OrderSerializer(order)
        return Response(
            out.data,
            status=status.HTTP_200_OK if replay else status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve / Update
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.orders_visible_to(self.request.actor)

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering is handled by ``OrderFilter``; workers only see orders
        assigned to them.  Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{id or order number}/"""
        order = self._service.get_order_for(pk, request.actor)
        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/: tracking, courier and notes.

        Status changes go through ``/transition/``.
        """
        serializer = OrderDetailsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_details(
            pk, OrderDetailsUpdateDTO(**serializer.validated_data), request.actor
        )
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def transition(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/transition/"""
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.transition_status(
            pk, serializer.validated_data["status"], request.actor
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def assign(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/assign/ (``worker_id: null`` unassigns)."""
        serializer = AssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.assign(
            pk, serializer.validated_data.get("worker_id"), request.actor
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get", "put"])
    def refund(self, request: Request, pk: str | None = None) -> Response:
        """GET/PUT /api/v1/orders/{pk}/refund/"""
        if request.method == "GET":
            details = self._service.get_refund_details(pk, request.actor)
            return Response(RefundDetailsSerializer(details.model_dump()).data)

        serializer = RefundUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_refund(
            pk, RefundUpdateDTO(**serializer.validated_data), request.actor
        )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get"])
    def workflow(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/workflow/"""
        summary = build_task_service().workflow_summary(pk, request.actor)
        return Response(WorkflowSummarySerializer(summary.model_dump()).data)
