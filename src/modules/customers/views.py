"""Customer API views (read-only, elevated staff)."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.customers.filters import CustomerFilter
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from modules.customers.services import CustomerService
from modules.staff.permissions import IsStaffMember


class CustomerViewSet(ListModelMixin, GenericViewSet):
    filterset_class = CustomerFilter
    search_fields = ["name", "email"]
    ordering_fields = ["name", "total_orders", "total_spent", "last_order_date"]
    ordering = ["-last_order_date", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    permission_classes = [IsStaffMember]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CustomerService(repository=CustomerDjangoRepository())

    def get_queryset(self):
        return self._service.customers_visible_to(self.request.actor)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        customer = self._service.get_customer(pk, request.actor)
        return Response(CustomerSerializer(customer).data)
