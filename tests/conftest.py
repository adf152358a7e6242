from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from modules.fulfillment.constants import TaskStatus
from modules.fulfillment.models import Task
from modules.fulfillment.repositories.django_repository import TaskDjangoRepository
from modules.fulfillment.services import TaskService
from modules.offers.constants import DiscountType
from modules.offers.models import Offer
from modules.offers.repositories.django_repository import OfferDjangoRepository
from modules.orders.dtos import CreateOrderDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.staff.actor import Actor
from modules.staff.constants import StaffRole
from modules.staff.models import StaffMember
from modules.staff.repositories.django_repository import StaffDjangoRepository


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_staff():
    User = get_user_model()

    def _make(username: str, role: str = StaffRole.WORKER, is_active: bool = True):
        user = User.objects.create_user(username=username, password="testpass123")
        return StaffMember.objects.create(
            username=username,
            name=username.title(),
            role=role,
            is_active=is_active,
            user=user,
        )

    return _make


@pytest.fixture()
def superadmin(make_staff):
    return make_staff("owner", StaffRole.SUPERADMIN)


@pytest.fixture()
def admin(make_staff):
    return make_staff("manager", StaffRole.ADMIN)


@pytest.fixture()
def worker(make_staff):
    return make_staff("ravi")


@pytest.fixture()
def other_worker(make_staff):
    return make_staff("meera")


@pytest.fixture()
def admin_actor(admin):
    return Actor(id=admin.username, role=admin.role)


@pytest.fixture()
def worker_actor(worker):
    return Actor(id=worker.username, role=worker.role)


@pytest.fixture()
def other_worker_actor(other_worker):
    return Actor(id=other_worker.username, role=other_worker.role)


@pytest.fixture()
def client_for(api_client):
    """APIClient force-authenticated as the given ``StaffMember``."""

    def _client(member: StaffMember) -> APIClient:
        api_client.force_authenticate(user=member.user)
        return api_client

    return _client


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        offer_repository=OfferDjangoRepository(),
        staff_repository=StaffDjangoRepository(),
        task_repository=TaskDjangoRepository(),
    )


@pytest.fixture()
def task_service():
    return TaskService(
        task_repository=TaskDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        staff_repository=StaffDjangoRepository(),
    )


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_payload():
    """Checkout payload: 2 x 250.00 + 1 x 700.00 = 1200.00, shipping 49.00."""

    def _payload(**overrides) -> dict:
        payload = {
            "items": [
                {
                    "product_id": "TEA-001",
                    "sku": "TEA-001",
                    "title": "Assam Tea 250g",
                    "quantity": 2,
                    "price": "250.00",
                },
                {
                    "product_id": "HNY-001",
                    "title": "Forest Honey 500g",
                    "quantity": 1,
                    "price": "700.00",
                },
            ],
            "shipping": "49.00",
            "customer": {
                "name": "Ananya Rao",
                "email": "ananya@example.com",
                "phone": "9876500001",
            },
            "shipping_address": {
                "name": "Ananya Rao",
                "address_line1": "12 MG Road",
                "city": "Bengaluru",
                "state": "Karnataka",
                "pincode": "560001",
            },
            "payment_method": "cod",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture()
def make_order(order_service, order_payload):
    """Create an order through the service, then force status/assignee."""

    def _make(status: str | None = None, assigned_to: str | None = None, **overrides):
        order = order_service.create_order(CreateOrderDTO(**order_payload(**overrides)))
        changes = {}
        if status is not None:
            changes["status"] = status
        if assigned_to is not None:
            changes["assigned_to"] = assigned_to
        if changes:
            Order.objects.filter(id=order.id).update(**changes)
            order.refresh_from_db()
        return order

    return _make


@pytest.fixture()
def make_prepaid_order(make_order):
    def _make(**kwargs):
        kwargs.setdefault("payment_method", "upi")
        kwargs.setdefault("payment_confirmed", True)
        kwargs.setdefault("payment_reference", "pay_Nx81KQ2")
        return make_order(**kwargs)

    return _make


@pytest.fixture()
def make_offer():
    def _make(**overrides) -> Offer:
        now = timezone.now()
        fields = {
            "code": "SAVE10",
            "title": "10% off your order",
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": Decimal("10"),
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=30),
        }
        fields.update(overrides)
        return Offer.objects.create(**fields)

    return _make


@pytest.fixture()
def make_task():
    def _make(order: Order, type: str, status: str = TaskStatus.PENDING, **overrides) -> Task:
        fields = {
            "order": order,
            "order_number": order.order_number,
            "type": type,
            "status": status,
            "assigned_to": order.assigned_to or "ravi",
            "assigned_by": "manager",
        }
        fields.update(overrides)
        return Task.objects.create(**fields)

    return _make
