"""Integration tests for the orders API.

Runs the full stack: DRF view -> OrderService -> repositories -> SQLite,
with errors rendered by ``api_exception_handler``.
"""

from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model

from modules.fulfillment.constants import TaskStatus, TaskType
from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

ORDERS_URL = "/api/v1/orders/"


def _detail(order, suffix=""):
    return f"{ORDERS_URL}{order.id}/{suffix}"


class TestCheckout:
    def test_anonymous_checkout_creates_order(self, api_client, order_payload):
        response = api_client.post(ORDERS_URL, order_payload(), format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["payment_status"] == "pending"
        assert body["total"] == "1249.00"
        assert body["customer"]["email"] == "ananya@example.com"
        assert body["order_number"].startswith("ORD-")

    def test_idempotent_replay_returns_200(self, api_client, order_payload):
        first = api_client.post(
            ORDERS_URL, order_payload(), format="json", HTTP_IDEMPOTENCY_KEY="chk-1"
        )
        second = api_client.post(
            ORDERS_URL, order_payload(), format="json", HTTP_IDEMPOTENCY_KEY="chk-1"
        )

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]
        assert Order.objects.count() == 1

    def test_empty_items_is_a_validation_error(self, api_client, order_payload):
        response = api_client.post(ORDERS_URL, order_payload(items=[]), format="json")

        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "validation_error"
        assert body["errors"][0]["attr"] == "items"

    def test_unconfirmed_online_payment_is_rejected(self, api_client, order_payload):
        response = api_client.post(
            ORDERS_URL, order_payload(payment_method="upi"), format="json"
        )
        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"
        assert not Order.objects.exists()

    def test_offer_discount_applied(self, api_client, order_payload, make_offer):
        make_offer()
        response = api_client.post(
            ORDERS_URL, order_payload(offer_code="SAVE10"), format="json"
        )
        assert response.status_code == 201
        assert response.json()["discount"] == "120.00"
        assert response.json()["total"] == "1129.00"

    def test_rejected_offer_reports_reason(self, api_client, order_payload):
        response = api_client.post(
            ORDERS_URL, order_payload(offer_code="NOPE"), format="json"
        )
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "offer_not_found"
        assert not Order.objects.exists()


class TestAccess:
    def test_unauthenticated_list_is_401(self, api_client):
        assert api_client.get(ORDERS_URL).status_code == 401

    def test_non_staff_user_is_403(self, api_client):
        user = get_user_model().objects.create_user(username="shopper", password="x")
        api_client.force_authenticate(user=user)
        response = api_client.get(ORDERS_URL)
        assert response.status_code == 403
        assert response.json()["type"] == "client_error"

    def test_worker_sees_only_assigned_orders(
        self, client_for, make_order, worker, other_worker
    ):
        mine = make_order(assigned_to=worker.username)
        make_order(assigned_to=other_worker.username)
        make_order()

        response = client_for(worker).get(ORDERS_URL)

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["results"][0]["id"] == str(mine.id)

    def test_worker_gets_404_for_foreign_order(self, client_for, make_order, other_worker, worker):
        order = make_order(assigned_to=other_worker.username)
        response = client_for(worker).get(_detail(order))
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "order_not_found"

    def test_admin_filters_by_status(self, client_for, make_order, admin):
        make_order(status=OrderStatus.CONFIRMED)
        make_order()
        response = client_for(admin).get(ORDERS_URL, {"status": "confirmed"})
        assert response.json()["count"] == 1

    def test_retrieve_by_order_number(self, client_for, make_order, admin):
        order = make_order()
        response = client_for(admin).get(f"{ORDERS_URL}{order.order_number}/")
        assert response.status_code == 200
        assert response.json()["id"] == str(order.id)


class TestStaffActions:
    def test_transition(self, client_for, make_order, admin):
        order = make_order()
        response = client_for(admin).post(
            _detail(order, "transition/"), {"status": "confirmed"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

    def test_illegal_transition_is_409(self, client_for, make_order, admin):
        order = make_order()
        response = client_for(admin).post(
            _detail(order, "transition/"), {"status": "delivered"}, format="json"
        )
        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "illegal_transition"

    def test_worker_transition_on_foreign_order_is_403(
        self, client_for, make_order, other_worker, worker
    ):
        order = make_order(status=OrderStatus.PACKED, assigned_to=other_worker.username)
        response = client_for(worker).post(
            _detail(order, "transition/"), {"status": "shipped"}, format="json"
        )
        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "forbidden"

    def test_packed_requires_completed_workflow(
        self, client_for, make_order, make_task, worker
    ):
        order = make_order(status=OrderStatus.PACKING, assigned_to=worker.username)
        make_task(order, TaskType.PACKING, status=TaskStatus.COMPLETED)
        response = client_for(worker).post(
            _detail(order, "transition/"), {"status": "packed"}, format="json"
        )
        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "prerequisite_not_met"

    def test_assign_and_unassign(self, client_for, make_order, admin, worker):
        order = make_order()
        client = client_for(admin)

        response = client.post(_detail(order, "assign/"), {"worker_id": "ravi"}, format="json")
        assert response.status_code == 200
        assert response.json()["assigned_to"] == "ravi"

        response = client.post(_detail(order, "assign/"), {"worker_id": None}, format="json")
        assert response.json()["assigned_to"] is None

    def test_assign_unknown_worker_is_400(self, client_for, make_order, admin):
        order = make_order()
        response = client_for(admin).post(
            _detail(order, "assign/"), {"worker_id": "ghost"}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "worker_not_found"

    def test_worker_cannot_assign(self, client_for, make_order, worker):
        order = make_order()
        response = client_for(worker).post(
            _detail(order, "assign/"), {"worker_id": "ravi"}, format="json"
        )
        assert response.status_code == 403

    def test_patch_details(self, client_for, make_order, admin):
        order = make_order(status=OrderStatus.SHIPPED)
        response = client_for(admin).patch(
            _detail(order),
            {"tracking_number": "DL123456789IN", "courier_company": "Delhivery"},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["tracking_number"] == "DL123456789IN"
        assert response.json()["status"] == "shipped"

    def test_workflow_summary(self, client_for, make_order, make_task, worker):
        order = make_order(status=OrderStatus.PROCESSING, assigned_to=worker.username)
        make_task(order, TaskType.PACKING, status=TaskStatus.COMPLETED)

        response = client_for(worker).get(_detail(order, "workflow/"))

        assert response.status_code == 200
        body = response.json()
        assert body["progress_percent"] == 33
        assert body["current_step"] == "quality_check"


class TestRefunds:
    def test_refund_flow(self, client_for, make_prepaid_order, admin):
        order = make_prepaid_order(status=OrderStatus.CANCELLED)
        client = client_for(admin)

        details = client.get(_detail(order, "refund/"))
        assert details.status_code == 200
        assert details.json()["can_refund"] is True
        assert details.json()["refund_status"] is None

        for refund_status in ("started", "processing", "completed"):
            response = client.put(
                _detail(order, "refund/"), {"refund_status": refund_status}, format="json"
            )
            assert response.status_code == 200

        body = response.json()
        assert body["refund_status"] == "completed"
        assert body["payment_status"] == "refunded"

    def test_cod_refund_is_not_applicable(self, client_for, make_order, admin):
        order = make_order(status=OrderStatus.CANCELLED)
        response = client_for(admin).put(
            _detail(order, "refund/"), {"refund_status": "started"}, format="json"
        )
        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "refund_not_applicable"

    def test_worker_cannot_view_refund(self, client_for, make_prepaid_order, worker):
        order = make_prepaid_order(status=OrderStatus.CANCELLED, assigned_to=worker.username)
        assert client_for(worker).get(_detail(order, "refund/")).status_code == 403
