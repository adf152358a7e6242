"""Unit tests for the refund sub-flow of cancelled, prepaid orders."""

from __future__ import annotations

import pytest

from modules.core.exceptions import Forbidden, IllegalTransition
from modules.orders.constants import OrderStatus, PaymentStatus, RefundStatus
from modules.orders.dtos import RefundUpdateDTO
from modules.orders.exceptions import RefundNotApplicable
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def cancelled_prepaid(make_prepaid_order):
    return make_prepaid_order(status=OrderStatus.CANCELLED)


def _refund(status, **kwargs):
    return RefundUpdateDTO(refund_status=status, **kwargs)


def test_full_refund_flow(order_service, cancelled_prepaid, admin_actor):
    order_id = str(cancelled_prepaid.id)

    started = order_service.update_refund(order_id, _refund(RefundStatus.STARTED), admin_actor)
    assert started.refund_status == RefundStatus.STARTED
    assert started.payment_status == PaymentStatus.PAID

    order_service.update_refund(
        order_id,
        _refund(RefundStatus.PROCESSING, refund_reference=" rfnd_7781 "),
        admin_actor,
    )
    done = order_service.update_refund(
        order_id, _refund(RefundStatus.COMPLETED, notes="Refunded to UPI"), admin_actor
    )

    assert done.refund_status == RefundStatus.COMPLETED
    assert done.payment_status == PaymentStatus.REFUNDED
    assert done.refund_reference == "rfnd_7781"
    assert done.refund_notes == "Refunded to UPI"
    assert done.status == OrderStatus.CANCELLED


def test_failed_refund_can_restart(order_service, cancelled_prepaid, admin_actor):
    order_id = str(cancelled_prepaid.id)
    order_service.update_refund(order_id, _refund(RefundStatus.STARTED), admin_actor)
    order_service.update_refund(order_id, _refund(RefundStatus.FAILED), admin_actor)
    again = order_service.update_refund(order_id, _refund(RefundStatus.STARTED), admin_actor)
    assert again.refund_status == RefundStatus.STARTED


def test_cannot_skip_to_processing(order_service, cancelled_prepaid, admin_actor):
    with pytest.raises(IllegalTransition):
        order_service.update_refund(
            str(cancelled_prepaid.id), _refund(RefundStatus.PROCESSING), admin_actor
        )


def test_completed_is_final(order_service, cancelled_prepaid, admin_actor):
    order_id = str(cancelled_prepaid.id)
    for status in (RefundStatus.STARTED, RefundStatus.PROCESSING, RefundStatus.COMPLETED):
        order_service.update_refund(order_id, _refund(status), admin_actor)
    with pytest.raises(IllegalTransition):
        order_service.update_refund(order_id, _refund(RefundStatus.STARTED), admin_actor)


def test_cod_order_is_not_refundable(order_service, make_order, admin_actor):
    order = make_order(status=OrderStatus.CANCELLED)
    with pytest.raises(RefundNotApplicable) as exc_info:
        order_service.update_refund(str(order.id), _refund(RefundStatus.STARTED), admin_actor)
    assert exc_info.value.code == "refund_not_applicable"


def test_order_must_be_cancelled(order_service, make_prepaid_order, admin_actor):
    order = make_prepaid_order()
    with pytest.raises(RefundNotApplicable):
        order_service.update_refund(str(order.id), _refund(RefundStatus.STARTED), admin_actor)


def test_worker_is_forbidden(order_service, cancelled_prepaid, worker, worker_actor):
    with pytest.raises(Forbidden):
        order_service.update_refund(
            str(cancelled_prepaid.id), _refund(RefundStatus.STARTED), worker_actor
        )


def test_concurrent_refund_change_is_rejected(
    order_service, cancelled_prepaid, admin_actor, monkeypatch
):
    order_id = str(cancelled_prepaid.id)
    order_service.update_refund(order_id, _refund(RefundStatus.STARTED), admin_actor)

    original = OrderDjangoRepository.update_refund

    def update_refund(self, *args, **kwargs):
        Order.objects.filter(id=cancelled_prepaid.id).update(refund_status=RefundStatus.FAILED)
        return original(self, *args, **kwargs)

    monkeypatch.setattr(OrderDjangoRepository, "update_refund", update_refund)

    with pytest.raises(IllegalTransition):
        order_service.update_refund(order_id, _refund(RefundStatus.PROCESSING), admin_actor)

    cancelled_prepaid.refresh_from_db()
    assert cancelled_prepaid.refund_status == RefundStatus.FAILED


def test_refund_details(order_service, cancelled_prepaid, admin_actor):
    details = order_service.get_refund_details(cancelled_prepaid.order_number, admin_actor)
    assert details.order_number == cancelled_prepaid.order_number
    assert details.payment_method == "upi"
    assert details.refund_status is None
    assert details.can_refund is True


def test_refund_details_are_admin_only(order_service, cancelled_prepaid, worker_actor):
    with pytest.raises(Forbidden):
        order_service.get_refund_details(str(cancelled_prepaid.id), worker_actor)
