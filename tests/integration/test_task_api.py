from __future__ import annotations

import pytest

from modules.fulfillment.constants import TaskStatus, TaskType
from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

TASKS_URL = "/api/v1/tasks/"


@pytest.fixture()
def assigned_order(make_order, worker):
    return make_order(status=OrderStatus.PROCESSING, assigned_to=worker.username)


def test_admin_creates_task_and_worker_completes_it(client_for, assigned_order, admin, worker):
    created = client_for(admin).post(
        TASKS_URL,
        {"order_id": assigned_order.order_number, "type": "packing", "priority": "high"},
        format="json",
    )
    assert created.status_code == 201
    task = created.json()
    assert task["assigned_to"] == "ravi"
    assert task["priority"] == "high"

    updated = client_for(worker).patch(
        f"{TASKS_URL}{task['id']}/", {"status": "completed"}, format="json"
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "completed"
    assert updated.json()["completed_at"] is not None


def test_out_of_order_step_is_409(client_for, assigned_order, admin):
    response = client_for(admin).post(
        TASKS_URL, {"order_id": str(assigned_order.id), "type": "shipping_prep"}, format="json"
    )
    assert response.status_code == 409
    assert response.json()["errors"][0]["code"] == "prerequisite_not_met"


def test_worker_cannot_create(client_for, assigned_order, worker):
    response = client_for(worker).post(
        TASKS_URL, {"order_id": str(assigned_order.id), "type": "packing"}, format="json"
    )
    assert response.status_code == 403


def test_worker_cannot_reprioritize(client_for, assigned_order, make_task, worker):
    task = make_task(assigned_order, TaskType.PACKING)
    response = client_for(worker).patch(
        f"{TASKS_URL}{task.id}/", {"priority": "high"}, format="json"
    )
    assert response.status_code == 403


def test_list_is_scoped_and_filterable(
    client_for, make_order, make_task, worker, other_worker, admin
):
    mine = make_order(status=OrderStatus.PROCESSING, assigned_to=worker.username)
    theirs = make_order(status=OrderStatus.PROCESSING, assigned_to=other_worker.username)
    make_task(mine, TaskType.PACKING, status=TaskStatus.COMPLETED)
    make_task(theirs, TaskType.PACKING)

    worker_view = client_for(worker).get(TASKS_URL).json()
    assert [t["order_number"] for t in worker_view] == [mine.order_number]

    admin_view = client_for(admin).get(TASKS_URL, {"status": "pending"}).json()
    assert [t["order_number"] for t in admin_view] == [theirs.order_number]


def test_foreign_task_is_404_for_worker(client_for, make_order, make_task, other_worker, worker):
    order = make_order(status=OrderStatus.PROCESSING, assigned_to=other_worker.username)
    task = make_task(order, TaskType.PACKING)
    response = client_for(worker).get(f"{TASKS_URL}{task.id}/")
    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "task_not_found"
