"""Unit tests for the fulfillment workflow engine (pure functions)."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from modules.fulfillment import workflow
from modules.fulfillment.constants import TaskStatus, TaskType

pytestmark = pytest.mark.unit


@dataclass
class FakeTask:
    type: str
    status: str = TaskStatus.PENDING


def _done(*types):
    return [FakeTask(t, TaskStatus.COMPLETED) for t in types]


def test_steps_are_ordered():
    assert [s.type for s in workflow.WORKFLOW_STEPS] == [
        TaskType.PACKING,
        TaskType.QUALITY_CHECK,
        TaskType.SHIPPING_PREP,
    ]
    assert [s.order for s in workflow.WORKFLOW_STEPS] == [1, 2, 3]


class TestNavigation:
    def test_next_step_from_nothing_is_packing(self):
        assert workflow.next_step(None).type == TaskType.PACKING

    def test_next_step_chain(self):
        assert workflow.next_step(TaskType.PACKING).type == TaskType.QUALITY_CHECK
        assert workflow.next_step(TaskType.QUALITY_CHECK).type == TaskType.SHIPPING_PREP
        assert workflow.next_step(TaskType.SHIPPING_PREP) is None

    def test_unknown_type(self):
        assert workflow.next_step("gift_wrap") is None
        assert workflow.step_by_type("gift_wrap") is None
        assert workflow.steps_up_to("gift_wrap") == ()

    def test_previous_step(self):
        assert workflow.previous_step(TaskType.PACKING) is None
        assert workflow.previous_step(TaskType.SHIPPING_PREP).type == TaskType.QUALITY_CHECK

    def test_steps_up_to(self):
        steps = workflow.steps_up_to(TaskType.QUALITY_CHECK)
        assert [s.type for s in steps] == [TaskType.PACKING, TaskType.QUALITY_CHECK]


class TestProgress:
    @pytest.mark.parametrize(
        "tasks, expected",
        [
            ([], 0),
            (_done(TaskType.PACKING), 33),
            (_done(TaskType.PACKING, TaskType.QUALITY_CHECK), 67),
            (_done(TaskType.PACKING, TaskType.QUALITY_CHECK, TaskType.SHIPPING_PREP), 100),
        ],
    )
    def test_progress_percent(self, tasks, expected):
        assert workflow.progress_percent(tasks) == expected

    def test_open_tasks_do_not_count(self):
        tasks = [
            FakeTask(TaskType.PACKING, TaskStatus.IN_PROGRESS),
            FakeTask(TaskType.QUALITY_CHECK, TaskStatus.CANCELLED),
        ]
        assert workflow.progress_percent(tasks) == 0

    def test_hundred_only_when_every_step_is_done(self):
        tasks = _done(TaskType.PACKING, TaskType.SHIPPING_PREP)
        assert workflow.progress_percent(tasks) == 67
        assert workflow.current_step(tasks).type == TaskType.QUALITY_CHECK


class TestCurrentStep:
    def test_fresh_order_starts_with_packing(self):
        assert workflow.current_step([]).type == TaskType.PACKING
        assert not workflow.has_started([])

    def test_started_but_not_completed(self):
        tasks = [FakeTask(TaskType.PACKING, TaskStatus.IN_PROGRESS)]
        assert workflow.has_started(tasks)
        assert workflow.current_step(tasks).type == TaskType.PACKING

    def test_done(self):
        tasks = _done(TaskType.PACKING, TaskType.QUALITY_CHECK, TaskType.SHIPPING_PREP)
        assert workflow.current_step(tasks) is None
        assert [s.type for s in workflow.completed_steps(tasks)] == [
            TaskType.PACKING,
            TaskType.QUALITY_CHECK,
            TaskType.SHIPPING_PREP,
        ]
