from __future__ import annotations
from datetime import date, datetime

from models import StudyPlan, StudyTask


NOW = datetime(2024, 3, 10, 10, 0)


class FakeTimer:
    """Stands in for threading.Timer; tests fire it by hand."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # Mirrors threading.Timer: a cancelled timer never runs.
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)

    def fire_anyway(self):
        self.function(*self.args, **self.kwargs)


def make_task(task_id: int, **overrides) -> StudyTask:
    values = dict(
        id=task_id,
        day="Monday",
        time_slot="9:00 AM - 11:00 AM",
        subject=f"Subject {task_id}",
        topic=f"Topic {task_id}",
        task=f"Do task {task_id}",
        description="",
    )
    values.update(overrides)
    return StudyTask(**values)


def make_plan(count: int, deadline: date, plan_id: str = "plan-1", **task_overrides) -> StudyPlan:
    return StudyPlan(
        id=plan_id,
        title="Math",
        created_at=NOW,
        deadline=deadline,
        tasks=[make_task(i, **task_overrides) for i in range(count)],
    )
