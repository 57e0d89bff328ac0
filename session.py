from __future__ import annotations
import logging
import threading
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError

import tasks as task_ops
from analytics import OverdueWatcher, compute_stats, overdue_message, overdue_tasks
from config import AppConfig
from generator import create_plan, generate_study_tasks
from models import GenerationRequest, ProfileStats, Schedule, StudyPlan, StudyTask
from notifications import NotificationFeed
from planner import build_schedule
from reminders import FOCUS_MINUTES, NotificationSink, QueueSink, ReminderRegistry, start_timer_alert

logger = logging.getLogger(__name__)

Generator = Callable[[GenerationRequest, AppConfig], Optional[List[StudyTask]]]


class PlannerSession:
    """
    State for one user session: the active plan, the plans generated so
    far, the derived schedule and stats, in-app notifications and the
    reminder registry. Every change to the active plan goes through
    `_set_active`, which rebuilds the schedule, re-arms reminders and
    recomputes stats in one pass against a single `now`.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        sink: NotificationSink | None = None,
        reminders: ReminderRegistry | None = None,
        generate: Generator | None = None,
        clock: Callable[[], datetime] = datetime.now,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.config = config or AppConfig.from_env()
        self.sink = sink or QueueSink()
        self.reminders = reminders or ReminderRegistry(self.sink, timer_factory=timer_factory)
        self.feed = NotificationFeed(self.config.notification_limit)
        self.watcher = OverdueWatcher()
        self._generate = generate or generate_study_tasks
        self._clock = clock
        self._timer_factory = timer_factory
        self._alert_timer: Optional[threading.Timer] = None

        self.active_plan: Optional[StudyPlan] = None
        self.history: List[StudyPlan] = []
        self.schedule = Schedule()
        self.stats = ProfileStats()

    def _now(self, now: datetime | None) -> datetime:
        return now or self._clock()

    def welcome(self, name: str, now: datetime | None = None) -> None:
        self.sink.request_permission()
        self.feed.add(
            f"Welcome back, {name}! Let's get your study session organized.",
            "info",
            now=self._now(now),
        )

    # --- plan lifecycle ---

    def generate_plan(
        self,
        subjects: str,
        deadline: date | str | None,
        hours_per_day: float | str | None,
        notes: str = "",
        now: datetime | None = None,
    ) -> StudyPlan:
        """
        Generate, store and activate a new plan. Raises ValueError with a
        user-facing message; on failure the current plan is left alone.
        """
        now = self._now(now)
        try:
            request = GenerationRequest(
                subjects=subjects or "",
                deadline=deadline,
                hours_per_day=hours_per_day,
                notes=notes or "",
            )
        except ValidationError as e:
            raise ValueError("Please fill in all fields.") from e

        tasks = self._generate(request, self.config)
        if not tasks:
            raise ValueError("Failed to generate a study plan. Please try again.")

        plan = create_plan(request, tasks, now)
        self._set_active(plan, now)
        self.history.append(plan)
        self.feed.add(
            f'Successfully generated a new study plan for "{plan.title}".',
            "success",
            now=now,
        )
        return plan

    def select_plan(self, plan_id: str, now: datetime | None = None) -> Optional[StudyPlan]:
        plan = next((p for p in self.history if p.id == plan_id), None)
        if plan is not None:
            self._set_active(plan, self._now(now))
        return plan

    def clear_plan(self) -> None:
        self.reminders.cancel_all()
        self.active_plan = None
        self.schedule = Schedule()
        self.stats = ProfileStats()
        self.watcher.reset()

    # --- task mutations ---

    def toggle_task(self, task_id: int, now: datetime | None = None) -> Optional[StudyTask]:
        if self.active_plan is None:
            return None
        now = self._now(now)
        plan = task_ops.toggle_status(self.active_plan, task_id, now)
        if plan is self.active_plan:
            return None
        task = plan.find_task(task_id)
        if task.status == "completed":
            self.feed.add(f'Great job! You\'ve completed the task: "{task.topic}".', "success", now=now)
        self._set_active(plan, now)
        return task

    def update_task(self, task: StudyTask, now: datetime | None = None) -> Optional[StudyTask]:
        if self.active_plan is None:
            return None
        plan = task_ops.update_task(self.active_plan, task)
        if plan is self.active_plan:
            return None
        self._set_active(plan, self._now(now))
        return plan.find_task(task.id)

    def add_subtask(self, task_id: int, text: str, now: datetime | None = None) -> Optional[StudyTask]:
        task = self.find_task(task_id)
        if task is None:
            return None
        return self.update_task(task_ops.add_subtask(task, text), now)

    def toggle_subtask(self, task_id: int, subtask_id: int, now: datetime | None = None) -> Optional[StudyTask]:
        task = self.find_task(task_id)
        if task is None:
            return None
        return self.update_task(task_ops.toggle_subtask(task, subtask_id), now)

    def find_task(self, task_id: int) -> Optional[StudyTask]:
        return None if self.active_plan is None else self.active_plan.find_task(task_id)

    # --- derived state ---

    def _set_active(self, plan: StudyPlan, now: datetime) -> None:
        schedule = build_schedule(plan, self.reminders, now)
        self.active_plan = plan
        self.history = [plan if p.id == plan.id else p for p in self.history]
        self.schedule = schedule
        self.refresh(now)

    def refresh(self, now: datetime | None = None) -> ProfileStats:
        """Recompute stats against the current plan and schedule, announcing new overdue tasks."""
        now = self._now(now)
        plan = self.active_plan
        if plan is None:
            self.stats = ProfileStats()
            return self.stats

        self.stats = compute_stats(plan.tasks, self.schedule, now)
        overdue = overdue_tasks(plan.tasks, self.schedule, now)
        for task in self.watcher.newly_overdue(plan, overdue):
            self.feed.add(overdue_message(task), "warning", now=now)
        return self.stats

    @property
    def plan_progress(self) -> int:
        return task_ops.plan_progress(self.active_plan)

    # --- timers and alerts ---

    def _start_alert(self, mode: str, minutes: float) -> threading.Timer:
        # Only one focus or break countdown runs at a time.
        timer = start_timer_alert(self.sink, mode, minutes, timer_factory=self._timer_factory)
        self.cancel_alert()
        self._alert_timer = timer
        return timer

    def start_focus(self, minutes: float = FOCUS_MINUTES) -> threading.Timer:
        return self._start_alert("focus", minutes)

    def start_break(self, minutes: float) -> threading.Timer:
        return self._start_alert("break", minutes)

    def cancel_alert(self) -> bool:
        if self._alert_timer is None:
            return False
        self._alert_timer.cancel()
        self._alert_timer = None
        return True

    def drain_alerts(self) -> List[Tuple[str, str]]:
        if isinstance(self.sink, QueueSink):
            return self.sink.drain()
        return []

    def close(self) -> None:
        self.cancel_alert()
        self.reminders.cancel_all()
