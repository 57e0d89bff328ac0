from __future__ import annotations
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence, Set

from models import ProfileStats, Schedule, StudyPlan, StudyTask


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time.min)


def overdue_tasks(tasks: Sequence[StudyTask], schedule: Schedule, now: datetime) -> List[StudyTask]:
    """
    Pending tasks whose scheduled date is before today. The date comes from
    the schedule, not from the task's own day label.
    """
    today_start = _midnight(now.date())
    out: List[StudyTask] = []
    for task in tasks:
        d = schedule.date_of(task.id)
        if d is not None and task.status == "pending" and _midnight(d) < today_start:
            out.append(task)
    return out


def completed_in_window(tasks: Sequence[StudyTask], now: datetime, days: int = 7) -> int:
    window_start = _midnight(now.date() - timedelta(days=days - 1))
    return sum(
        1 for t in tasks
        if t.status == "completed"
        and t.completed_at is not None
        and window_start <= t.completed_at <= now
    )


def completion_streak(tasks: Sequence[StudyTask], today: date) -> int:
    """Consecutive days with a completion, counting back from today."""
    active_days: Set[date] = {
        t.completed_at.date()
        for t in tasks
        if t.status == "completed" and t.completed_at is not None
    }
    streak = 0
    cursor = today
    while cursor in active_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_stats(
    tasks: Sequence[StudyTask] | None,
    schedule: Schedule,
    now: datetime,
) -> ProfileStats:
    if not tasks:
        return ProfileStats()

    overdue = len(overdue_tasks(tasks, schedule, now))
    return ProfileStats(
        pending_tasks=sum(1 for t in tasks if t.status == "pending"),
        overdue_tasks=overdue,
        completed_last_7_days=completed_in_window(tasks, now),
        # Any overdue backlog breaks the streak.
        streak=0 if overdue else completion_streak(tasks, now.date()),
    )


def overdue_message(task: StudyTask) -> str:
    return f'Task "{task.topic}" is overdue. Catch up when you can!'


class OverdueWatcher:
    """Remembers which overdue tasks were already announced for the active plan."""

    def __init__(self):
        self._plan_id: Optional[str] = None
        self._seen: Set[int] = set()

    def reset(self, plan_id: Optional[str] = None) -> None:
        self._plan_id = plan_id
        self._seen = set()

    def newly_overdue(self, plan: StudyPlan | None, overdue: Sequence[StudyTask]) -> List[StudyTask]:
        plan_id = plan.id if plan is not None else None
        if plan_id != self._plan_id:
            self.reset(plan_id)
        fresh = [t for t in overdue if t.id not in self._seen]
        self._seen.update(t.id for t in fresh)
        return fresh

    @property
    def seen(self) -> Set[int]:
        return set(self._seen)
