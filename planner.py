from __future__ import annotations
import logging
import math
from datetime import date, datetime, time, timedelta
from typing import List

from models import Schedule, StudyPlan
from reminders import ReminderRegistry

logger = logging.getLogger(__name__)


def study_days(today: date, deadline: date) -> List[date]:
    """Every calendar date from tomorrow through the deadline, inclusive."""
    start = today + timedelta(days=1)
    return [start + timedelta(days=i) for i in range((deadline - start).days + 1)]


def distribute_tasks(plan: StudyPlan | None, now: datetime | None = None) -> Schedule:
    """
    Spread the plan's tasks, in order, across [tomorrow, deadline].
    Each date takes ceil(tasks / days) tasks; dates left over once the
    list runs out are not added. When the window is empty (deadline is
    today or already gone) every task lands on a single date.
    """
    if plan is None or not plan.tasks:
        return Schedule()

    now = now or datetime.now()
    tasks = list(plan.tasks)
    start = datetime.combine(now.date() + timedelta(days=1), time.min)
    end = datetime.combine(plan.deadline, time.max)

    if start > end:
        target = start.date() if now > end else plan.deadline
        logger.debug("Deadline %s leaves no study days; using %s", plan.deadline, target)
        return Schedule([(target, tasks)])

    days = study_days(now.date(), plan.deadline)
    per_day = math.ceil(len(tasks) / len(days))

    schedule = Schedule()
    for i, d in enumerate(days):
        chunk = tasks[i * per_day:(i + 1) * per_day]
        if not chunk:
            break
        schedule.add(d, chunk)
    return schedule


def build_schedule(
    plan: StudyPlan | None,
    reminders: ReminderRegistry,
    now: datetime | None = None,
) -> Schedule:
    """
    Distribute the plan and swap outstanding reminders for ones matching
    the new schedule. A malformed time slot raises before any reminder is
    cancelled.
    """
    now = now or datetime.now()
    schedule = distribute_tasks(plan, now)
    reminders.replace(schedule, now)
    return schedule
