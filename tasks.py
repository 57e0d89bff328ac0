from __future__ import annotations
import math
from datetime import datetime
from typing import Optional

from models import StudyPlan, StudyTask, Subtask


def _rounded_percent(part: int, whole: int) -> int:
    # Half-up, so 12.5 -> 13 rather than banker's rounding.
    return int(math.floor(100 * part / whole + 0.5))


def recompute_progress(task: StudyTask) -> StudyTask:
    if not task.subtasks:
        return task
    done = sum(1 for st in task.subtasks if st.completed)
    return task.model_copy(update={"progress": _rounded_percent(done, len(task.subtasks))})


def toggle_status(plan: StudyPlan, task_id: int, now: datetime | None = None) -> StudyPlan:
    """
    Flip one task between pending and completed. Completing stamps
    completed_at and sets progress to 100; reopening clears completed_at
    but keeps progress. Unknown ids return the plan unchanged.
    """
    if plan.find_task(task_id) is None:
        return plan
    now = now or datetime.now()

    tasks = []
    for task in plan.tasks:
        if task.id == task_id:
            if task.status == "pending":
                task = task.model_copy(update={
                    "status": "completed",
                    "progress": 100,
                    "completed_at": now,
                })
            else:
                task = task.model_copy(update={"status": "pending", "completed_at": None})
        tasks.append(task)
    return plan.model_copy(update={"tasks": tasks})


def update_task(plan: StudyPlan, updated: StudyTask) -> StudyPlan:
    """Replace the task with the same id, recomputing progress from its subtasks."""
    if plan.find_task(updated.id) is None:
        return plan
    updated = recompute_progress(updated)
    tasks = [updated if t.id == updated.id else t for t in plan.tasks]
    return plan.model_copy(update={"tasks": tasks})


def add_subtask(task: StudyTask, text: str) -> StudyTask:
    text = (text or "").strip()
    if not text:
        raise ValueError("Subtask description cannot be empty.")
    next_id = max((st.id for st in task.subtasks), default=-1) + 1
    subtasks = [*task.subtasks, Subtask(id=next_id, text=text)]
    return task.model_copy(update={"subtasks": subtasks})


def toggle_subtask(task: StudyTask, subtask_id: int) -> StudyTask:
    subtasks = [
        st.model_copy(update={"completed": not st.completed}) if st.id == subtask_id else st
        for st in task.subtasks
    ]
    return task.model_copy(update={"subtasks": subtasks})


def plan_progress(plan: Optional[StudyPlan]) -> int:
    if plan is None or not plan.tasks:
        return 0
    done = sum(1 for t in plan.tasks if t.status == "completed")
    return _rounded_percent(done, len(plan.tasks))
