from __future__ import annotations
import logging
import threading
from collections import deque
from datetime import datetime
from typing import Callable, List, Literal, Tuple

from models import Schedule, StudyTask
from timeslots import slot_start

logger = logging.getLogger(__name__)

Permission = Literal["default", "granted", "denied"]

FOCUS_MINUTES = 25
TIMER_MESSAGES = {
    "focus": ("Focus session complete!", "Time to take a short break."),
    "break": ("Break's over!", "Let's get back to studying."),
}


class NotificationSink:
    """
    Local notification display. Delivery requires a granted permission;
    without it every send is a silent no-op.
    """

    def __init__(self, permission: Permission = "default"):
        self.permission: Permission = permission

    def request_permission(self, granted: bool = True) -> Permission:
        # A decision, once made, sticks until the user changes it explicitly.
        if self.permission == "default":
            self.permission = "granted" if granted else "denied"
        return self.permission

    def set_permission(self, permission: Permission) -> None:
        self.permission = permission

    def send(self, title: str, body: str) -> None:
        if self.permission != "granted":
            logger.debug("Notification dropped, permission is %s: %s", self.permission, title)
            return
        try:
            self._display(title, body)
        except Exception:
            logger.warning("Could not display notification %r", title, exc_info=True)

    def _display(self, title: str, body: str) -> None:
        raise NotImplementedError


class QueueSink(NotificationSink):
    """
    Buffers notifications until the UI drains them. Safe to call from timer
    threads.
    """

    def __init__(self, permission: Permission = "default", maxlen: int = 100):
        super().__init__(permission)
        self._queue: deque[Tuple[str, str]] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def _display(self, title: str, body: str) -> None:
        with self._lock:
            self._queue.append((title, body))

    def drain(self) -> List[Tuple[str, str]]:
        with self._lock:
            items = list(self._queue)
            self._queue.clear()
        return items


def notify_now(sink: NotificationSink, title: str, body: str) -> None:
    sink.send(title, body)


def reminder_title(task: StudyTask) -> str:
    return f"Time for {task.subject}!"


def reminder_body(task: StudyTask) -> str:
    return f"Let's start: {task.topic}"


def reminder_times(schedule: Schedule, now: datetime) -> List[Tuple[datetime, StudyTask]]:
    """
    Fire time for every task whose slot starts strictly after `now`.
    Every slot is parsed before anything is returned, so a malformed slot
    raises TimeSlotError instead of yielding a partial list.
    """
    planned: List[Tuple[datetime, StudyTask]] = []
    for day, tasks in schedule:
        for task in tasks:
            fire_at = slot_start(day, task.time_slot)
            if fire_at > now:
                planned.append((fire_at, task))
            else:
                logger.debug("Skipping past reminder for task %s at %s", task.id, fire_at)
    return planned


class Reminder:
    __slots__ = ("task_id", "fire_at", "title", "body", "timer", "cancelled")

    def __init__(self, task: StudyTask, fire_at: datetime):
        self.task_id = task.id
        self.fire_at = fire_at
        self.title = reminder_title(task)
        self.body = reminder_body(task)
        self.timer = None
        self.cancelled = False

    def __repr__(self) -> str:
        return f"Reminder(task_id={self.task_id}, fire_at={self.fire_at.isoformat()})"


class ReminderRegistry:
    """
    Tracks every outstanding deferred reminder for one session.
    `cancel_all` invalidates all of them at once; a timer that has already
    woken up re-checks its generation under the lock before delivering.
    """

    def __init__(
        self,
        sink: NotificationSink,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self._sink = sink
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: List[Reminder] = []
        self._generation = 0

    def schedule(self, schedule: Schedule, now: datetime | None = None) -> int:
        now = now or datetime.now()
        return self._register(reminder_times(schedule, now), now)

    def replace(self, schedule: Schedule, now: datetime | None = None) -> int:
        """Cancel everything outstanding and schedule reminders for `schedule`."""
        now = now or datetime.now()
        planned = reminder_times(schedule, now)
        self.cancel_all()
        return self._register(planned, now)

    def _register(self, planned: List[Tuple[datetime, StudyTask]], now: datetime) -> int:
        with self._lock:
            generation = self._generation
            for fire_at, task in planned:
                reminder = Reminder(task, fire_at)
                delay = (fire_at - now).total_seconds()
                timer = self._timer_factory(delay, self._fire, args=(reminder, generation))
                timer.daemon = True
                reminder.timer = timer
                self._pending.append(reminder)
                timer.start()

        logger.info("Scheduled %d reminders", len(planned))
        return len(planned)

    def _fire(self, reminder: Reminder, generation: int) -> None:
        with self._lock:
            if reminder.cancelled or generation != self._generation:
                logger.info("Stale reminder for task %s suppressed", reminder.task_id)
                return
            if reminder in self._pending:
                self._pending.remove(reminder)
        self._sink.send(reminder.title, reminder.body)

    def cancel_all(self) -> int:
        with self._lock:
            self._generation += 1
            pending, self._pending = self._pending, []
            for reminder in pending:
                reminder.cancelled = True
        for reminder in pending:
            if reminder.timer is not None:
                reminder.timer.cancel()
        if pending:
            logger.info(
                "Cancelled %d reminders; one already being delivered may still appear",
                len(pending),
            )
        return len(pending)

    def pending(self) -> List[Reminder]:
        with self._lock:
            return list(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


def start_timer_alert(
    sink: NotificationSink,
    mode: str = "focus",
    minutes: float = FOCUS_MINUTES,
    timer_factory: Callable[..., threading.Timer] = threading.Timer,
) -> threading.Timer:
    """One-shot focus/break countdown that ends with an immediate notification."""
    if mode not in TIMER_MESSAGES:
        raise ValueError(f"Unknown timer mode: {mode}")
    if minutes <= 0:
        raise ValueError("Timer length must be positive.")
    title, body = TIMER_MESSAGES[mode]
    timer = timer_factory(minutes * 60, notify_now, args=(sink, title, body))
    timer.daemon = True
    timer.start()
    return timer
