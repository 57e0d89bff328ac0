from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from typing import Dict, Iterator, List, Literal, Optional, Tuple


TaskStatus = Literal["pending", "completed"]
NotificationType = Literal["info", "success", "warning"]


class Subtask(BaseModel):
    id: int
    text: str
    completed: bool = False


class StudyTask(BaseModel):
    id: int
    status: TaskStatus = "pending"
    day: str = ""
    time_slot: str
    subject: str
    topic: str
    task: str
    description: str = ""
    progress: int = Field(default=0, ge=0, le=100)
    subtasks: List[Subtask] = Field(default_factory=list)
    completed_at: Optional[datetime] = None
    image_url: Optional[str] = None


class StudyPlan(BaseModel):
    id: str
    title: str
    created_at: datetime
    deadline: date
    tasks: List[StudyTask] = Field(default_factory=list)

    def find_task(self, task_id: int) -> Optional[StudyTask]:
        return next((t for t in self.tasks if t.id == task_id), None)


class ProfileStats(BaseModel):
    pending_tasks: int = 0
    overdue_tasks: int = 0
    completed_last_7_days: int = 0
    streak: int = 0


class AppNotification(BaseModel):
    id: str
    message: str
    timestamp: datetime
    read: bool = False
    type: NotificationType = "info"


class GenerationRequest(BaseModel):
    subjects: str
    deadline: date
    hours_per_day: float = Field(gt=0, le=24)
    notes: str = ""

    @field_validator("subjects")
    @classmethod
    def _subjects_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("At least one subject is required.")
        return value

    @property
    def title(self) -> str:
        return self.subjects.split(",")[0].strip() or "New Study Plan"


class GeneratedTask(BaseModel):
    """One task record as returned by the generation service."""
    model_config = ConfigDict(populate_by_name=True)

    day: str
    time_slot: str = Field(alias="timeSlot")
    subject: str
    topic: str
    task: str
    description: str


class GeneratedPlan(BaseModel):
    plan: List[GeneratedTask]


class Schedule:
    """
    Ordered association of calendar date -> tasks due that day.
    Dates are kept in insertion (chronological) order; a task-id index
    answers "which date holds this task" without scanning.
    """

    def __init__(self, days: List[Tuple[date, List[StudyTask]]] | None = None):
        self._days: List[Tuple[date, List[StudyTask]]] = []
        self._by_key: Dict[str, int] = {}
        self._task_dates: Dict[int, date] = {}
        for d, tasks in days or []:
            self.add(d, tasks)

    @staticmethod
    def key(d: date) -> str:
        return d.isoformat()

    def add(self, d: date, tasks: List[StudyTask]) -> None:
        k = self.key(d)
        if k in self._by_key:
            raise ValueError(f"Date {k} is already scheduled.")
        if not tasks:
            raise ValueError("A scheduled date must hold at least one task.")
        self._by_key[k] = len(self._days)
        self._days.append((d, list(tasks)))
        for t in tasks:
            self._task_dates[t.id] = d

    def get(self, key: str | date) -> List[StudyTask]:
        if isinstance(key, date):
            key = self.key(key)
        idx = self._by_key.get(key)
        return [] if idx is None else list(self._days[idx][1])

    def date_of(self, task_id: int) -> Optional[date]:
        return self._task_dates.get(task_id)

    def keys(self) -> List[str]:
        return [self.key(d) for d, _ in self._days]

    def items(self) -> List[Tuple[str, List[StudyTask]]]:
        return [(self.key(d), list(tasks)) for d, tasks in self._days]

    def tasks(self) -> List[StudyTask]:
        return [t for _, tasks in self._days for t in tasks]

    def __iter__(self) -> Iterator[Tuple[date, List[StudyTask]]]:
        return iter([(d, list(tasks)) for d, tasks in self._days])

    def __len__(self) -> int:
        return len(self._days)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, date):
            key = self.key(key)
        return key in self._by_key

    def __repr__(self) -> str:
        return f"Schedule({', '.join(f'{k}: {len(v)}' for k, v in self.items())})"
