from __future__ import annotations
import logging
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from google import genai
from google.genai import types

from config import AppConfig
from models import GeneratedPlan, GenerationRequest, StudyPlan, StudyTask
from timeslots import TimeSlotError, slot_hours

logger = logging.getLogger(__name__)


_TASK_FIELDS = {
    "day": "The day of the week for the study session (e.g., 'Monday').",
    "timeSlot": "The suggested time for the study session (e.g., '9:00 AM - 11:00 AM').",
    "subject": "The subject to be studied.",
    "topic": "The specific topic to focus on during the session.",
    "task": "A concrete, actionable task for the session (e.g., 'Read Chapter 3 and summarize key points').",
    "description": "A brief, one-paragraph description of the topic and what needs to be covered.",
}

PLAN_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "plan": types.Schema(
            type=types.Type.ARRAY,
            description="A detailed study plan broken down by day and time.",
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    name: types.Schema(type=types.Type.STRING, description=desc)
                    for name, desc in _TASK_FIELDS.items()
                },
                required=list(_TASK_FIELDS),
            ),
        )
    },
    required=["plan"],
)


def build_prompt(request: GenerationRequest) -> str:
    notes = ""
    if request.notes.strip():
        notes = (
            "The student has also provided the following specific instructions or notes: "
            f'"{request.notes.strip()}". Please incorporate these requests into the plan.\n'
        )
    return (
        "Create a detailed study plan for a student who needs to study the following "
        f"subjects/topics: {request.subjects}.\n"
        f"The deadline is {request.deadline.isoformat()}.\n"
        f"The student can study for approximately {request.hours_per_day:g} hours per day.\n"
        f"{notes}"
        "Break down the plan into manageable daily sessions with specific subjects, topics, "
        "and actionable tasks. For each task, also provide a short description of what the "
        "student should focus on.\n"
        "Use time slots formatted like '9:00 AM - 11:00 AM'.\n"
        "Ensure the plan is realistic and covers all the mentioned subjects before the deadline.\n"
        "Prioritize topics that might need more time. Be very specific in the tasks."
    )


def parse_plan_response(text: str) -> List[StudyTask]:
    """
    Turn the service's JSON reply into pending tasks numbered from zero.
    Raises ValueError (pydantic or TimeSlotError) on a malformed reply.
    """
    generated = GeneratedPlan.model_validate_json(text.strip())
    tasks = [
        StudyTask(
            id=i,
            day=g.day,
            time_slot=g.time_slot,
            subject=g.subject,
            topic=g.topic,
            task=g.task,
            description=g.description,
        )
        for i, g in enumerate(generated.plan)
    ]
    for t in tasks:
        slot_hours(t.time_slot)
    return tasks


def generate_study_tasks(
    request: GenerationRequest,
    config: AppConfig | None = None,
    client: genai.Client | None = None,
) -> Optional[List[StudyTask]]:
    """
    Ask Gemini for a task list. Any failure (no key, API error, bad JSON,
    unparseable time slots, empty plan) is logged and returns None.
    """
    config = config or AppConfig.from_env()
    if client is None:
        if not config.gemini_api_key:
            logger.warning("GEMINI_API_KEY is not set; cannot generate a study plan")
            return None
        client = genai.Client(api_key=config.gemini_api_key)

    try:
        response = client.models.generate_content(
            model=config.model,
            contents=build_prompt(request),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=PLAN_SCHEMA,
                temperature=config.temperature,
            ),
        )
        tasks = parse_plan_response(response.text or "")
    except TimeSlotError as e:
        logger.warning("Generated plan has an unusable time slot: %s", e)
        return None
    except Exception:
        logger.exception("Error generating study plan")
        return None

    if not tasks:
        logger.warning("Generated plan contained no tasks")
        return None
    return tasks


def create_plan(
    request: GenerationRequest,
    tasks: List[StudyTask],
    now: datetime | None = None,
) -> StudyPlan:
    return StudyPlan(
        id=str(uuid4()),
        title=request.title,
        created_at=now or datetime.now(),
        deadline=request.deadline,
        tasks=tasks,
    )
