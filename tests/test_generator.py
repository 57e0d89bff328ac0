import json
from datetime import date
from types import SimpleNamespace

import pytest

from config import AppConfig
from generator import build_prompt, create_plan, generate_study_tasks, parse_plan_response
from models import GenerationRequest
from tests.helpers import NOW

REQUEST = GenerationRequest(subjects="Biology, Chemistry", deadline=date(2024, 3, 20), hours_per_day=2)

RECORD = {
    "day": "Monday",
    "timeSlot": "9:00 AM - 11:00 AM",
    "subject": "Biology",
    "topic": "Cells",
    "task": "Read chapter 1",
    "description": "Cell structure basics.",
}


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def fake_client(text=None, error=None):
    return SimpleNamespace(models=FakeModels(text, error))


def _reply(*records):
    return json.dumps({"plan": list(records)})


def test_parse_plan_response_numbers_tasks_from_zero():
    tasks = parse_plan_response(_reply(RECORD, dict(RECORD, topic="DNA")))
    assert [t.id for t in tasks] == [0, 1]
    assert tasks[1].topic == "DNA"
    assert tasks[0].time_slot == "9:00 AM - 11:00 AM"
    assert all(t.status == "pending" and t.progress == 0 and t.subtasks == [] for t in tasks)
    assert tasks[0].completed_at is None


def test_generate_study_tasks_calls_gemini_with_json_schema():
    client = fake_client(_reply(RECORD))
    config = AppConfig(model="gemini-test", temperature=0.3)

    tasks = generate_study_tasks(REQUEST, config, client=client)

    assert [t.topic for t in tasks] == ["Cells"]
    call = client.models.calls[0]
    assert call["model"] == "gemini-test"
    assert "Biology, Chemistry" in call["contents"]
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].temperature == 0.3


@pytest.mark.parametrize("client", [
    fake_client(error=RuntimeError("quota exceeded")),
    fake_client("not json"),
    fake_client(json.dumps({"plan": [{"day": "Monday"}]})),
    fake_client(_reply(dict(RECORD, timeSlot="morning-ish"))),
    fake_client(_reply()),
    fake_client(None),
])
def test_generation_failures_return_none(client):
    assert generate_study_tasks(REQUEST, AppConfig(), client=client) is None


def test_missing_api_key_returns_none():
    assert generate_study_tasks(REQUEST, AppConfig(gemini_api_key=None)) is None


def test_prompt_mentions_notes_only_when_given():
    assert "specific instructions" not in build_prompt(REQUEST)
    with_notes = REQUEST.model_copy(update={"notes": "No studying on Sundays"})
    assert '"No studying on Sundays"' in build_prompt(with_notes)


def test_create_plan_uses_first_subject_as_title():
    plan = create_plan(REQUEST, parse_plan_response(_reply(RECORD)), now=NOW)
    assert plan.title == "Biology"
    assert plan.deadline == date(2024, 3, 20)
    assert plan.created_at == NOW
    assert plan.id

    untitled = GenerationRequest(subjects=", Chemistry", deadline=date(2024, 3, 20), hours_per_day=1)
    assert create_plan(untitled, [], now=NOW).title == "New Study Plan"


def test_plan_ids_are_unique():
    assert create_plan(REQUEST, [], now=NOW).id != create_plan(REQUEST, [], now=NOW).id
