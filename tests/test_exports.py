from datetime import date, datetime

from icalendar import Calendar

from calendar_export import schedule_to_ics
from models import ProfileStats
from pdf_export import schedule_to_pdf
from planner import distribute_tasks
from tests.helpers import NOW, make_plan


def test_ics_has_one_event_and_alarm_per_task():
    plan = make_plan(3, deadline=date(2024, 3, 12))
    schedule = distribute_tasks(plan, now=NOW)

    cal = Calendar.from_ical(schedule_to_ics(plan, schedule))
    events = [c for c in cal.walk() if c.name == "VEVENT"]
    alarms = [c for c in cal.walk() if c.name == "VALARM"]

    assert len(events) == 3
    assert len(alarms) == 3
    assert events[0].decoded("dtstart") == datetime(2024, 3, 11, 9, 0)
    assert events[0].decoded("dtend") == datetime(2024, 3, 11, 11, 0)
    assert events[2].decoded("dtstart") == datetime(2024, 3, 12, 9, 0)
    assert str(events[0]["summary"]) == "Subject 0: Topic 0"
    assert str(alarms[0]["summary"]) == "Time for Subject 0!"


def test_ics_for_empty_schedule_is_still_a_calendar():
    plan = make_plan(0, deadline=date(2024, 3, 12))
    cal = Calendar.from_ical(schedule_to_ics(plan, distribute_tasks(plan, now=NOW)))
    assert [c for c in cal.walk() if c.name == "VEVENT"] == []


def test_pdf_export_produces_pdf_bytes():
    plan = make_plan(4, deadline=date(2024, 3, 12))
    schedule = distribute_tasks(plan, now=NOW)
    pdf = schedule_to_pdf(plan, schedule, ProfileStats(pending_tasks=4))
    assert pdf.startswith(b"%PDF")
