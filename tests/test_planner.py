from datetime import date, datetime, timedelta

import pytest

from models import StudyPlan
from planner import build_schedule, distribute_tasks, study_days
from timeslots import TimeSlotError
from tests.helpers import NOW, make_plan


def _ids(schedule):
    return {key: [t.id for t in tasks] for key, tasks in schedule.items()}


def test_study_days_start_tomorrow_and_include_deadline():
    assert study_days(date(2024, 3, 10), date(2024, 3, 12)) == [date(2024, 3, 11), date(2024, 3, 12)]
    assert study_days(date(2024, 3, 10), date(2024, 3, 10)) == []


def test_tasks_fill_days_in_order():
    plan = make_plan(5, deadline=date(2024, 3, 12))
    schedule = distribute_tasks(plan, now=NOW)
    assert _ids(schedule) == {"2024-03-11": [0, 1, 2], "2024-03-12": [3, 4]}


def test_unused_trailing_days_are_left_out():
    plan = make_plan(2, deadline=date(2024, 3, 20))
    schedule = distribute_tasks(plan, now=NOW)
    assert _ids(schedule) == {"2024-03-11": [0], "2024-03-12": [1]}
    assert "2024-03-13" not in schedule


@pytest.mark.parametrize("count", [1, 3, 7, 10, 31])
@pytest.mark.parametrize("days", [1, 2, 4, 9])
def test_every_task_scheduled_once_in_order(count, days):
    plan = make_plan(count, deadline=NOW.date() + timedelta(days=days))
    schedule = distribute_tasks(plan, now=NOW)

    assert [t.id for t in schedule.tasks()] == list(range(count))
    assert all(tasks for _, tasks in schedule.items())
    assert schedule.keys() == sorted(schedule.keys())
    assert len(schedule) <= days


def test_past_deadline_puts_everything_on_tomorrow():
    plan = make_plan(4, deadline=date(2024, 3, 1))
    schedule = distribute_tasks(plan, now=NOW)
    assert _ids(schedule) == {"2024-03-11": [0, 1, 2, 3]}


def test_deadline_today_puts_everything_on_today():
    plan = make_plan(3, deadline=NOW.date())
    schedule = distribute_tasks(plan, now=NOW)
    assert _ids(schedule) == {"2024-03-10": [0, 1, 2]}


def test_empty_or_missing_plan_gives_empty_schedule():
    empty = StudyPlan(id="p", title="t", created_at=NOW, deadline=date(2024, 3, 12))
    assert len(distribute_tasks(empty, now=NOW)) == 0
    assert len(distribute_tasks(None, now=NOW)) == 0


def test_schedule_looks_up_task_dates():
    plan = make_plan(4, deadline=date(2024, 3, 12))
    schedule = distribute_tasks(plan, now=NOW)
    assert schedule.date_of(0) == date(2024, 3, 11)
    assert schedule.date_of(3) == date(2024, 3, 12)
    assert schedule.date_of(99) is None
    assert [t.id for t in schedule.get(date(2024, 3, 12))] == [2, 3]
    assert schedule.get("2030-01-01") == []


def test_date_keys_are_zero_padded():
    plan = make_plan(1, deadline=date(2024, 1, 5))
    schedule = distribute_tasks(plan, now=datetime(2024, 1, 1, 8, 0))
    assert schedule.keys() == ["2024-01-02"]


def test_build_schedule_replaces_reminders(registry, timers):
    first = make_plan(2, deadline=date(2024, 3, 12))
    build_schedule(first, registry, now=NOW)
    old_timers = list(timers.created)
    assert len(registry) == 2

    second = make_plan(3, deadline=date(2024, 3, 13), plan_id="plan-2")
    build_schedule(second, registry, now=NOW)

    assert all(t.cancelled for t in old_timers)
    assert len(registry) == 3


def test_build_schedule_for_empty_plan_cancels_reminders(registry, timers):
    build_schedule(make_plan(2, deadline=date(2024, 3, 12)), registry, now=NOW)
    schedule = build_schedule(None, registry, now=NOW)
    assert len(schedule) == 0
    assert len(registry) == 0
    assert all(t.cancelled for t in timers.created)


def test_bad_time_slot_leaves_existing_reminders(registry, timers):
    build_schedule(make_plan(2, deadline=date(2024, 3, 12)), registry, now=NOW)
    broken = make_plan(2, deadline=date(2024, 3, 12), plan_id="plan-2", time_slot="whenever")

    with pytest.raises(TimeSlotError):
        build_schedule(broken, registry, now=NOW)

    assert len(registry) == 2
    assert not any(t.cancelled for t in timers.created)
