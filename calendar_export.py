from __future__ import annotations
from datetime import timedelta
from icalendar import Alarm, Calendar, Event as IcsEvent
from models import Schedule, StudyPlan
from reminders import reminder_body, reminder_title
from timeslots import slot_bounds


def schedule_to_ics(plan: StudyPlan, schedule: Schedule) -> bytes:
    """
    One VEVENT per scheduled task with a display alarm at its start.
    Times are floating (local wall-clock), matching the schedule itself.
    """
    cal = Calendar()
    cal.add("PRODID", "-//Study Planner//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", f"Study Plan: {plan.title}")

    for day, tasks in schedule:
        for task in tasks:
            start, end = slot_bounds(day, task.time_slot)

            event = IcsEvent()
            event.add("uid", f"{plan.id}-{task.id}@study-planner")
            event.add("summary", f"{task.subject}: {task.topic}")
            event.add("dtstart", start)
            event.add("dtend", end)
            description = task.task
            if task.description:
                description += f"\n\n{task.description}"
            event.add("description", description)
            event.add("status", "COMPLETED" if task.status == "completed" else "CONFIRMED")

            alarm = Alarm()
            alarm.add("action", "DISPLAY")
            alarm.add("summary", reminder_title(task))
            alarm.add("description", reminder_body(task))
            alarm.add("trigger", timedelta(0))
            event.add_component(alarm)

            cal.add_component(event)

    return cal.to_ical()
