from __future__ import annotations
import streamlit as st
import pandas as pd
from datetime import date, timedelta

from calendar_export import schedule_to_ics
from config import APP_NAME, AppConfig, configure_logging
from models import StudyTask
from pdf_export import schedule_to_pdf
from session import PlannerSession
from timeslots import TimeSlotError, slot_hours


NOTIFICATION_ICONS = {"info": "ℹ️", "success": "✅", "warning": "⚠️"}

st.set_page_config(page_title=APP_NAME, page_icon="📚", layout="wide")


def _ensure_session_state() -> PlannerSession:
    if "planner" not in st.session_state:
        config = AppConfig.from_env()
        configure_logging(config.log_level)
        planner = PlannerSession(config=config)
        planner.welcome(st.session_state.get("user_name", "Student"))
        st.session_state.planner = planner
    return st.session_state.planner


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast(planner: PlannerSession) -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)
    for title, body in planner.drain_alerts():
        st.toast(f"**{title}** {body}", icon="🔔")


def _start_hour(task: StudyTask) -> float:
    return slot_hours(task.time_slot)[0]


def _format_hour(value: float) -> str:
    hours = int(value)
    minutes = int(round((value - hours) * 60))
    return f"{hours:02d}:{minutes:02d}"


def render_task_detail(planner: PlannerSession, task: StudyTask) -> None:
    st.markdown(f"**{task.subject}: {task.topic}**  \n{task.time_slot} ({task.day})")
    st.write(task.task)
    if task.description:
        st.caption(task.description)
    st.progress(task.progress / 100, text=f"Progress: {task.progress}%")

    done_label = "Mark as pending" if task.status == "completed" else "Mark as completed"
    if st.button(done_label, key=f"toggle_{task.id}"):
        planner.toggle_task(task.id)
        st.rerun()

    st.write("Subtasks")
    if not task.subtasks:
        st.caption("No subtasks yet.")
    for sub in task.subtasks:
        checked = st.checkbox(sub.text, value=sub.completed, key=f"sub_{task.id}_{sub.id}")
        if checked != sub.completed:
            planner.toggle_subtask(task.id, sub.id)
            st.rerun()

    with st.form(f"add_subtask_{task.id}", clear_on_submit=True):
        text = st.text_input("New subtask", placeholder="Summarise chapter 3")
        if st.form_submit_button("Add subtask"):
            try:
                planner.add_subtask(task.id, text)
            except ValueError as e:
                st.warning(str(e))
            else:
                st.rerun()


def render_planner(planner: PlannerSession) -> None:
    st.header("Planner")

    with st.form("generate_plan_form"):
        subjects = st.text_input("Subjects", placeholder="Math, Physics, History")
        col1, col2 = st.columns(2)
        with col1:
            deadline = st.date_input("Deadline", value=date.today() + timedelta(days=7))
        with col2:
            hours = st.number_input("Hours per day", min_value=0.5, max_value=16.0, value=2.0, step=0.5)
        notes = st.text_area("Notes (optional)", height=80)
        submitted = st.form_submit_button("Generate plan", type="primary")

    if submitted:
        with st.spinner("Generating your study plan..."):
            try:
                plan = planner.generate_plan(subjects, deadline, hours, notes)
            except ValueError as e:
                st.error(str(e))
            else:
                _queue_toast(f"Plan '{plan.title}' generated.")
                st.rerun()

    plan = planner.active_plan
    st.divider()
    if plan is None:
        st.info("Generate a plan to see your schedule.")
        return

    st.subheader(plan.title)
    st.caption(f"Deadline: {plan.deadline.isoformat()}")
    st.progress(planner.plan_progress / 100, text=f"Plan progress: {planner.plan_progress}%")

    rows = []
    for date_key, tasks in planner.schedule.items():
        for task in tasks:
            rows.append({
                "id": task.id,
                "Date": date_key,
                "Time": task.time_slot,
                "Subject": task.subject,
                "Topic": task.topic,
                "Progress": task.progress,
                "Done": task.status == "completed",
            })
    df = pd.DataFrame(rows).set_index("id")
    edited = st.data_editor(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            "Progress": st.column_config.ProgressColumn("Progress", min_value=0, max_value=100, format="%d%%"),
            "Done": st.column_config.CheckboxColumn("Done"),
        },
        disabled=["Date", "Time", "Subject", "Topic", "Progress"],
        key=f"plan_table_{plan.id}",
    )

    changed = [
        int(row["id"])
        for row in edited.reset_index().to_dict("records")
        if bool(row["Done"]) != (plan.find_task(int(row["id"])).status == "completed")
    ]
    if changed and st.button("Save changes"):
        for task_id in changed:
            planner.toggle_task(task_id)
        # Edits now live in the plan; stale ones would re-toggle later.
        st.session_state.pop(f"plan_table_{plan.id}", None)
        _queue_toast("Tasks updated.")
        st.rerun()

    st.divider()
    st.subheader("Task details")
    labels = {t.id: f"{t.subject}: {t.topic}" for t in plan.tasks}
    selected = st.selectbox("Task", options=list(labels), format_func=labels.get)
    task = planner.find_task(selected)
    if task is not None:
        render_task_detail(planner, task)


def render_calendar(planner: PlannerSession) -> None:
    st.header("Calendar")
    if planner.active_plan is None:
        st.info("No plan yet.")
        return

    selected_day = st.date_input("Day", value=date.today())
    week = [selected_day + timedelta(days=i) for i in range(-3, 4)]
    strip = st.columns(7)
    for col, d in zip(strip, week):
        count = len(planner.schedule.get(d))
        col.metric(d.strftime("%a %d"), count)

    tasks = sorted(planner.schedule.get(selected_day), key=_start_hour)
    if not tasks:
        st.info("Nothing scheduled for this day.")
        return

    for task in tasks:
        start, end = slot_hours(task.time_slot)
        span = _format_hour(start) + (f" - {_format_hour(end)}" if end is not None else "")
        status = "✅" if task.status == "completed" else "⬜"
        with st.expander(f"{status} {span}  {task.subject}: {task.topic}"):
            render_task_detail(planner, task)


def render_profile(planner: PlannerSession) -> None:
    st.header("Profile")
    stats = planner.stats

    a, b, c, d = st.columns(4)
    a.metric("Pending tasks", stats.pending_tasks)
    b.metric("Overdue tasks", stats.overdue_tasks)
    c.metric("Completed (7 days)", stats.completed_last_7_days)
    d.metric("Streak (days)", stats.streak)

    plan = planner.active_plan
    if plan is None:
        return

    st.divider()
    st.subheader("Exports")
    try:
        ics_bytes = schedule_to_ics(plan, planner.schedule)
    except TimeSlotError as e:
        st.error(f"Could not export calendar: {e}")
    else:
        st.download_button(
            "Download ICS",
            data=ics_bytes,
            file_name=f"study_plan_{plan.deadline.isoformat()}.ics",
            mime="text/calendar",
        )
    pdf_bytes = schedule_to_pdf(plan, planner.schedule, stats)
    st.download_button(
        "Download PDF",
        data=pdf_bytes,
        file_name=f"study_plan_{plan.deadline.isoformat()}.pdf",
        mime="application/pdf",
    )


def render_my_plans(planner: PlannerSession) -> None:
    st.header("My Plans")
    if not planner.history:
        st.info("No plans generated yet.")
        return

    for plan in reversed(planner.history):
        done = sum(1 for t in plan.tasks if t.status == "completed")
        active = planner.active_plan is not None and planner.active_plan.id == plan.id
        col_info, col_action = st.columns([3, 1])
        col_info.write(
            f"**{plan.title}** | {len(plan.tasks)} tasks, {done} done, "
            f"due {plan.deadline.isoformat()}"
        )
        if active:
            col_action.caption("Active")
        elif col_action.button("Open", key=f"open_{plan.id}"):
            planner.select_plan(plan.id)
            st.session_state.next_page = "Planner"
            st.rerun()


def render_notifications(planner: PlannerSession) -> None:
    feed = planner.feed
    st.header(f"Notifications ({feed.unread_count})")
    if not len(feed):
        st.caption("Nothing new.")
        return
    col_read, col_clear = st.columns(2)
    if col_read.button("Mark all read", disabled=feed.unread_count == 0):
        feed.mark_all_read()
        st.rerun()
    if col_clear.button("Clear all"):
        feed.clear()
        st.rerun()
    for n in feed.items:
        icon = NOTIFICATION_ICONS.get(n.type, "")
        text = n.message if n.read else f"**{n.message}**"
        st.write(f"{icon} {text}")
        st.caption(n.timestamp.strftime("%Y-%m-%d %H:%M"))
        if not n.read and st.button("Mark read", key=f"read_{n.id}"):
            feed.mark_read(n.id)
            st.rerun()


planner = _ensure_session_state()
planner.refresh()

st.title("Study Planner")
st.caption("AI-generated study plans with a day-by-day schedule, reminders and progress tracking.")
_flush_toast(planner)

if "nav_page" not in st.session_state:
    st.session_state.nav_page = "Planner"
if "next_page" in st.session_state:
    st.session_state.nav_page = st.session_state.pop("next_page")

with st.sidebar:
    st.header("Navigate")
    pages = ["Planner", "Calendar", "Profile", "My Plans", "Notifications"]
    page = st.radio("", pages, key="nav_page")

    st.divider()
    st.header("Reminders")
    enabled = st.toggle("Allow reminders", value=planner.sink.permission == "granted")
    planner.sink.set_permission("granted" if enabled else "denied")
    st.caption(f"{len(planner.reminders)} reminders pending.")

    st.divider()
    st.header("Focus timer")
    if st.button("Start 25 min focus"):
        planner.start_focus()
        st.toast("Focus session started.")
    break_minutes = st.selectbox("Break length (min)", [5, 10, 15], index=0)
    if st.button("Start break"):
        planner.start_break(break_minutes)
        st.toast("Break started.")
    if st.button("Stop timer") and planner.cancel_alert():
        st.toast("Timer stopped.")

if page == "Planner":
    render_planner(planner)
elif page == "Calendar":
    render_calendar(planner)
elif page == "Profile":
    render_profile(planner)
elif page == "My Plans":
    render_my_plans(planner)
elif page == "Notifications":
    render_notifications(planner)
