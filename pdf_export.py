from __future__ import annotations
from io import BytesIO
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import ProfileStats, Schedule, StudyPlan


def schedule_to_pdf(
    plan: StudyPlan,
    schedule: Schedule,
    stats: ProfileStats,
) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    elems.append(Paragraph(f"Study Plan: {plan.title}", styles["Title"]))
    elems.append(Spacer(1, 10))
    elems.append(Paragraph(
        f"Created: {plan.created_at.strftime('%Y-%m-%d %H:%M')} | Deadline: {plan.deadline.isoformat()}",
        styles["Normal"],
    ))
    elems.append(Spacer(1, 12))

    elems.append(Paragraph("Progress", styles["Heading3"]))
    stats_table = Table([
        ["Pending", "Overdue", "Completed (7 days)", "Streak (days)"],
        [
            str(stats.pending_tasks),
            str(stats.overdue_tasks),
            str(stats.completed_last_7_days),
            str(stats.streak),
        ],
    ], hAlign="LEFT")
    stats_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("ALIGN", (0, 1), (-1, -1), "RIGHT"),
    ]))
    elems.append(stats_table)
    elems.append(Spacer(1, 12))

    if not len(schedule):
        elems.append(Paragraph("No tasks scheduled.", styles["Normal"]))

    for day, tasks in schedule:
        elems.append(Paragraph(day.strftime("%A, %Y-%m-%d"), styles["Heading3"]))
        table_data = [["Time", "Subject", "Topic", "Progress", "Done"]]
        for task in tasks:
            table_data.append([
                task.time_slot,
                task.subject,
                Paragraph(task.topic, styles["BodyText"]),
                f"{task.progress}%",
                "Yes" if task.status == "completed" else "No",
            ])

        table = Table(table_data, hAlign="LEFT", colWidths=[110, 100, 200, 55, 40])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("ALIGN", (3, 1), (4, -1), "RIGHT"),
        ]))
        elems.append(table)
        elems.append(Spacer(1, 8))

    doc.build(elems)
    return buf.getvalue()
