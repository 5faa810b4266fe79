"""Worker focus queue: urgency scoring and ordering of assigned work."""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from dashboard_engine.deadline_risk import calculate_deadline_risk
from dashboard_engine.schema import OPEN_STATUSES, FocusTask, WorkItem
from dashboard_engine.timeutil import days_between, resolve_now

# (minimum score, category), checked top-down.
CATEGORY_THRESHOLDS = (
    (100, "overdue"),
    (90, "due_today"),
    (80, "due_this_week"),
    (60, "in_progress"),
    (50, "high_priority"),
)

_REASONS = {
    "due_today": "Due today",
    "due_this_week": "Due this week",
    "in_progress": "In progress",
    "high_priority": "High priority",
    "normal": "Normal",
}


def is_overdue(due_date: datetime | None, now: datetime) -> bool:
    return due_date is not None and due_date < now


def is_due_today(due_date: datetime | None, now: datetime) -> bool:
    if due_date is None:
        return False
    return due_date.astimezone(now.tzinfo).date() == now.date()


def is_due_this_week(due_date: datetime | None, now: datetime) -> bool:
    if due_date is None:
        return False
    return now <= due_date <= now + timedelta(days=7)


def get_urgency_score(item: WorkItem, risk_level: str, now: datetime) -> int:
    """Score by the first matching urgency rule."""

    if is_overdue(item.due_date, now):
        return 100
    if is_due_today(item.due_date, now):
        return 90
    if is_due_this_week(item.due_date, now) and risk_level in ("high", "critical"):
        return 80
    if item.status == "in_progress":
        return 60
    if item.priority_stars >= 2.5:
        return 50
    if is_due_this_week(item.due_date, now):
        return 40
    return 10


def get_category(score: int) -> str:
    for threshold, category in CATEGORY_THRESHOLDS:
        if score >= threshold:
            return category
    return "normal"


def get_urgency_reason(item: WorkItem, category: str, now: datetime) -> str:
    if category == "overdue":
        if item.due_date is None:
            return "Overdue"
        days = math.ceil(days_between(item.due_date, now))
        return f"Overdue by {days} day{'' if days == 1 else 's'}"
    return _REASONS.get(category, "Normal")


def rank_focus_task(item: WorkItem, now: datetime) -> FocusTask:
    risk = calculate_deadline_risk(item, item.work_logs, now=now)
    score = get_urgency_score(item, risk.level, now)
    category = get_category(score)
    return FocusTask(
        item=item,
        urgency_score=score,
        urgency_reason=get_urgency_reason(item, category, now),
        deadline_risk=risk,
        hours_logged=risk.hours_logged,
        category=category,
    )


def build_focus_queue(
    items: list[WorkItem],
    now: datetime | None = None,
    user_id: str | None = None,
) -> list[FocusTask]:
    """Rank a worker's open items, most urgent first; ties keep input order."""

    now = resolve_now(now)
    selected = [
        item
        for item in items
        if item.status in OPEN_STATUSES
        and (user_id is None or (item.assigned_to is not None and item.assigned_to.id == user_id))
    ]
    tasks = [rank_focus_task(item, now) for item in selected]
    return sorted(tasks, key=lambda task: task.urgency_score, reverse=True)
