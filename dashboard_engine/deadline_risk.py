"""Deadline risk model: remaining hours, completion metrics and risk level."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from dashboard_engine.schema import DeadlineRisk, Sibling, WorkItem, WorkLog
from dashboard_engine.timeutil import days_between, resolve_now, round_half_up

WORK_HOURS_PER_DAY = 8

# Post-overrun floor: share of the estimate, share of what was already logged.
OVERRUN_ESTIMATE_SHARE = 0.25
OVERRUN_LOGGED_SHARE = 0.15


@dataclass
class _RiskContext:
    days_left: float
    remaining_hours: Optional[float]
    task_completion_percent: float
    is_overrun: bool
    overdue: bool

    def exceeds_budget(self, factor: float) -> bool:
        if self.remaining_hours is None:
            return False
        available = max(0.0, self.days_left) * WORK_HOURS_PER_DAY
        return self.remaining_hours > available * factor


Rule = tuple[str, Callable[[_RiskContext], bool]]

# First matching rule wins; order is CRITICAL -> HIGH -> MEDIUM -> LOW.
ESTIMATE_RULES: tuple[Rule, ...] = (
    ("critical", lambda c: c.overdue),
    ("critical", lambda c: c.days_left <= 1 and c.exceeds_budget(1.0)),
    ("critical", lambda c: c.is_overrun and c.days_left <= 3),
    ("high", lambda c: c.days_left <= 3 and c.exceeds_budget(0.8)),
    ("high", lambda c: c.days_left <= 7 and c.task_completion_percent < 30),
    ("high", lambda c: c.is_overrun and c.days_left <= 7),
    ("medium", lambda c: c.days_left <= 7 and c.exceeds_budget(0.6)),
    ("medium", lambda c: c.days_left <= 14 and c.task_completion_percent < 20),
    ("low", lambda c: c.days_left <= 14),
)

NO_ESTIMATE_RULES: tuple[Rule, ...] = (
    ("critical", lambda c: c.overdue),
    ("high", lambda c: c.days_left <= 2),
    ("medium", lambda c: c.days_left <= 7),
)


def _hours_logged(work_logs: list[WorkLog] | None) -> float:
    return sum(log.hours_spent for log in work_logs or [])


def sibling_completion_ratio(siblings: list[Sibling] | None) -> Optional[float]:
    """Share of done siblings, usable for extrapolation only when partial."""

    if not siblings or len(siblings) < 2:
        return None
    done = sum(1 for sibling in siblings if sibling.status == "done")
    if 0 < done < len(siblings):
        return done / len(siblings)
    return None


def calculate_remaining_hours(
    item: WorkItem,
    work_logs: list[WorkLog] | None,
    siblings: list[Sibling] | None = None,
) -> Optional[float]:
    """Estimate the hours still needed, extrapolating once the estimate is spent."""

    if item.status == "done":
        return 0.0
    estimated = item.estimated_hours
    if estimated is None:
        return None

    hours_logged = _hours_logged(work_logs)
    if hours_logged < estimated:
        return estimated - hours_logged

    ratio = sibling_completion_ratio(siblings)
    if ratio is not None:
        return hours_logged / ratio - hours_logged

    return max(estimated * OVERRUN_ESTIMATE_SHARE, hours_logged * OVERRUN_LOGGED_SHARE)


def calculate_task_metrics(
    item: WorkItem,
    hours_logged: float,
    siblings: list[Sibling] | None = None,
) -> tuple[float, float]:
    """Return (effort_percent, task_completion_percent), both unrounded."""

    estimated = item.estimated_hours or 0.0
    effort_percent = hours_logged * 100.0 / estimated if estimated > 0 else 0.0

    if siblings:
        done = sum(1 for sibling in siblings if sibling.status == "done")
        completion = done * 100.0 / len(siblings)
    elif item.status == "done":
        completion = 100.0
    elif item.status == "in_progress":
        completion = 50.0
    else:
        completion = 0.0

    return effort_percent, completion


def _first_matching(rules: tuple[Rule, ...], context: _RiskContext) -> str:
    for level, applies in rules:
        if applies(context):
            return level
    return "none"


def get_deadline_risk_level(
    days_left: Optional[float],
    remaining_hours: Optional[float],
    status: str,
    task_completion_percent: float,
    is_overrun: bool,
) -> str:
    """Hour-budget risk level for items carrying an estimate."""

    if days_left is None or status == "done":
        return "none"
    context = _RiskContext(days_left, remaining_hours, task_completion_percent, is_overrun, days_left < 0)
    return _first_matching(ESTIMATE_RULES, context)


def get_deadline_risk_level_no_estimate(days_left: Optional[float], status: str) -> str:
    """Date-only risk level for items without an estimate."""

    if days_left is None or status == "done":
        return "none"
    context = _RiskContext(days_left, None, 0.0, False, days_left < 0)
    return _first_matching(NO_ESTIMATE_RULES, context)


def build_reason(
    level: str,
    days_left: Optional[float],
    is_overrun: bool,
    effort_percent: float,
) -> str:
    if level == "none":
        return ""
    if days_left is not None and days_left < 0:
        return f"Overdue by {abs(int(round_half_up(days_left)))} days"
    if level in ("critical", "high"):
        if is_overrun:
            return f"{int(round_half_up(effort_percent))}% of estimate, still in progress"
        if days_left is not None and days_left <= 1:
            return "Due tomorrow or today"
        if days_left is not None and days_left <= 3:
            return f"Due in {int(round_half_up(days_left))} days"
        if days_left is not None and days_left <= 7:
            return f"Due in {int(round_half_up(days_left))} days, low completion"
    if level == "medium" and days_left is not None:
        return f"Due in {int(round_half_up(days_left))} days"
    return "Approaching deadline"


def calculate_deadline_risk(
    item: WorkItem,
    work_logs: list[WorkLog] | None,
    siblings: list[Sibling] | None = None,
    now: datetime | None = None,
) -> DeadlineRisk:
    """Compute the full deadline risk of one work item at `now`."""

    now = resolve_now(now)
    hours_logged = _hours_logged(work_logs)
    estimated = item.estimated_hours
    is_overrun = estimated is not None and hours_logged >= estimated and item.status != "done"

    effort_percent, completion = calculate_task_metrics(item, hours_logged, siblings)
    days_left = days_between(now, item.due_date) if item.due_date is not None else None
    remaining = calculate_remaining_hours(item, work_logs, siblings)

    projected_total = None
    if estimated is None:
        level = get_deadline_risk_level_no_estimate(days_left, item.status)
    else:
        level = get_deadline_risk_level(days_left, remaining, item.status, completion, is_overrun)
        ratio = sibling_completion_ratio(siblings)
        if is_overrun and ratio is not None:
            projected_total = hours_logged / ratio

    return DeadlineRisk(
        level=level,
        reason=build_reason(level, days_left, is_overrun, effort_percent),
        days_left=round_half_up(days_left, 1) if days_left is not None else None,
        hours_remaining=remaining,
        hours_logged=hours_logged,
        estimated_hours=estimated,
        effort_percent=round_half_up(effort_percent, 1),
        task_completion_percent=round_half_up(completion, 1),
        is_overrun=is_overrun,
        projected_total=projected_total,
    )
