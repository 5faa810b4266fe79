"""Red flag processors: turn classified rows into severity-sorted flags."""

from __future__ import annotations

from datetime import datetime

from dashboard_engine.schema import (
    SEVERITY_ORDER,
    AnomalyCandidate,
    DeadlineCandidate,
    Dependency,
    EntityRef,
    FlagMetrics,
    RedFlag,
    StaleCandidate,
    TaskRequest,
    WorkItem,
)
from dashboard_engine.timeutil import days_between, format_number, resolve_now, round_half_up


def _subtask_ref(item: WorkItem) -> EntityRef:
    return EntityRef(type="subtask", id=item.id, name=item.name)


def process_deadline_flags(candidates: list[DeadlineCandidate], now: datetime | None = None) -> list[RedFlag]:
    """Keep critical and high deadline risks, one flag per item."""

    now = resolve_now(now)
    flags = []
    for candidate in candidates:
        item, risk = candidate.item, candidate.risk
        if risk.level not in ("critical", "high"):
            continue
        flags.append(
            RedFlag(
                id=f"deadline-{item.id}",
                type="deadline",
                severity=risk.level,
                title=item.name,
                description=risk.reason or f"Deadline risk: {risk.level}",
                related_entity=_subtask_ref(item),
                project_name=item.project_name,
                created_at=item.updated_at or now,
                assigned_to=item.assigned_to,
                metrics=FlagMetrics(
                    estimated=risk.estimated_hours or 0.0,
                    logged=risk.hours_logged,
                    percent=risk.effort_percent,
                    days_left=risk.days_left or 0.0,
                ),
            )
        )
    return flags


def process_anomaly_flags(candidates: list[AnomalyCandidate], now: datetime | None = None) -> list[RedFlag]:
    now = resolve_now(now)
    flags = []
    for candidate in candidates:
        item = candidate.item
        estimated = item.estimated_hours or 0.0
        percent = int(round_half_up(candidate.hours_logged / estimated * 100)) if estimated > 0 else 0
        flags.append(
            RedFlag(
                id=f"anomaly-{item.id}",
                type="anomaly",
                severity=candidate.severity,
                title=item.name,
                description=(
                    f"Estimated {format_number(estimated)}h, "
                    f"logged {format_number(candidate.hours_logged)}h ({percent}%)"
                ),
                related_entity=_subtask_ref(item),
                project_name=item.project_name,
                created_at=now,
                assigned_to=item.assigned_to,
                metrics=FlagMetrics(estimated=estimated, logged=candidate.hours_logged, percent=percent, days_left=0.0),
            )
        )
    return flags


def process_blocker_flags(
    items: list[WorkItem],
    dependencies_by_item: dict[str, list[Dependency]],
    now: datetime | None = None,
) -> list[RedFlag]:
    """Flag blocked items; more than 3 days is high, more than 7 critical."""

    now = resolve_now(now)
    flags = []
    for item in items:
        days_blocked = days_between(item.updated_at or now, now)
        # 2 decimals so a block of exactly N days never lands just over N.
        days_rounded = round_half_up(days_blocked, 2)

        severity = "medium"
        if days_rounded > 7:
            severity = "critical"
        elif days_rounded > 3:
            severity = "high"

        blocker_names = ", ".join(
            dep.depends_on_name for dep in dependencies_by_item.get(item.id, []) if dep.depends_on_name
        )
        shown_days = int(round_half_up(days_blocked))
        if blocker_names:
            description = f"Blocked by: {blocker_names} ({shown_days} days)"
        else:
            description = f"Blocked for {shown_days} days"

        flags.append(
            RedFlag(
                id=f"blocked-{item.id}",
                type="blocked",
                severity=severity,
                title=item.name,
                description=description,
                related_entity=_subtask_ref(item),
                project_name=item.project_name,
                created_at=item.updated_at or now,
                assigned_to=item.assigned_to,
                metrics=FlagMetrics(estimated=0.0, logged=0.0, percent=0.0, days_left=-days_rounded),
            )
        )
    return flags


def process_stale_flags(candidates: list[StaleCandidate], now: datetime | None = None) -> list[RedFlag]:
    """In-progress items without activity: 5-9 days medium, 10+ high."""

    now = resolve_now(now)
    flags = []
    for candidate in candidates:
        item, days = candidate.item, candidate.days_without_activity
        flags.append(
            RedFlag(
                id=f"stale-{item.id}",
                type="stale",
                severity="high" if days >= 10 else "medium",
                title=item.name,
                description=f"No activity for {int(round_half_up(days))} days",
                related_entity=_subtask_ref(item),
                project_name=item.project_name,
                created_at=item.updated_at or now,
                assigned_to=item.assigned_to,
                metrics=FlagMetrics(estimated=0.0, logged=0.0, percent=0.0, days_left=-days),
            )
        )
    return flags


def process_unassigned_flags(items: list[WorkItem], now: datetime | None = None) -> list[RedFlag]:
    now = resolve_now(now)
    return [
        RedFlag(
            id=f"unassigned-{item.id}",
            type="unassigned",
            severity="high" if item.priority_stars >= 3 else "medium",
            title=item.name,
            description=f"Priority {format_number(item.priority_stars)} stars, unassigned",
            related_entity=_subtask_ref(item),
            project_name=item.project_name,
            created_at=now,
        )
        for item in items
    ]


def process_pending_approval_flags(requests: list[TaskRequest], now: datetime | None = None) -> list[RedFlag]:
    """Task requests waiting on approval: over 7 days is high, otherwise medium."""

    now = resolve_now(now)
    flags = []
    for request in requests:
        days_pending = days_between(request.created_at, now)
        flags.append(
            RedFlag(
                id=f"pending-{request.id}",
                type="pending_approval",
                severity="high" if days_pending > 7 else "medium",
                title=request.task_name,
                description=f"Pending for {int(round_half_up(days_pending))} days",
                related_entity=EntityRef(type="task", id=request.id, name=request.task_name),
                project_name=request.project_name,
                created_at=request.created_at,
            )
        )
    return flags


def merge_and_sort_red_flags(flags: list[RedFlag]) -> list[RedFlag]:
    """Stable sort by severity (critical first), then oldest first."""

    return sorted(flags, key=lambda flag: (SEVERITY_ORDER[flag.severity], flag.created_at))
