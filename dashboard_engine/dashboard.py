"""Dashboard collectors: scope rows, classify them and assemble views."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Optional

from dashboard_engine.anomaly import get_overrun_anomaly_severity
from dashboard_engine.config import Settings, get_settings
from dashboard_engine.deadline_risk import calculate_deadline_risk
from dashboard_engine.logger import get_logger
from dashboard_engine.red_flags import (
    merge_and_sort_red_flags,
    process_anomaly_flags,
    process_blocker_flags,
    process_deadline_flags,
    process_pending_approval_flags,
    process_stale_flags,
    process_unassigned_flags,
)
from dashboard_engine.schema import (
    TIMELINE_BUCKETS,
    AnomalyCandidate,
    DeadlineCandidate,
    DeadlineEntry,
    Dependency,
    RedFlag,
    Sibling,
    StaleCandidate,
    TaskRequest,
    WorkItem,
)
from dashboard_engine.timeutil import days_between, resolve_now

logger = get_logger(__name__)

_BUCKET_ORDER = {bucket: index for index, bucket in enumerate(TIMELINE_BUCKETS)}


def filter_by_projects(items: list[WorkItem], project_ids: Optional[Iterable[str]]) -> list[WorkItem]:
    """Restrict items to a project scope; None means no restriction."""

    if project_ids is None:
        return list(items)
    allowed = set(project_ids)
    return [item for item in items if item.project_id is not None and item.project_id in allowed]


def group_siblings(items: list[WorkItem]) -> dict[str, list[Sibling]]:
    by_parent: dict[str, list[Sibling]] = defaultdict(list)
    for item in items:
        if item.parent_id is not None:
            by_parent[item.parent_id].append(Sibling(status=item.status))
    return by_parent


def group_dependencies(dependencies: list[Dependency]) -> dict[str, list[Dependency]]:
    by_item: dict[str, list[Dependency]] = defaultdict(list)
    for dependency in dependencies:
        by_item[dependency.dependent_id].append(dependency)
    return by_item


def last_activity(item: WorkItem) -> Optional[datetime]:
    """Latest of the item's update time and its dated work logs."""

    moments = [log.work_date for log in item.work_logs if log.work_date is not None]
    if item.updated_at is not None:
        moments.append(item.updated_at)
    return max(moments, default=None)


def select_deadline_candidates(
    items: list[WorkItem],
    siblings_by_parent: dict[str, list[Sibling]],
    now: datetime,
) -> list[DeadlineCandidate]:
    candidates = []
    for item in items:
        if item.due_date is None or item.status == "done":
            continue
        siblings = siblings_by_parent.get(item.parent_id, []) if item.parent_id is not None else []
        risk = calculate_deadline_risk(item, item.work_logs, siblings, now=now)
        candidates.append(DeadlineCandidate(item=item, risk=risk))
    return candidates


def select_anomaly_candidates(items: list[WorkItem]) -> list[AnomalyCandidate]:
    candidates = []
    for item in items:
        estimated = item.estimated_hours
        if item.status not in ("todo", "in_progress") or estimated is None or estimated <= 0:
            continue
        hours_logged = item.hours_logged
        if hours_logged < estimated:
            continue
        severity = get_overrun_anomaly_severity(hours_logged, estimated, item.status)
        if severity:
            candidates.append(AnomalyCandidate(item=item, hours_logged=hours_logged, severity=severity))
    return candidates


def select_stale_candidates(items: list[WorkItem], now: datetime, stale_after_days: float) -> list[StaleCandidate]:
    candidates = []
    for item in items:
        if item.status != "in_progress":
            continue
        reference = last_activity(item)
        if reference is None:
            continue
        idle_days = days_between(reference, now)
        if idle_days >= stale_after_days:
            candidates.append(StaleCandidate(item=item, days_without_activity=idle_days))
    return candidates


def select_unassigned(items: list[WorkItem]) -> list[WorkItem]:
    return [item for item in items if item.status == "todo" and item.assigned_to is None and item.priority_stars >= 2]


def select_pending_requests(requests: list[TaskRequest], now: datetime, pending_after_days: float) -> list[TaskRequest]:
    return [
        request
        for request in requests
        if request.status == "pending" and days_between(request.created_at, now) > pending_after_days
    ]


def collect_red_flags(
    items: list[WorkItem],
    dependencies: list[Dependency] | None = None,
    requests: list[TaskRequest] | None = None,
    now: datetime | None = None,
    project_ids: Optional[Iterable[str]] = None,
    settings: Settings | None = None,
) -> list[RedFlag]:
    """Build the merged red flag list for every item in scope."""

    now = resolve_now(now)
    settings = settings or get_settings()
    scoped = filter_by_projects(items, project_ids)
    siblings_by_parent = group_siblings(scoped)

    deadline = select_deadline_candidates(scoped, siblings_by_parent, now)
    anomalies = select_anomaly_candidates(scoped)
    blocked = [item for item in scoped if item.status == "blocked"]
    stale = select_stale_candidates(scoped, now, settings.STALE_AFTER_DAYS)
    unassigned = select_unassigned(scoped)
    pending = select_pending_requests(requests or [], now, settings.PENDING_AFTER_DAYS)

    logger.debug(
        "red flag candidates: deadline=%d anomaly=%d blocked=%d stale=%d unassigned=%d pending=%d",
        len(deadline),
        len(anomalies),
        len(blocked),
        len(stale),
        len(unassigned),
        len(pending),
    )

    return merge_and_sort_red_flags(
        [
            *process_deadline_flags(deadline, now=now),
            *process_anomaly_flags(anomalies, now=now),
            *process_blocker_flags(blocked, group_dependencies(dependencies or []), now=now),
            *process_stale_flags(stale, now=now),
            *process_unassigned_flags(unassigned, now=now),
            *process_pending_approval_flags(pending, now=now),
        ]
    )


def timeline_bucket(due_date: datetime, now: datetime) -> str:
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if due_date < today_start:
        return "overdue"
    if due_date < today_start + timedelta(days=1):
        return "today"
    if due_date < today_start + timedelta(days=7):
        return "this_week"
    return "this_month"


def build_deadline_timeline(
    items: list[WorkItem],
    now: datetime | None = None,
    project_ids: Optional[Iterable[str]] = None,
) -> list[DeadlineEntry]:
    """Open items with a due date, bucketed and ordered by due date."""

    now = resolve_now(now)
    scoped = filter_by_projects(items, project_ids)
    siblings_by_parent = group_siblings(scoped)

    entries = []
    for item in scoped:
        if item.due_date is None or item.status == "done":
            continue
        siblings = siblings_by_parent.get(item.parent_id, []) if item.parent_id is not None else []
        entries.append(
            DeadlineEntry(
                id=item.id,
                name=item.name,
                due_date=item.due_date,
                risk=calculate_deadline_risk(item, item.work_logs, siblings, now=now),
                project_name=item.project_name,
                bucket=timeline_bucket(item.due_date, now),
                assigned_to=item.assigned_to,
            )
        )

    logger.debug("deadline timeline: %d entries", len(entries))
    return sorted(entries, key=lambda entry: (_BUCKET_ORDER[entry.bucket], entry.due_date))
