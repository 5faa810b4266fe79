"""Core data schema for work items and derived dashboard values."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dashboard_engine.timeutil import parse_timestamp

STATUSES = ("todo", "in_progress", "done", "blocked")
OPEN_STATUSES = ("todo", "in_progress", "blocked")

RISK_LEVELS = ("none", "low", "medium", "high", "critical")
RISK_ORDINAL = {level: index for index, level in enumerate(RISK_LEVELS)}

SEVERITIES = ("critical", "high", "medium")
SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2}

FLAG_TYPES = ("deadline", "anomaly", "blocked", "stale", "unassigned", "pending_approval")

FOCUS_CATEGORIES = ("overdue", "due_today", "due_this_week", "in_progress", "high_priority", "normal")

TIMELINE_BUCKETS = ("overdue", "today", "this_week", "this_month")


def _as_utc(value):
    # naive values are taken as UTC
    return parse_timestamp(value) if value is not None else None


@dataclass
class UserRef:
    id: str
    name: str


@dataclass
class WorkLog:
    """One time entry attached to a single work item."""

    hours_spent: float
    work_date: Optional[datetime] = None

    def __post_init__(self):
        self.work_date = _as_utc(self.work_date)


@dataclass
class Sibling:
    status: str


@dataclass
class WorkItem:
    """Normalized subtask record used by all engine modules."""

    id: str
    name: str
    status: str
    estimated_hours: Optional[float] = None
    due_date: Optional[datetime] = None
    priority_stars: float = 1.0
    assigned_to: Optional[UserRef] = None
    updated_at: Optional[datetime] = None
    parent_id: Optional[str] = None
    project_id: Optional[str] = None
    project_name: str = "Unknown project"
    work_logs: list[WorkLog] = field(default_factory=list)

    def __post_init__(self):
        self.due_date = _as_utc(self.due_date)
        self.updated_at = _as_utc(self.updated_at)

    @property
    def hours_logged(self) -> float:
        return sum(log.hours_spent for log in self.work_logs)


@dataclass
class Dependency:
    """Edge: `dependent_id` waits on the subtask `depends_on_id`."""

    dependent_id: str
    depends_on_id: Optional[str] = None
    depends_on_name: Optional[str] = None
    depends_on_status: Optional[str] = None


@dataclass
class TaskRequest:
    id: str
    task_name: str
    created_at: datetime
    status: str = "pending"
    project_name: str = "Unknown project"
    requester_name: Optional[str] = None

    def __post_init__(self):
        self.created_at = parse_timestamp(self.created_at)


@dataclass
class Snapshot:
    """Everything the collectors need, as materialized by an adapter."""

    work_items: list[WorkItem] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    task_requests: list[TaskRequest] = field(default_factory=list)


@dataclass
class DeadlineRisk:
    level: str
    reason: str
    days_left: Optional[float]
    hours_remaining: Optional[float]
    hours_logged: float
    estimated_hours: Optional[float]
    effort_percent: float
    task_completion_percent: float
    is_overrun: bool
    projected_total: Optional[float]


@dataclass
class EntityRef:
    type: str
    id: str
    name: str


@dataclass
class FlagMetrics:
    estimated: float
    logged: float
    percent: float
    days_left: float


@dataclass
class RedFlag:
    id: str
    type: str
    severity: str
    title: str
    description: str
    related_entity: EntityRef
    project_name: str
    created_at: datetime
    assigned_to: Optional[UserRef] = None
    metrics: Optional[FlagMetrics] = None


@dataclass
class DeadlineCandidate:
    item: WorkItem
    risk: DeadlineRisk


@dataclass
class AnomalyCandidate:
    item: WorkItem
    hours_logged: float
    severity: str


@dataclass
class StaleCandidate:
    item: WorkItem
    days_without_activity: float


@dataclass
class FocusTask:
    """A work item ranked for a worker's focus queue."""

    item: WorkItem
    urgency_score: int
    urgency_reason: str
    deadline_risk: DeadlineRisk
    hours_logged: float
    category: str


@dataclass
class DeadlineEntry:
    id: str
    name: str
    due_date: datetime
    risk: DeadlineRisk
    project_name: str
    bucket: str
    entity_type: str = "subtask"
    assigned_to: Optional[UserRef] = None
