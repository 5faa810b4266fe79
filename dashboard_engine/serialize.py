"""JSON-ready renditions of derived values, keyed the way the dashboard reads them."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from dashboard_engine.schema import DeadlineEntry, DeadlineRisk, FocusTask, RedFlag, UserRef, WorkItem


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _user(user: Optional[UserRef]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name}


def risk_to_dict(risk: DeadlineRisk) -> dict:
    return {
        "level": risk.level,
        "reason": risk.reason,
        "daysLeft": risk.days_left,
        "hoursRemaining": risk.hours_remaining,
        "hoursLogged": risk.hours_logged,
        "estimatedHours": risk.estimated_hours,
        "effortPercent": risk.effort_percent,
        "taskCompletionPercent": risk.task_completion_percent,
        "isOverrun": risk.is_overrun,
        "projectedTotal": risk.projected_total,
    }


def flag_to_dict(flag: RedFlag) -> dict:
    payload = {
        "id": flag.id,
        "type": flag.type,
        "severity": flag.severity,
        "title": flag.title,
        "description": flag.description,
        "relatedEntity": {
            "type": flag.related_entity.type,
            "id": flag.related_entity.id,
            "name": flag.related_entity.name,
        },
        "projectName": flag.project_name,
        "createdAt": _iso(flag.created_at),
    }
    if flag.assigned_to is not None:
        payload["assignedTo"] = _user(flag.assigned_to)
    if flag.metrics is not None:
        payload["metrics"] = {
            "estimated": flag.metrics.estimated,
            "logged": flag.metrics.logged,
            "percent": flag.metrics.percent,
            "daysLeft": flag.metrics.days_left,
        }
    return payload


def item_to_dict(item: WorkItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "parent_id": item.parent_id,
        "status": item.status,
        "estimated_hours": item.estimated_hours,
        "due_date": _iso(item.due_date),
        "priority_stars": item.priority_stars,
        "assigned_to": item.assigned_to.id if item.assigned_to is not None else None,
        "updated_at": _iso(item.updated_at),
        "project_name": item.project_name,
    }


def focus_task_to_dict(task: FocusTask) -> dict:
    payload = item_to_dict(task.item)
    payload.update(
        {
            "urgencyScore": task.urgency_score,
            "urgencyReason": task.urgency_reason,
            "deadlineRisk": risk_to_dict(task.deadline_risk),
            "hoursLogged": task.hours_logged,
            "category": task.category,
        }
    )
    return payload


def deadline_entry_to_dict(entry: DeadlineEntry) -> dict:
    payload = {
        "id": entry.id,
        "name": entry.name,
        "entityType": entry.entity_type,
        "dueDate": _iso(entry.due_date),
        "risk": risk_to_dict(entry.risk),
        "projectName": entry.project_name,
        "bucket": entry.bucket,
    }
    if entry.assigned_to is not None:
        payload["assignedTo"] = _user(entry.assigned_to)
    return payload
