"""JSON adapter: map fetched rows onto typed work items, dependencies and requests."""

from __future__ import annotations

import json
import math
from typing import Any, Optional

from dashboard_engine.schema import STATUSES, Dependency, Snapshot, TaskRequest, UserRef, WorkItem, WorkLog
from dashboard_engine.timeutil import parse_timestamp

_REQUIRED_FIELDS = {"id", "name", "status"}
DEFAULT_PRIORITY_STARS = 1.0
UNKNOWN_PROJECT = "Unknown project"


def _nested(item: dict, *path: str) -> Any:
    value: Any = item
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _first(*values: Any) -> Any:
    return next((value for value in values if value not in (None, "")), None)


def _timestamp(value: Any, label: str, where: str):
    if value in (None, ""):
        return None
    try:
        return parse_timestamp(value)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{where}: malformed {label}") from exc


def _number(value: Any, label: str, where: str) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{where}: invalid {label}") from exc
    if math.isnan(number):
        raise ValueError(f"{where}: invalid {label}")
    return number


def _parse_work_logs(raw: Any, where: str) -> list[WorkLog]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"{where}: work_logs must be a list")

    logs = []
    for position, entry in enumerate(raw, start=1):
        label = f"{where}, work log {position}"
        if not isinstance(entry, dict):
            raise ValueError(f"{label}: expected an object")
        hours = _number(entry.get("hours_spent"), "hours_spent", label)
        if hours is None or hours < 0:
            raise ValueError(f"{label}: hours_spent must be a non-negative number")
        logs.append(WorkLog(hours_spent=hours, work_date=_timestamp(entry.get("work_date"), "work_date", label)))
    return logs


def _parse_assignee(item: dict) -> Optional[UserRef]:
    user = item.get("assigned_user")
    if isinstance(user, dict) and user.get("id"):
        return UserRef(id=str(user["id"]), name=str(user.get("full_name") or user["id"]))
    assigned = item.get("assigned_to")
    if assigned not in (None, ""):
        return UserRef(id=str(assigned), name=str(assigned))
    return None


def _parse_subtask(item: dict, index: int) -> WorkItem:
    where = f"Subtask {index}"
    missing = [field for field in sorted(_REQUIRED_FIELDS) if not item.get(field)]
    if missing:
        raise ValueError(f"{where}: missing required fields {missing}")

    status = str(item["status"]).strip()
    if status not in STATUSES:
        raise ValueError(f"{where}: invalid status '{status}'")

    project_id = _first(
        _nested(item, "project", "id"),
        _nested(item, "module", "project_id"),
        _nested(item, "module", "project", "id"),
        _nested(item, "parent_task", "module", "project_id"),
        _nested(item, "parent_task", "module", "project", "id"),
    )
    project_name = _first(
        _nested(item, "project", "name"),
        _nested(item, "module", "project", "name"),
        _nested(item, "parent_task", "module", "project", "name"),
    )
    parent_id = _first(item.get("parent_id"), _nested(item, "parent_task", "id"))
    stars = _number(item.get("priority_stars"), "priority_stars", where)

    return WorkItem(
        id=str(item["id"]).strip(),
        name=str(item["name"]),
        status=status,
        estimated_hours=_number(item.get("estimated_hours"), "estimated_hours", where),
        due_date=_timestamp(item.get("due_date"), "due_date", where),
        priority_stars=stars if stars is not None else DEFAULT_PRIORITY_STARS,
        assigned_to=_parse_assignee(item),
        updated_at=_timestamp(item.get("updated_at"), "updated_at", where),
        parent_id=str(parent_id) if parent_id is not None else None,
        project_id=str(project_id) if project_id is not None else None,
        project_name=str(project_name) if project_name is not None else UNKNOWN_PROJECT,
        work_logs=_parse_work_logs(item.get("work_logs"), where),
    )


def _parse_dependency(item: dict, index: int) -> Dependency:
    dependent_id = item.get("dependent_task_id")
    if not dependent_id:
        raise ValueError(f"Dependency {index}: missing required fields ['dependent_task_id']")
    upstream = item.get("depends_on_subtask") or {}
    if not isinstance(upstream, dict):
        raise ValueError(f"Dependency {index}: depends_on_subtask must be an object")
    return Dependency(
        dependent_id=str(dependent_id),
        depends_on_id=_first(upstream.get("id"), item.get("depends_on_task_id")),
        depends_on_name=upstream.get("name"),
        depends_on_status=upstream.get("status"),
    )


def _parse_request(item: dict, index: int) -> TaskRequest:
    where = f"Task request {index}"
    missing = [field for field in ("created_at", "id", "task_name") if not item.get(field)]
    if missing:
        raise ValueError(f"{where}: missing required fields {missing}")

    return TaskRequest(
        id=str(item["id"]),
        task_name=str(item["task_name"]),
        created_at=_timestamp(item["created_at"], "created_at", where),
        status=str(item.get("status") or "pending"),
        project_name=_nested(item, "module", "project", "name") or UNKNOWN_PROJECT,
        requester_name=_nested(item, "requester", "full_name"),
    )


def _list_of_objects(payload: dict, key: str) -> list[dict]:
    rows = payload.get(key) or []
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise ValueError(f"'{key}' must be a list of objects")
    return rows


def parse_payload(payload: Any) -> Snapshot:
    """Map an already-decoded snapshot object into typed values."""

    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object with 'subtasks', 'dependencies' and 'task_requests'")

    return Snapshot(
        work_items=[_parse_subtask(row, i) for i, row in enumerate(_list_of_objects(payload, "subtasks"), start=1)],
        dependencies=[
            _parse_dependency(row, i) for i, row in enumerate(_list_of_objects(payload, "dependencies"), start=1)
        ],
        task_requests=[
            _parse_request(row, i) for i, row in enumerate(_list_of_objects(payload, "task_requests"), start=1)
        ],
    )


def parse(file_path: str) -> Snapshot:
    """Parse a JSON snapshot file into typed values."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_payload(payload)
