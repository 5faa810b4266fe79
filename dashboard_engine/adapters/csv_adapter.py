"""CSV adapter for flat subtask and work log exports."""

from __future__ import annotations

import csv
import math
from collections import defaultdict
from dataclasses import replace

from dashboard_engine.schema import STATUSES, UserRef, WorkItem, WorkLog
from dashboard_engine.timeutil import parse_timestamp

_REQUIRED_FIELDS = {"id", "name", "status"}
_REQUIRED_LOG_FIELDS = {"subtask_id", "hours_spent"}


def _optional_float(row: dict, field: str, row_number: int):
    raw = row.get(field)
    if raw in (None, ""):
        return None
    try:
        number = float(raw)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Row {row_number}: invalid {field}") from exc
    if math.isnan(number):
        raise ValueError(f"Row {row_number}: invalid {field}")
    return number


def _optional_timestamp(row: dict, field: str, row_number: int):
    raw = row.get(field)
    if raw in (None, ""):
        return None
    try:
        return parse_timestamp(raw)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Row {row_number}: malformed {field}") from exc


def _parse_row(row: dict, row_number: int) -> WorkItem:
    missing = [field for field in sorted(_REQUIRED_FIELDS) if not row.get(field)]
    if missing:
        raise ValueError(f"Row {row_number}: missing required fields {missing}")

    status = row["status"].strip()
    if status not in STATUSES:
        raise ValueError(f"Row {row_number}: invalid status '{status}'")

    assigned_id = (row.get("assigned_to") or "").strip()
    assignee = None
    if assigned_id:
        assignee = UserRef(id=assigned_id, name=(row.get("assigned_name") or "").strip() or assigned_id)

    stars = _optional_float(row, "priority_stars", row_number)

    return WorkItem(
        id=row["id"].strip(),
        name=row["name"].strip(),
        status=status,
        estimated_hours=_optional_float(row, "estimated_hours", row_number),
        due_date=_optional_timestamp(row, "due_date", row_number),
        priority_stars=stars if stars is not None else 1.0,
        assigned_to=assignee,
        updated_at=_optional_timestamp(row, "updated_at", row_number),
        parent_id=(row.get("parent_id") or "").strip() or None,
        project_id=(row.get("project_id") or "").strip() or None,
        project_name=(row.get("project_name") or "").strip() or "Unknown project",
    )


def parse(file_path: str) -> list[WorkItem]:
    """Parse a subtask CSV export into work items (without work logs)."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        return [_parse_row(row, row_number) for row_number, row in enumerate(reader, start=2)]


def parse_work_logs(file_path: str) -> dict[str, list[WorkLog]]:
    """Parse a work log CSV export, grouped by subtask id."""

    logs: dict[str, list[WorkLog]] = defaultdict(list)
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return {}

        for row_number, row in enumerate(reader, start=2):
            missing = [field for field in sorted(_REQUIRED_LOG_FIELDS) if not row.get(field)]
            if missing:
                raise ValueError(f"Row {row_number}: missing required fields {missing}")
            hours = _optional_float(row, "hours_spent", row_number)
            if hours < 0:
                raise ValueError(f"Row {row_number}: hours_spent must not be negative")
            logs[row["subtask_id"].strip()].append(
                WorkLog(hours_spent=hours, work_date=_optional_timestamp(row, "work_date", row_number))
            )
    return dict(logs)


def attach_work_logs(items: list[WorkItem], logs_by_item: dict[str, list[WorkLog]]) -> list[WorkItem]:
    return [replace(item, work_logs=list(logs_by_item.get(item.id, []))) for item in items]
