import json
from datetime import datetime, timezone

import pytest

from dashboard_engine.adapters.csv_adapter import attach_work_logs, parse as parse_csv, parse_work_logs
from dashboard_engine.adapters.json_adapter import parse as parse_json, parse_payload


def snapshot():
    return {
        "subtasks": [
            {
                "id": "st-1",
                "name": "Wire webhook",
                "parent_id": "t-1",
                "status": "in_progress",
                "estimated_hours": 10,
                "due_date": "2025-03-12",
                "priority_stars": 2,
                "assigned_user": {"id": "u1", "full_name": "Ada Lovelace"},
                "updated_at": "2025-03-09T15:00:00Z",
                "parent_task": {"id": "t-1", "name": "Payments", "module": {"project": {"id": "p1", "name": "Orbit"}}},
                "work_logs": [{"hours_spent": 8, "work_date": "2025-03-07"}, {"hours_spent": 4.5}],
            },
            {"id": "st-2", "name": "Loose end", "status": "todo"},
        ],
        "dependencies": [
            {"dependent_task_id": "st-2", "depends_on_subtask": {"id": "st-1", "name": "Wire webhook", "status": "in_progress"}}
        ],
        "task_requests": [
            {
                "id": "tr-1",
                "task_name": "Add Apple Pay",
                "status": "pending",
                "created_at": "2025-03-01T10:00:00+02:00",
                "module": {"name": "Payments", "project": {"name": "Orbit"}},
            }
        ],
    }


def test_json_parse_success(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot()), encoding="utf-8")
    parsed = parse_json(str(path))

    first, second = parsed.work_items
    assert first.project_id == "p1"
    assert first.project_name == "Orbit"
    assert first.assigned_to.name == "Ada Lovelace"
    assert first.due_date == datetime(2025, 3, 12, tzinfo=timezone.utc)
    assert first.hours_logged == 12.5
    assert first.work_logs[0].work_date == datetime(2025, 3, 7, tzinfo=timezone.utc)

    assert second.priority_stars == 1.0
    assert second.project_name == "Unknown project"
    assert second.assigned_to is None
    assert second.work_logs == []

    assert parsed.dependencies[0].depends_on_name == "Wire webhook"
    assert parsed.task_requests[0].created_at == datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
    assert parsed.task_requests[0].project_name == "Orbit"


@pytest.mark.parametrize(
    "patch",
    [
        {"status": "archived"},
        {"due_date": "soon"},
        {"estimated_hours": "lots"},
        {"work_logs": [{"hours_spent": -1}]},
        {"work_logs": [{"hours_spent": float("nan")}]},
        {"estimated_hours": "nan"},
        {"name": ""},
    ],
)
def test_json_parse_rejects_bad_subtask(patch):
    payload = snapshot()
    payload["subtasks"][0].update(patch)
    with pytest.raises(ValueError, match="Subtask 1"):
        parse_payload(payload)


@pytest.mark.parametrize("upstream", ["st-1", ["st-1"]])
def test_json_parse_rejects_non_object_upstream(upstream):
    payload = snapshot()
    payload["dependencies"][0]["depends_on_subtask"] = upstream
    with pytest.raises(ValueError, match="Dependency 1"):
        parse_payload(payload)


def test_json_payload_must_be_object():
    with pytest.raises(ValueError):
        parse_payload([{"id": "st-1"}])


def test_csv_parse_with_work_logs(tmp_path):
    items_path = tmp_path / "subtasks.csv"
    items_path.write_text(
        "id,name,status,estimated_hours,due_date,priority_stars,assigned_to,assigned_name,updated_at,parent_id,project_id,project_name\n"
        "st-1,Wire webhook,in_progress,10,2025-03-12,2,u1,Ada,2025-03-09T15:00:00Z,t-1,p1,Orbit\n"
        "st-2,Loose end,todo,,,,,,,,,\n",
        encoding="utf-8",
    )
    logs_path = tmp_path / "work_logs.csv"
    logs_path.write_text("subtask_id,hours_spent,work_date\nst-1,8,2025-03-07\nst-1,4,\n", encoding="utf-8")

    items = attach_work_logs(parse_csv(str(items_path)), parse_work_logs(str(logs_path)))
    assert len(items) == 2
    assert items[0].hours_logged == 12
    assert items[0].assigned_to.name == "Ada"
    assert items[1].estimated_hours is None
    assert items[1].due_date is None
    assert items[1].work_logs == []


def test_csv_parse_invalid_row(tmp_path):
    path = tmp_path / "subtasks.csv"
    path.write_text("id,name,status,due_date\nst-1,Broken,todo,bad\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Row 2"):
        parse_csv(str(path))


def test_csv_work_logs_reject_nan_hours(tmp_path):
    path = tmp_path / "work_logs.csv"
    path.write_text("subtask_id,hours_spent,work_date\nst-1,4,\nst-1,nan,\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Row 3"):
        parse_work_logs(str(path))
