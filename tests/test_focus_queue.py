from datetime import datetime, timedelta, timezone

from dashboard_engine.focus_queue import build_focus_queue, get_category
from dashboard_engine.schema import UserRef, WorkItem, WorkLog

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
WORKER = UserRef(id="u1", name="Ada")


def subtask(item_id, due=None, status="todo", stars=1.0, estimated=None, assignee=WORKER, logged=0.0):
    return WorkItem(
        id=item_id,
        name=item_id,
        status=status,
        estimated_hours=estimated,
        due_date=due,
        priority_stars=stars,
        assigned_to=assignee,
        work_logs=[WorkLog(hours_spent=logged)] if logged else [],
    )


def test_overdue_item():
    [task] = build_focus_queue([subtask("a", due=NOW - timedelta(days=2))], now=NOW)
    assert task.urgency_score == 100
    assert task.category == "overdue"
    assert task.urgency_reason == "Overdue by 2 days"
    assert task.deadline_risk.level == "critical"


def test_overdue_under_a_day_is_singular():
    [task] = build_focus_queue([subtask("a", due=NOW - timedelta(hours=12))], now=NOW)
    assert task.urgency_reason == "Overdue by 1 day"


def test_high_priority_item_due_later():
    [task] = build_focus_queue([subtask("a", due=NOW + timedelta(days=10), stars=3.0)], now=NOW)
    assert task.urgency_score == 50
    assert task.category == "high_priority"
    assert task.urgency_reason == "High priority"


def test_due_today():
    [task] = build_focus_queue([subtask("a", due=NOW + timedelta(hours=6))], now=NOW)
    assert task.urgency_score == 90
    assert task.category == "due_today"


def test_due_this_week_with_high_risk():
    [task] = build_focus_queue([subtask("a", due=NOW + timedelta(days=2))], now=NOW)
    assert task.deadline_risk.level == "high"
    assert task.urgency_score == 80
    assert task.category == "due_this_week"
    assert task.urgency_reason == "Due this week"


def test_due_this_week_with_moderate_risk():
    [task] = build_focus_queue([subtask("a", due=NOW + timedelta(days=5))], now=NOW)
    assert task.deadline_risk.level == "medium"
    assert task.urgency_score == 40
    assert task.category == "normal"


def test_in_progress_and_normal():
    queue = build_focus_queue(
        [subtask("later", due=NOW + timedelta(days=10), status="in_progress"), subtask("plain")],
        now=NOW,
    )
    assert [(t.item.id, t.urgency_score, t.category) for t in queue] == [
        ("later", 60, "in_progress"),
        ("plain", 10, "normal"),
    ]


def test_hours_logged_comes_from_work_logs():
    [task] = build_focus_queue([subtask("a", estimated=8.0, logged=3.5)], now=NOW)
    assert task.hours_logged == 3.5
    assert task.deadline_risk.hours_remaining == 4.5


def test_queue_sorted_by_urgency_with_stable_ties():
    items = [
        subtask("normal-1"),
        subtask("overdue", due=NOW - timedelta(days=1)),
        subtask("stars", stars=2.5),
        subtask("normal-2"),
    ]
    assert [t.item.id for t in build_focus_queue(items, now=NOW)] == ["overdue", "stars", "normal-1", "normal-2"]


def test_queue_filters_user_and_open_statuses():
    items = [
        subtask("mine"),
        subtask("finished", status="done"),
        subtask("blocked", status="blocked"),
        subtask("theirs", assignee=UserRef(id="u2", name="Grace")),
        subtask("nobody", assignee=None),
    ]
    assert [t.item.id for t in build_focus_queue(items, now=NOW, user_id="u1")] == ["mine", "blocked"]
    assert len(build_focus_queue(items, now=NOW)) == 4


def test_category_thresholds():
    assert get_category(100) == "overdue"
    assert get_category(90) == "due_today"
    assert get_category(80) == "due_this_week"
    assert get_category(60) == "in_progress"
    assert get_category(50) == "high_priority"
    assert get_category(40) == "normal"
    assert get_category(10) == "normal"


def test_naive_dates_are_read_as_utc():
    items = [subtask("naive", due=datetime(2025, 3, 8, 12, 0)), subtask("plain")]
    queue = build_focus_queue(items, now=datetime(2025, 3, 10, 12, 0))
    assert [(t.item.id, t.category) for t in queue] == [("naive", "overdue"), ("plain", "normal")]
    assert queue[0].urgency_reason == "Overdue by 2 days"
