from datetime import datetime, timezone

import pytest

from dashboard_engine.metrics import summarize_flags, summarize_risks
from dashboard_engine.schema import DeadlineRisk, EntityRef, RedFlag

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def flag(flag_type, severity):
    return RedFlag(
        id=f"{flag_type}-{severity}",
        type=flag_type,
        severity=severity,
        title="t",
        description="",
        related_entity=EntityRef(type="subtask", id="s", name="s"),
        project_name="P",
        created_at=NOW,
    )


def risk(level, effort, days_left, logged, overrun=False):
    return DeadlineRisk(
        level=level,
        reason="",
        days_left=days_left,
        hours_remaining=None,
        hours_logged=logged,
        estimated_hours=None,
        effort_percent=effort,
        task_completion_percent=0.0,
        is_overrun=overrun,
        projected_total=None,
    )


def test_summarize_flags_counts():
    summary = summarize_flags([flag("deadline", "critical"), flag("blocked", "critical"), flag("stale", "medium")])
    assert summary["total"] == 3
    assert summary["by_severity"] == {"critical": 2, "high": 0, "medium": 1}
    assert summary["by_type"]["blocked"] == 1
    assert summary["by_type"]["pending_approval"] == 0


def test_summarize_risks():
    summary = summarize_risks(
        [
            risk("critical", 120.0, -1.0, 12.0, overrun=True),
            risk("low", 30.0, 10.0, 3.0),
            risk("none", 0.0, None, 0.5),
        ]
    )
    assert summary["total"] == 3
    assert summary["by_level"]["critical"] == 1
    assert summary["by_level"]["medium"] == 0
    assert summary["mean_effort_percent"] == pytest.approx(50.0)
    assert summary["overrun_count"] == 1
    assert summary["median_days_left"] == pytest.approx(4.5)
    assert summary["total_hours_logged"] == pytest.approx(15.5)


def test_summaries_of_nothing():
    assert summarize_flags([])["total"] == 0
    empty = summarize_risks([])
    assert empty["total"] == 0
    assert empty["median_days_left"] is None
    assert empty["mean_effort_percent"] == 0.0
