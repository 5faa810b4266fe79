"""Time overrun anomaly rules."""

from __future__ import annotations

from typing import Optional


def get_overrun_anomaly_severity(hours_logged: float, estimated_hours: float, status: str) -> Optional[str]:
    """Classify how far logged hours overshoot the estimate.

    Callers only invoke this with a positive estimate.
    """

    if status == "done":
        return None
    if hours_logged < estimated_hours:
        return None

    ratio = hours_logged / estimated_hours
    if ratio >= 2.0:
        return "critical"
    if ratio >= 1.5:
        return "high"
    if ratio >= 1.0:
        return "medium"
    return None
