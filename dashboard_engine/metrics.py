"""Dashboard summary metrics."""

from __future__ import annotations

from collections import Counter

import numpy as np

from dashboard_engine.schema import FLAG_TYPES, RISK_LEVELS, SEVERITIES, DeadlineRisk, RedFlag


def summarize_flags(flags: list[RedFlag]) -> dict:
    """Count red flags per severity and per type."""

    by_severity = Counter(flag.severity for flag in flags)
    by_type = Counter(flag.type for flag in flags)
    return {
        "total": len(flags),
        "by_severity": {severity: by_severity.get(severity, 0) for severity in SEVERITIES},
        "by_type": {flag_type: by_type.get(flag_type, 0) for flag_type in FLAG_TYPES},
    }


def summarize_risks(risks: list[DeadlineRisk]) -> dict:
    """Compute level counts, effort and schedule statistics over deadline risks."""

    by_level = Counter(risk.level for risk in risks)
    if not risks:
        return {
            "total": 0,
            "by_level": {level: 0 for level in RISK_LEVELS},
            "mean_effort_percent": 0.0,
            "overrun_count": 0,
            "median_days_left": None,
            "total_hours_logged": 0.0,
        }

    effort = np.asarray([risk.effort_percent for risk in risks], dtype=float)
    logged = np.asarray([risk.hours_logged for risk in risks], dtype=float)
    days_left = np.asarray([risk.days_left for risk in risks if risk.days_left is not None], dtype=float)

    return {
        "total": len(risks),
        "by_level": {level: by_level.get(level, 0) for level in RISK_LEVELS},
        "mean_effort_percent": float(np.mean(effort)),
        "overrun_count": int(sum(1 for risk in risks if risk.is_overrun)),
        "median_days_left": float(np.median(days_left)) if days_left.size else None,
        "total_hours_logged": float(np.sum(logged)),
    }
