"""Demo script for dashboard-engine."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from dashboard_engine.adapters.json_adapter import parse
from dashboard_engine.dashboard import collect_red_flags
from dashboard_engine.focus_queue import build_focus_queue
from dashboard_engine.metrics import summarize_flags
from dashboard_engine.timeutil import parse_timestamp

NOW = parse_timestamp("2025-03-10T09:00:00Z")


def main() -> None:
    snapshot = parse("examples/sample_snapshot.json")
    flags = collect_red_flags(snapshot.work_items, snapshot.dependencies, snapshot.task_requests, now=NOW)
    for flag in flags:
        print(f"[{flag.severity}] {flag.type}: {flag.title} - {flag.description}")
    print("Summary:", summarize_flags(flags))

    print("Focus queue for u1:")
    for task in build_focus_queue(snapshot.work_items, now=NOW, user_id="u1"):
        print(f"  {task.urgency_score:>3} {task.category:<14} {task.item.name} ({task.urgency_reason})")


if __name__ == "__main__":
    main()
