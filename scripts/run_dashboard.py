"""Render a dashboard view (red flags, focus queue, deadline timeline) from a JSON snapshot."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from dashboard_engine.adapters import json_adapter
from dashboard_engine.config import get_settings
from dashboard_engine.dashboard import build_deadline_timeline, collect_red_flags
from dashboard_engine.focus_queue import build_focus_queue
from dashboard_engine.logger import get_logger
from dashboard_engine.metrics import summarize_flags, summarize_risks
from dashboard_engine.serialize import deadline_entry_to_dict, flag_to_dict, focus_task_to_dict
from dashboard_engine.timeutil import resolve_now

VIEWS = ("red-flags", "focus", "timeline", "summary")

logger = get_logger("run_dashboard")


def build_view(snapshot, view: str, now, user_id=None, project_ids=None):
    if view == "red-flags":
        flags = collect_red_flags(
            snapshot.work_items, snapshot.dependencies, snapshot.task_requests, now=now, project_ids=project_ids
        )
        return [flag_to_dict(flag) for flag in flags]
    if view == "focus":
        return [focus_task_to_dict(task) for task in build_focus_queue(snapshot.work_items, now=now, user_id=user_id)]
    if view == "timeline":
        timeline = build_deadline_timeline(snapshot.work_items, now=now, project_ids=project_ids)
        return [deadline_entry_to_dict(entry) for entry in timeline]
    if view == "summary":
        flags = collect_red_flags(
            snapshot.work_items, snapshot.dependencies, snapshot.task_requests, now=now, project_ids=project_ids
        )
        timeline = build_deadline_timeline(snapshot.work_items, now=now, project_ids=project_ids)
        return {
            "red_flags": summarize_flags(flags),
            "deadlines": summarize_risks([entry.risk for entry in timeline]),
        }
    raise ValueError(f"Unsupported view '{view}', expected one of {', '.join(VIEWS)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run dashboard-engine over a JSON snapshot")
    parser.add_argument("--data", required=True, help="Path to JSON snapshot file")
    parser.add_argument("--view", choices=VIEWS, default="red-flags")
    parser.add_argument("--user", help="Worker id for the focus queue")
    parser.add_argument("--project", action="append", dest="projects", help="Restrict to project id (repeatable)")
    parser.add_argument("--now", help="Reference time as ISO timestamp (defaults to current UTC time)")
    args = parser.parse_args()

    now = resolve_now(args.now or None)
    snapshot = json_adapter.parse(args.data)
    logger.info(
        "Loaded %d subtasks, %d dependencies, %d task requests from %s",
        len(snapshot.work_items),
        len(snapshot.dependencies),
        len(snapshot.task_requests),
        args.data,
    )

    result = build_view(snapshot, args.view, now, user_id=args.user, project_ids=args.projects)
    print(json.dumps(result, indent=get_settings().JSON_INDENT))


if __name__ == "__main__":
    main()
