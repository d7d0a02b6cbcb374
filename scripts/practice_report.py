#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from pydantic import ValidationError

ROOT_DIR = Path(__file__).resolve().parents[1]
BACKEND_DIR = ROOT_DIR / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.core.clock import local_today, resolve_timezone  # noqa: E402
from app.services.dates import InvalidPracticeDateError, parse_canonical_date  # noqa: E402
from app.services.practice_report import build_practice_report  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute practice statistics from a JSON export of practice sessions."
    )
    parser.add_argument(
        "--sessions",
        required=True,
        help="JSON array of {date, duration_minutes, rating}",
    )
    parser.add_argument(
        "--syllabus",
        default="",
        help="Optional JSON array of {level, status}",
    )
    parser.add_argument(
        "--today",
        default="",
        help="Reference day in YYYY-MM-DD (defaults to today in --timezone)",
    )
    parser.add_argument(
        "--timezone",
        default=os.getenv("PRACTICE_TIMEZONE", "UTC").strip() or "UTC",
        help="Time zone used to resolve today",
    )
    parser.add_argument(
        "--json-out",
        default="",
        help="Optional path to write the report json",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    try:
        today = (
            parse_canonical_date(args.today)
            if args.today
            else local_today(resolve_timezone(args.timezone))
        )
        report = build_practice_report(
            Path(args.sessions).resolve(),
            today,
            syllabus_path=Path(args.syllabus).resolve() if args.syllabus else None,
        )
    except (InvalidPracticeDateError, ValidationError, ValueError, OSError) as exc:
        print(f"[PRACTICE-REPORT] invalid input: {exc}", file=sys.stderr)
        return 2

    stats = report.stats
    print(
        "[PRACTICE-REPORT] "
        f"today={report.today.isoformat()} "
        f"streak={stats.streak} "
        f"week_minutes={stats.this_week_minutes} "
        f"total_minutes={stats.total_minutes} "
        f"avg_rating={stats.average_rating:.2f} "
        f"sessions={stats.total_sessions} "
        f"days={len(stats.daily_practice)}"
    )
    for progress in report.syllabus_progress:
        print(
            f"  - {progress.level}: {progress.completed}/{progress.total} "
            f"({progress.percentage}%)"
        )

    if args.json_out:
        out_path = Path(args.json_out).resolve()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(
            json.dumps(report.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8"
        )
        print(f"[PRACTICE-REPORT] report written: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
