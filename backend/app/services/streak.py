from collections.abc import Iterable
from datetime import date
from typing import Protocol

from app.services.dates import parse_canonical_date


class DatedRecord(Protocol):
    date: str


def calculate_streak(records: Iterable[DatedRecord], today: date) -> int:
    """Count consecutive practice days ending today or yesterday.

    Several sessions on one day count once. A gap of two or more days, or a
    date after the cursor, ends the streak.
    """
    distinct_dates = {record.date for record in records}
    if not distinct_dates:
        return 0

    practice_days = sorted(
        (parse_canonical_date(value) for value in distinct_dates),
        reverse=True,
    )

    streak = 0
    cursor = today
    for practice_day in practice_days:
        diff_days = (cursor - practice_day).days
        if diff_days not in (0, 1):
            break
        streak += 1
        cursor = practice_day
    return streak
