from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from app.schemas.stats import DailyAggregate, SyllabusProgress
from app.schemas.syllabus import SyllabusStatus
from app.services.dates import parse_canonical_date


class PracticeRecord(Protocol):
    date: str
    duration_minutes: int
    rating: int | None


class CurriculumRecord(Protocol):
    level: str
    status: str


@dataclass(slots=True)
class _DayAccumulator:
    total_minutes: int
    session_count: int
    average_rating: float


def aggregate_by_day(records: Iterable[PracticeRecord]) -> list[DailyAggregate]:
    """Roll practice records up into one entry per calendar day.

    The per-day rating is the plain mean over every session of that day;
    unrated sessions contribute 0. Entries are sorted by date, oldest first.

    Ratings are expected in 0..5 (None counts as 0). An out-of-range rating
    fails validation of the resulting DailyAggregate with a pydantic
    ValidationError.
    """
    days: dict[str, _DayAccumulator] = {}

    for record in records:
        rating = record.rating or 0
        existing = days.get(record.date)
        if existing is None:
            days[record.date] = _DayAccumulator(
                total_minutes=record.duration_minutes,
                session_count=1,
                average_rating=rating,
            )
            continue

        existing.total_minutes += record.duration_minutes
        existing.session_count += 1
        existing.average_rating = (
            existing.average_rating * (existing.session_count - 1) + rating
        ) / existing.session_count

    ordered = sorted(days.items(), key=lambda item: parse_canonical_date(item[0]))
    return [
        DailyAggregate(
            date=day,
            total_minutes=acc.total_minutes,
            session_count=acc.session_count,
            average_rating=float(acc.average_rating),
        )
        for day, acc in ordered
    ]


def _percentage(completed: int, total: int) -> int:
    if total == 0:
        return 0
    # half-up on exact integers: 1/3 -> 33, 1/8 -> 13
    return (completed * 200 + total) // (2 * total)


def _is_completed(item: CurriculumRecord) -> bool:
    return item.status == SyllabusStatus.COMPLETED


def calculate_level_progress(items: Iterable[CurriculumRecord], level: str) -> int:
    level_items = [item for item in items if item.level == level]
    completed = sum(1 for item in level_items if _is_completed(item))
    return _percentage(completed, len(level_items))


def summarize_syllabus_progress(items: Iterable[CurriculumRecord]) -> list[SyllabusProgress]:
    totals: dict[str, list[int]] = {}
    for item in items:
        counts = totals.setdefault(item.level, [0, 0])
        counts[0] += 1
        if _is_completed(item):
            counts[1] += 1

    return [
        SyllabusProgress(
            level=level,
            total=total,
            completed=completed,
            percentage=_percentage(completed, total),
        )
        for level, (total, completed) in totals.items()
    ]
