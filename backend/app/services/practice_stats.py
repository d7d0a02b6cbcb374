from collections.abc import Sequence
from datetime import date, timedelta

from app.schemas.stats import PracticeStats
from app.services.aggregation import PracticeRecord, aggregate_by_day
from app.services.dates import parse_canonical_date
from app.services.streak import calculate_streak

RECENT_WINDOW_DAYS = 7


def build_practice_stats(records: Sequence[PracticeRecord], today: date) -> PracticeStats:
    # today plus the six days before it
    window_start = today - timedelta(days=RECENT_WINDOW_DAYS - 1)
    this_week_minutes = sum(
        record.duration_minutes
        for record in records
        if parse_canonical_date(record.date) >= window_start
    )

    # Headline rating skips unrated sessions, unlike the per-day mean.
    ratings = [record.rating for record in records if record.rating and record.rating > 0]
    average_rating = sum(ratings) / len(ratings) if ratings else 0.0

    return PracticeStats(
        streak=calculate_streak(records, today),
        this_week_minutes=this_week_minutes,
        total_minutes=sum(record.duration_minutes for record in records),
        average_rating=average_rating,
        total_sessions=len(records),
        daily_practice=aggregate_by_day(records),
    )
