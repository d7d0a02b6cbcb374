from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from app.schemas.practice import PracticeRecord
from app.schemas.syllabus import CurriculumItem, SyllabusStatus
from app.services.aggregation import (
    aggregate_by_day,
    calculate_level_progress,
    summarize_syllabus_progress,
)
from app.services.dates import InvalidPracticeDateError


def _session(day: str, minutes: int, rating: int | None):
    return PracticeRecord(date=day, duration_minutes=minutes, rating=rating)


def _item(level: str, status: str):
    return SimpleNamespace(level=level, status=status)


def test_aggregate_empty_input():
    assert aggregate_by_day([]) == []


def test_aggregate_single_session():
    result = aggregate_by_day([_session("2024-01-15", 30, 4)])

    assert len(result) == 1
    assert result[0].model_dump() == {
        "date": "2024-01-15",
        "total_minutes": 30,
        "session_count": 1,
        "average_rating": 4.0,
    }


def test_aggregate_combines_sessions_on_same_day():
    result = aggregate_by_day([_session("2024-01-15", 30, 4), _session("2024-01-15", 20, 5)])

    assert len(result) == 1
    assert result[0].total_minutes == 50
    assert result[0].session_count == 2
    assert result[0].average_rating == 4.5


def test_aggregate_mean_over_three_sessions():
    result = aggregate_by_day(
        [
            _session("2024-01-15", 30, 3),
            _session("2024-01-15", 20, 4),
            _session("2024-01-15", 10, 5),
        ]
    )
    assert result[0].average_rating == pytest.approx(4.0)


def test_aggregate_sorts_days_ascending():
    result = aggregate_by_day(
        [
            _session("2024-01-17", 30, 4),
            _session("2024-01-15", 25, 3),
            _session("2024-01-16", 35, 5),
        ]
    )
    assert [day.date for day in result] == ["2024-01-15", "2024-01-16", "2024-01-17"]


def test_aggregate_does_not_fill_missing_days():
    result = aggregate_by_day([_session("2024-01-10", 10, 2), _session("2024-01-15", 10, 2)])
    assert [day.date for day in result] == ["2024-01-10", "2024-01-15"]


def test_unrated_sessions_count_as_zero_in_daily_mean():
    result = aggregate_by_day([_session("2024-01-15", 30, 4), _session("2024-01-15", 15, None)])
    assert result[0].average_rating == pytest.approx(2.0)


def test_aggregate_is_repeatable_and_leaves_input_untouched():
    records = [_session("2024-01-16", 30, 4), _session("2024-01-15", 20, 5)]
    before = [record.model_dump() for record in records]

    first = aggregate_by_day(records)
    second = aggregate_by_day(records)

    assert first == second
    assert [record.model_dump() for record in records] == before


def test_aggregate_rejects_malformed_dates():
    with pytest.raises(InvalidPracticeDateError):
        aggregate_by_day([_session("2024/01/15", 30, 4)])


def test_aggregate_rejects_out_of_range_rating():
    record = SimpleNamespace(date="2024-01-15", duration_minutes=30, rating=7)

    with pytest.raises(ValidationError):
        aggregate_by_day([record])


def test_level_progress_empty_input():
    assert calculate_level_progress([], "RCM 1") == 0


def test_level_progress_no_items_at_level():
    assert calculate_level_progress([_item("RCM 2", "completed")], "RCM 1") == 0


def test_level_progress_half_completed():
    items = [
        _item("RCM 1", "completed"),
        _item("RCM 1", "completed"),
        _item("RCM 1", "in-progress"),
        _item("RCM 1", "planned"),
    ]
    assert calculate_level_progress(items, "RCM 1") == 50


def test_level_progress_rounds_to_nearest_integer():
    items = [
        _item("RCM 2", "completed"),
        _item("RCM 2", "in-progress"),
        _item("RCM 2", "planned"),
    ]
    assert calculate_level_progress(items, "RCM 2") == 33


def test_level_progress_rounds_half_up():
    items = [_item("RCM 3", "completed")] + [_item("RCM 3", "planned")] * 7
    assert calculate_level_progress(items, "RCM 3") == 13


def test_level_progress_all_completed():
    items = [_item("RCM 1", "completed")] * 3
    assert calculate_level_progress(items, "RCM 1") == 100


def test_level_progress_ignores_other_levels():
    items = [
        _item("RCM 1", "completed"),
        _item("RCM 1", "in-progress"),
        _item("RCM 2", "completed"),
        _item("RCM 3", "completed"),
    ]
    assert calculate_level_progress(items, "RCM 1") == 50


def test_level_progress_matches_level_exactly():
    items = [_item("RCM 1", "completed")]
    assert calculate_level_progress(items, "rcm 1") == 0
    assert calculate_level_progress(items, "RCM 1 ") == 0


def test_ready_for_exam_is_not_completed():
    items = [_item("Prep A", "ready-for-exam"), _item("Prep A", "completed")]
    assert calculate_level_progress(items, "Prep A") == 50


def test_level_progress_accepts_status_enum():
    items = [
        CurriculumItem(level="RCM 1", status=SyllabusStatus.COMPLETED),
        CurriculumItem(level="RCM 1", status=SyllabusStatus.PLANNED),
    ]
    assert calculate_level_progress(items, "RCM 1") == 50


def test_summarize_progress_keeps_first_seen_level_order():
    items = [
        _item("RCM 2", "completed"),
        _item("RCM 1", "planned"),
        _item("RCM 2", "planned"),
        _item("RCM 1", "completed"),
        _item("RCM 1", "completed"),
    ]

    summary = summarize_syllabus_progress(items)

    assert [entry.model_dump() for entry in summary] == [
        {"level": "RCM 2", "total": 2, "completed": 1, "percentage": 50},
        {"level": "RCM 1", "total": 3, "completed": 2, "percentage": 67},
    ]


def test_summarize_progress_empty_input():
    assert summarize_syllabus_progress([]) == []
