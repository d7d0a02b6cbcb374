import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from pydantic import TypeAdapter

from app.schemas.practice import PracticeRecord
from app.schemas.stats import PracticeStats, SyllabusProgress
from app.schemas.syllabus import CurriculumItem
from app.services.aggregation import summarize_syllabus_progress
from app.services.practice_stats import build_practice_stats

_practice_records = TypeAdapter(list[PracticeRecord])
_curriculum_items = TypeAdapter(list[CurriculumItem])


@dataclass(slots=True)
class PracticeReport:
    today: date
    stats: PracticeStats
    syllabus_progress: list[SyllabusProgress] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "today": self.today.isoformat(),
            "stats": self.stats.model_dump(mode="json"),
            "syllabus_progress": [item.model_dump(mode="json") for item in self.syllabus_progress],
        }


def load_practice_records(path: Path) -> list[PracticeRecord]:
    return _practice_records.validate_python(json.loads(path.read_text(encoding="utf-8")))


def load_curriculum_items(path: Path) -> list[CurriculumItem]:
    return _curriculum_items.validate_python(json.loads(path.read_text(encoding="utf-8")))


def build_practice_report(
    sessions_path: Path,
    today: date,
    syllabus_path: Path | None = None,
) -> PracticeReport:
    records = load_practice_records(sessions_path)
    syllabus = load_curriculum_items(syllabus_path) if syllabus_path else []
    return PracticeReport(
        today=today,
        stats=build_practice_stats(records, today),
        syllabus_progress=summarize_syllabus_progress(syllabus),
    )
