from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field


class SyllabusStatus(StrEnum):
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    READY_FOR_EXAM = "ready-for-exam"
    COMPLETED = "completed"


class SyllabusItemCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=80)
    level: str = Field(min_length=1, max_length=80)
    status: SyllabusStatus = SyllabusStatus.PLANNED


class SyllabusItemUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    category: str | None = Field(default=None, min_length=1, max_length=80)
    level: str | None = Field(default=None, min_length=1, max_length=80)
    status: SyllabusStatus | None = None


class SyllabusItemResponse(BaseModel):
    syllabus_item_id: UUID
    title: str
    category: str
    level: str
    status: SyllabusStatus
    created_at: datetime
    updated_at: datetime


class SyllabusItemListResponse(BaseModel):
    items: list[SyllabusItemResponse]
    total: int = Field(ge=0)


class CurriculumItem(BaseModel):
    level: str
    status: SyllabusStatus
