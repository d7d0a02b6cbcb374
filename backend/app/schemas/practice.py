import datetime as dt
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PracticeCategory(StrEnum):
    SCALE = "scale"
    REPERTOIRE = "repertoire"
    TECHNICAL = "technical"
    SIGHT_READING = "sight-reading"
    THEORY = "theory"
    EAR_TRAINING = "ear-training"


class PracticeRecord(BaseModel):
    date: str
    duration_minutes: int = Field(ge=0)
    rating: int | None = Field(default=None, ge=0, le=5)


class PracticeItemInput(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    category: PracticeCategory


class PracticeItemResponse(BaseModel):
    practice_item_id: UUID
    name: str
    category: PracticeCategory
    created_at: dt.datetime


class PracticeSessionCreateRequest(BaseModel):
    date: dt.date
    duration_minutes: int = Field(ge=0, le=1440)
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str = Field(default="", max_length=4000)
    is_for_next_lesson: bool = False
    items: list[PracticeItemInput] = Field(default_factory=list, max_length=50)


class PracticeSessionUpdateRequest(BaseModel):
    date: dt.date | None = None
    duration_minutes: int | None = Field(default=None, ge=0, le=1440)
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = Field(default=None, max_length=4000)
    is_for_next_lesson: bool | None = None

    @field_validator("date", "duration_minutes", "is_for_next_lesson", mode="before")
    @classmethod
    def reject_explicit_null(cls, value, info):
        # only rating and notes may be cleared; the other columns are NOT NULL
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class PracticeSessionResponse(BaseModel):
    practice_session_id: UUID
    date: dt.date
    duration_minutes: int = Field(ge=0)
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str
    is_for_next_lesson: bool
    items: list[PracticeItemResponse]
    created_at: dt.datetime
    updated_at: dt.datetime


class PracticeSessionListResponse(BaseModel):
    items: list[PracticeSessionResponse]
    limit: int = Field(ge=1, le=200)
    offset: int = Field(ge=0)
    total: int = Field(ge=0)
