from pydantic import BaseModel, Field


class DailyAggregate(BaseModel):
    date: str
    total_minutes: int = Field(ge=0)
    session_count: int = Field(ge=1)
    average_rating: float = Field(ge=0, le=5)


class SyllabusProgress(BaseModel):
    level: str
    total: int = Field(ge=0)
    completed: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)


class PracticeStats(BaseModel):
    streak: int = Field(ge=0)
    this_week_minutes: int = Field(ge=0)
    total_minutes: int = Field(ge=0)
    average_rating: float = Field(ge=0, le=5)
    total_sessions: int = Field(ge=0)
    daily_practice: list[DailyAggregate]


class StreakResponse(BaseModel):
    streak: int = Field(ge=0)
    today: str


class SyllabusProgressListResponse(BaseModel):
    items: list[SyllabusProgress]
