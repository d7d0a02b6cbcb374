from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import enforce_db_rls_context, get_current_user, get_today
from app.core.security import AuthUser
from app.db import utils as db_utils
from app.db.session import get_db_session
from app.schemas.stats import PracticeStats, StreakResponse
from app.services.dates import to_canonical_date
from app.services.practice_stats import build_practice_stats
from app.services.streak import calculate_streak

router = APIRouter(
    prefix="/api/v1/stats",
    tags=["stats"],
    dependencies=[Depends(enforce_db_rls_context)],
)


@router.get("/practice", response_model=PracticeStats)
async def get_practice_stats(
    today: date = Depends(get_today),
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PracticeStats:
    records = await db_utils.fetch_practice_records(db, user.user_id)
    return build_practice_stats(records, today)


@router.get("/streak", response_model=StreakResponse)
async def get_streak(
    today: date = Depends(get_today),
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> StreakResponse:
    records = await db_utils.fetch_practice_records(db, user.user_id)
    return StreakResponse(
        streak=calculate_streak(records, today),
        today=to_canonical_date(today),
    )
