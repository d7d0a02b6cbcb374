from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import enforce_db_rls_context, get_current_user
from app.core.errors import not_found
from app.core.security import AuthUser
from app.db.session import get_db_session
from app.db.utils import ensure_user_exists
from app.schemas.profile import ProfileResponse, ProfileUpdateRequest

router = APIRouter(
    prefix="/api/v1/profile",
    tags=["profile"],
    dependencies=[Depends(enforce_db_rls_context)],
)


def _profile_from_row(row) -> ProfileResponse:
    return ProfileResponse(
        user_id=row["id"],
        email=row["email"],
        display_name=row["display_name"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    await ensure_user_exists(db, user)
    result = await db.execute(
        text(
            """
            SELECT id, email, display_name, created_at, updated_at
            FROM users
            WHERE id = :user_id
            LIMIT 1
            """
        ),
        {"user_id": str(user.user_id)},
    )
    row = result.mappings().first()
    await db.commit()
    if not row:
        raise not_found("profile")
    return _profile_from_row(row)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    await ensure_user_exists(db, user)
    result = await db.execute(
        text(
            """
            UPDATE users
            SET display_name = :display_name
            WHERE id = :user_id
            RETURNING id, email, display_name, created_at, updated_at
            """
        ),
        {"user_id": str(user.user_id), "display_name": payload.display_name},
    )
    row = result.mappings().first()
    await db.commit()
    if not row:
        raise not_found("profile")
    return _profile_from_row(row)
