from datetime import date

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import local_today, resolve_timezone
from app.core.config import settings
from app.core.security import AuthUser, is_mock_authorization, parse_mock_bearer_token
from app.core.supabase_auth import verify_supabase_access_token
from app.db.security import apply_request_rls_context
from app.db.session import get_db_session


async def get_current_user(authorization: str | None = Header(default=None)) -> AuthUser:
    # Explicit mock tokens are honoured in any auth mode while mock auth is enabled.
    if is_mock_authorization(authorization) and settings.mock_auth_enabled:
        return parse_mock_bearer_token(authorization)

    if settings.auth_mode == "supabase":
        return await verify_supabase_access_token(authorization)
    return parse_mock_bearer_token(authorization)


async def enforce_db_rls_context(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> None:
    await apply_request_rls_context(db, user)


def get_today(x_timezone: str | None = Header(default=None)) -> date:
    timezone_name = x_timezone if x_timezone and x_timezone.strip() else settings.practice_timezone
    try:
        tz = resolve_timezone(timezone_name)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return local_today(tz)
