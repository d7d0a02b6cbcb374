import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import AuthUser

RLS_ROLE = "authenticated"


def rls_claims_for(user: AuthUser) -> dict[str, str]:
    claims = {"sub": str(user.user_id), "role": RLS_ROLE}
    if user.email:
        claims["email"] = user.email
    return claims


async def apply_request_rls_context(db: AsyncSession, user: AuthUser) -> None:
    """Scope the current transaction to `user` for the owner-only RLS policies.

    Settings are transaction-local, so they are dropped on commit or rollback
    and never leak to the next request using the pooled connection.
    """
    claims = rls_claims_for(user)
    await db.execute(text(f"SET LOCAL ROLE {RLS_ROLE}"))
    # request_user_id() in the migrations reads claim.sub; Supabase's
    # auth.uid() falls back to the combined claims document.
    for name in ("role", "sub"):
        await db.execute(
            text(f"SELECT set_config('request.jwt.claim.{name}', :value, true)"),
            {"value": claims[name]},
        )
    await db.execute(
        text("SELECT set_config('request.jwt.claims', :claims, true)"),
        {"claims": json.dumps(claims, sort_keys=True)},
    )
