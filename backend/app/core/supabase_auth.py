import logging
from uuid import UUID

import httpx
import jwt
from fastapi import HTTPException, status
from jwt import PyJWKClient

from app.core.config import settings
from app.core.security import AuthUser, extract_bearer_token

logger = logging.getLogger("practice.auth")

SUPPORTED_JWT_ALGS = ["RS256", "ES256", "EdDSA"]
USER_ENDPOINT_TIMEOUT_SECONDS = 10.0
_jwks_client: PyJWKClient | None = None


def _supabase_base_url() -> str:
    if not settings.supabase_url:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="supabase auth url is not configured",
        )
    return settings.supabase_url.rstrip("/")


def _resolve_issuer() -> str:
    if settings.jwt_issuer:
        return settings.jwt_issuer.rstrip("/")
    return f"{_supabase_base_url()}/auth/v1"


def _get_jwks_client() -> PyJWKClient:
    global _jwks_client
    if _jwks_client is None:
        _jwks_client = PyJWKClient(f"{_resolve_issuer()}/.well-known/jwks.json")
    return _jwks_client


def _auth_user_from_identity(user_id_raw, email, user_metadata) -> AuthUser:
    try:
        user_id = UUID(user_id_raw)
    except (TypeError, ValueError, AttributeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid access token subject",
        ) from exc

    display_name = (
        user_metadata.get("full_name") or user_metadata.get("display_name")
        if isinstance(user_metadata, dict)
        else None
    )
    return AuthUser(
        user_id=user_id,
        email=email if isinstance(email, str) else None,
        display_name=display_name if isinstance(display_name, str) else None,
    )


def _decode_token_with_jwks(token: str) -> AuthUser:
    signing_key = _get_jwks_client().get_signing_key_from_jwt(token)
    claims = jwt.decode(
        token,
        signing_key.key,
        algorithms=SUPPORTED_JWT_ALGS,
        audience=settings.jwt_audience,
        issuer=_resolve_issuer(),
        options={"require": ["sub", "exp", "iat"]},
    )
    return _auth_user_from_identity(
        claims.get("sub"), claims.get("email"), claims.get("user_metadata")
    )


async def _fetch_user_from_supabase(token: str) -> AuthUser:
    url = f"{_supabase_base_url()}/auth/v1/user"
    apikey = settings.supabase_anon_key or settings.supabase_service_role_key
    headers = {"Authorization": f"Bearer {token}"}
    if apikey:
        headers["apikey"] = apikey

    try:
        async with httpx.AsyncClient(timeout=USER_ENDPOINT_TIMEOUT_SECONDS) as client:
            response = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="failed to validate access token",
        ) from exc

    if response.status_code != status.HTTP_200_OK:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or expired access token",
        )

    payload = response.json()
    return _auth_user_from_identity(
        payload.get("id"), payload.get("email"), payload.get("user_metadata")
    )


async def verify_supabase_access_token(authorization: str | None) -> AuthUser:
    token = extract_bearer_token(authorization)

    try:
        return _decode_token_with_jwks(token)
    except Exception as exc:
        logger.debug("local JWKS verification failed, asking auth server: %s", exc)
        return await _fetch_user_from_supabase(token)
