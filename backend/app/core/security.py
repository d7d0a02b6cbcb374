from dataclasses import dataclass
from uuid import UUID

from fastapi import HTTPException, status

MOCK_TOKEN_PREFIX = "mock_"


@dataclass(slots=True)
class AuthUser:
    user_id: UUID
    email: str | None = None
    display_name: str | None = None

    @property
    def profile_email(self) -> str:
        return self.email or f"{self.user_id}@mock.local"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise _unauthorized("missing Authorization header")

    prefix = "Bearer "
    if not authorization.startswith(prefix):
        raise _unauthorized("invalid Authorization header")

    token = authorization[len(prefix) :].strip()
    if not token:
        raise _unauthorized("missing bearer token")
    return token


def is_mock_authorization(authorization: str | None) -> bool:
    if not isinstance(authorization, str):
        return False
    return authorization.strip().startswith(f"Bearer {MOCK_TOKEN_PREFIX}")


def parse_mock_bearer_token(authorization: str | None) -> AuthUser:
    token = extract_bearer_token(authorization)
    if not token.startswith(MOCK_TOKEN_PREFIX):
        raise _unauthorized("invalid mock token")

    user_id_raw = token.removeprefix(MOCK_TOKEN_PREFIX).strip()
    if not user_id_raw:
        raise _unauthorized("invalid mock token user id")

    try:
        user_id = UUID(user_id_raw)
    except ValueError as exc:
        raise _unauthorized("mock user id must be a valid UUID") from exc

    return AuthUser(
        user_id=user_id,
        email=f"{user_id}@mock.local",
        display_name="Mock Student",
    )
