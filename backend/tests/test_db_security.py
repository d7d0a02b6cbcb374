import asyncio
import json
from datetime import date
from uuid import UUID

from app.core.security import AuthUser
from app.db.security import apply_request_rls_context, rls_claims_for
from app.db.utils import fetch_practice_records, fetch_syllabus_items

USER_ID = UUID("8a4c3f2a-2f88-4c74-9bc0-3123d26df302")


class _FakeResult:
    def __init__(self, rows: list[dict]) -> None:
        self._rows = rows

    def mappings(self):
        return self

    def all(self):
        return list(self._rows)


class _RecordingSession:
    """Stands in for AsyncSession: records statements, serves canned rows."""

    def __init__(self, rows: list[dict] | None = None) -> None:
        self.rows = rows or []
        self.calls: list[tuple[str, dict | None]] = []

    async def execute(self, statement, params=None):
        self.calls.append((" ".join(str(statement).split()), params))
        return _FakeResult(self.rows)


def test_rls_context_is_set_before_practice_history_is_read():
    session = _RecordingSession(
        rows=[
            {"date": date(2024, 1, 15), "duration_minutes": 30, "rating": 4},
            {"date": date(2024, 1, 14), "duration_minutes": 45, "rating": None},
        ]
    )
    user = AuthUser(user_id=USER_ID, email="pianist@example.com")

    async def _run():
        await apply_request_rls_context(session, user)
        return await fetch_practice_records(session, user.user_id)

    records = asyncio.run(_run())

    statements = [call[0] for call in session.calls]
    assert statements[0] == "SET LOCAL ROLE authenticated"
    assert "request.jwt.claim.role" in statements[1]
    assert session.calls[1][1] == {"value": "authenticated"}
    assert "request.jwt.claim.sub" in statements[2]
    assert session.calls[2][1] == {"value": str(USER_ID)}
    assert "request.jwt.claims" in statements[3]
    assert json.loads(session.calls[3][1]["claims"]) == {
        "email": "pianist@example.com",
        "role": "authenticated",
        "sub": str(USER_ID),
    }
    assert statements[4].startswith("SELECT date, duration_minutes, rating FROM practice_sessions")
    assert session.calls[4][1] == {"user_id": str(USER_ID)}

    assert [record.model_dump() for record in records] == [
        {"date": "2024-01-15", "duration_minutes": 30, "rating": 4},
        {"date": "2024-01-14", "duration_minutes": 45, "rating": None},
    ]


def test_rls_claims_omit_email_for_mock_users():
    assert rls_claims_for(AuthUser(user_id=USER_ID)) == {
        "sub": str(USER_ID),
        "role": "authenticated",
    }


def test_syllabus_query_filters_on_exact_level_only_when_given():
    session = _RecordingSession()

    asyncio.run(fetch_syllabus_items(session, USER_ID))
    asyncio.run(fetch_syllabus_items(session, USER_ID, level="RCM 1"))

    unfiltered, filtered = session.calls
    assert "level = :level" not in unfiltered[0]
    assert unfiltered[1] == {"user_id": str(USER_ID)}
    assert "WHERE user_id = :user_id AND level = :level" in filtered[0]
    assert filtered[1] == {"user_id": str(USER_ID), "level": "RCM 1"}
