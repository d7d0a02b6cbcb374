from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import AuthUser
from app.schemas.practice import PracticeRecord

PRACTICE_SESSION_COLUMNS = """
    id, user_id, date, duration_minutes, rating, notes,
    is_for_next_lesson, created_at, updated_at
"""
SYLLABUS_ITEM_COLUMNS = """
    id, user_id, title, category, level, status, created_at, updated_at
"""


async def ensure_user_exists(db: AsyncSession, user: AuthUser) -> None:
    await db.execute(
        text(
            """
            INSERT INTO users (id, email, display_name)
            VALUES (:user_id, :email, :display_name)
            ON CONFLICT (id) DO NOTHING
            """
        ),
        {
            "user_id": str(user.user_id),
            "email": user.profile_email,
            "display_name": user.display_name,
        },
    )


async def get_practice_session_owned_by_user(
    db: AsyncSession, practice_session_id: UUID, user_id: UUID
):
    result = await db.execute(
        text(
            f"""
            SELECT {PRACTICE_SESSION_COLUMNS}
            FROM practice_sessions
            WHERE id = :practice_session_id AND user_id = :user_id
            LIMIT 1
            """
        ),
        {"practice_session_id": str(practice_session_id), "user_id": str(user_id)},
    )
    return result.mappings().first()


async def get_syllabus_item_owned_by_user(
    db: AsyncSession, syllabus_item_id: UUID, user_id: UUID
):
    result = await db.execute(
        text(
            f"""
            SELECT {SYLLABUS_ITEM_COLUMNS}
            FROM syllabus_items
            WHERE id = :syllabus_item_id AND user_id = :user_id
            LIMIT 1
            """
        ),
        {"syllabus_item_id": str(syllabus_item_id), "user_id": str(user_id)},
    )
    return result.mappings().first()


async def fetch_practice_items(db: AsyncSession, practice_session_ids: Sequence[UUID]):
    if not practice_session_ids:
        return {}
    statement = text(
        """
        SELECT id, practice_session_id, name, category, created_at
        FROM practice_items
        WHERE practice_session_id IN :practice_session_ids
        ORDER BY created_at ASC, id ASC
        """
    ).bindparams(bindparam("practice_session_ids", expanding=True))
    result = await db.execute(
        statement,
        {"practice_session_ids": [str(item) for item in practice_session_ids]},
    )
    grouped: dict[str, list] = {}
    for row in result.mappings().all():
        grouped.setdefault(str(row["practice_session_id"]), []).append(row)
    return grouped


async def fetch_practice_records(db: AsyncSession, user_id: UUID) -> list[PracticeRecord]:
    result = await db.execute(
        text(
            """
            SELECT date, duration_minutes, rating
            FROM practice_sessions
            WHERE user_id = :user_id
            ORDER BY date DESC
            """
        ),
        {"user_id": str(user_id)},
    )
    return [
        PracticeRecord(
            date=row["date"].isoformat(),
            duration_minutes=int(row["duration_minutes"]),
            rating=row["rating"],
        )
        for row in result.mappings().all()
    ]


async def fetch_syllabus_items(db: AsyncSession, user_id: UUID, level: str | None = None):
    filters = ["user_id = :user_id"]
    params: dict[str, str] = {"user_id": str(user_id)}
    if level is not None:
        filters.append("level = :level")
        params["level"] = level

    result = await db.execute(
        text(
            f"""
            SELECT {SYLLABUS_ITEM_COLUMNS}
            FROM syllabus_items
            WHERE {" AND ".join(filters)}
            ORDER BY level ASC, created_at ASC
            """
        ),
        params,
    )
    return result.mappings().all()
