from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import enforce_db_rls_context, get_current_user
from app.core.errors import not_found
from app.core.security import AuthUser
from app.db.session import get_db_session
from app.db.utils import (
    PRACTICE_SESSION_COLUMNS,
    ensure_user_exists,
    fetch_practice_items,
    get_practice_session_owned_by_user,
)
from app.schemas.practice import (
    PracticeCategory,
    PracticeItemResponse,
    PracticeSessionCreateRequest,
    PracticeSessionListResponse,
    PracticeSessionResponse,
    PracticeSessionUpdateRequest,
)

router = APIRouter(
    prefix="/api/v1/practice-sessions",
    tags=["practice-sessions"],
    dependencies=[Depends(enforce_db_rls_context)],
)

UPDATABLE_FIELDS = ("date", "duration_minutes", "rating", "notes", "is_for_next_lesson")


def _session_from_row(row, item_rows) -> PracticeSessionResponse:
    return PracticeSessionResponse(
        practice_session_id=row["id"],
        date=row["date"],
        duration_minutes=row["duration_minutes"],
        rating=row["rating"],
        notes=row["notes"] or "",
        is_for_next_lesson=bool(row["is_for_next_lesson"]),
        items=[
            PracticeItemResponse(
                practice_item_id=item["id"],
                name=item["name"],
                category=PracticeCategory(item["category"]),
                created_at=item["created_at"],
            )
            for item in item_rows
        ],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def _load_session(db: AsyncSession, practice_session_id: UUID, user_id: UUID):
    row = await get_practice_session_owned_by_user(db, practice_session_id, user_id)
    if not row:
        raise not_found("practice session")
    items = await fetch_practice_items(db, [row["id"]])
    return _session_from_row(row, items.get(str(row["id"]), []))


@router.post("", response_model=PracticeSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_practice_session(
    payload: PracticeSessionCreateRequest,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PracticeSessionResponse:
    await ensure_user_exists(db, user)

    result = await db.execute(
        text(
            """
            INSERT INTO practice_sessions (
              user_id,
              date,
              duration_minutes,
              rating,
              notes,
              is_for_next_lesson
            )
            VALUES (
              :user_id,
              :date,
              :duration_minutes,
              :rating,
              :notes,
              :is_for_next_lesson
            )
            RETURNING id
            """
        ),
        {
            "user_id": str(user.user_id),
            "date": payload.date,
            "duration_minutes": payload.duration_minutes,
            "rating": payload.rating,
            "notes": payload.notes,
            "is_for_next_lesson": payload.is_for_next_lesson,
        },
    )
    practice_session_id = result.scalar_one()

    for item in payload.items:
        await db.execute(
            text(
                """
                INSERT INTO practice_items (practice_session_id, name, category)
                VALUES (:practice_session_id, :name, :category)
                """
            ),
            {
                "practice_session_id": str(practice_session_id),
                "name": item.name,
                "category": item.category.value,
            },
        )

    response = await _load_session(db, practice_session_id, user.user_id)
    await db.commit()
    return response


@router.get("", response_model=PracticeSessionListResponse)
async def list_practice_sessions(
    date_from: date | None = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    date_to: date | None = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PracticeSessionListResponse:
    if date_from and date_to and date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must be on or before date_to",
        )

    filters = ["user_id = :user_id"]
    params: dict = {"user_id": str(user.user_id)}
    if date_from:
        filters.append("date >= :date_from")
        params["date_from"] = date_from
    if date_to:
        filters.append("date <= :date_to")
        params["date_to"] = date_to
    where_clause = " AND ".join(filters)

    total_result = await db.execute(
        text(f"SELECT COUNT(*) FROM practice_sessions WHERE {where_clause}"),
        params,
    )
    total = int(total_result.scalar_one() or 0)

    rows_result = await db.execute(
        text(
            f"""
            SELECT {PRACTICE_SESSION_COLUMNS}
            FROM practice_sessions
            WHERE {where_clause}
            ORDER BY date DESC, created_at DESC
            LIMIT :limit OFFSET :offset
            """
        ),
        {**params, "limit": limit, "offset": offset},
    )
    rows = rows_result.mappings().all()
    items_by_session = await fetch_practice_items(db, [row["id"] for row in rows])

    return PracticeSessionListResponse(
        items=[_session_from_row(row, items_by_session.get(str(row["id"]), [])) for row in rows],
        limit=limit,
        offset=offset,
        total=total,
    )


@router.get("/{practice_session_id}", response_model=PracticeSessionResponse)
async def get_practice_session(
    practice_session_id: UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PracticeSessionResponse:
    return await _load_session(db, practice_session_id, user.user_id)


@router.patch("/{practice_session_id}", response_model=PracticeSessionResponse)
async def update_practice_session(
    practice_session_id: UUID,
    payload: PracticeSessionUpdateRequest,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> PracticeSessionResponse:
    existing = await get_practice_session_owned_by_user(db, practice_session_id, user.user_id)
    if not existing:
        raise not_found("practice session")

    changes = payload.model_dump(exclude_unset=True)
    assignments = [f"{field} = :{field}" for field in UPDATABLE_FIELDS if field in changes]
    if assignments:
        await db.execute(
            text(
                f"""
                UPDATE practice_sessions
                SET {", ".join(assignments)}
                WHERE id = :practice_session_id AND user_id = :user_id
                """
            ),
            {
                **{field: changes[field] for field in UPDATABLE_FIELDS if field in changes},
                "practice_session_id": str(practice_session_id),
                "user_id": str(user.user_id),
            },
        )

    response = await _load_session(db, practice_session_id, user.user_id)
    await db.commit()
    return response


@router.delete("/{practice_session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_practice_session(
    practice_session_id: UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    result = await db.execute(
        text(
            """
            DELETE FROM practice_sessions
            WHERE id = :practice_session_id AND user_id = :user_id
            RETURNING id
            """
        ),
        {"practice_session_id": str(practice_session_id), "user_id": str(user.user_id)},
    )
    deleted = result.scalar_one_or_none()
    if deleted is None:
        await db.rollback()
        raise not_found("practice session")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
