from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import enforce_db_rls_context, get_current_user
from app.core.errors import not_found
from app.core.security import AuthUser
from app.db.session import get_db_session
from app.db.utils import (
    SYLLABUS_ITEM_COLUMNS,
    ensure_user_exists,
    fetch_syllabus_items,
    get_syllabus_item_owned_by_user,
)
from app.schemas.stats import SyllabusProgress, SyllabusProgressListResponse
from app.schemas.syllabus import (
    SyllabusItemCreateRequest,
    SyllabusItemListResponse,
    SyllabusItemResponse,
    SyllabusItemUpdateRequest,
    SyllabusStatus,
)
from app.services.aggregation import summarize_syllabus_progress

router = APIRouter(
    prefix="/api/v1/syllabus-items",
    tags=["syllabus"],
    dependencies=[Depends(enforce_db_rls_context)],
)

UPDATABLE_FIELDS = ("title", "category", "level", "status")


def _item_from_row(row) -> SyllabusItemResponse:
    return SyllabusItemResponse(
        syllabus_item_id=row["id"],
        title=row["title"],
        category=row["category"],
        level=row["level"],
        status=SyllabusStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


@router.post("", response_model=SyllabusItemResponse, status_code=status.HTTP_201_CREATED)
async def create_syllabus_item(
    payload: SyllabusItemCreateRequest,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SyllabusItemResponse:
    await ensure_user_exists(db, user)
    result = await db.execute(
        text(
            f"""
            INSERT INTO syllabus_items (user_id, title, category, level, status)
            VALUES (:user_id, :title, :category, :level, :status)
            RETURNING {SYLLABUS_ITEM_COLUMNS}
            """
        ),
        {
            "user_id": str(user.user_id),
            "title": payload.title,
            "category": payload.category,
            "level": payload.level,
            "status": payload.status.value,
        },
    )
    row = result.mappings().one()
    await db.commit()
    return _item_from_row(row)


@router.get("", response_model=SyllabusItemListResponse)
async def list_syllabus_items(
    level: str | None = Query(default=None, description="Exact, case-sensitive level label"),
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SyllabusItemListResponse:
    rows = await fetch_syllabus_items(db, user.user_id, level=level)
    items = [_item_from_row(row) for row in rows]
    return SyllabusItemListResponse(items=items, total=len(items))


@router.get("/progress", response_model=SyllabusProgressListResponse)
async def get_syllabus_progress(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SyllabusProgressListResponse:
    rows = await fetch_syllabus_items(db, user.user_id)
    items = [_item_from_row(row) for row in rows]
    return SyllabusProgressListResponse(items=summarize_syllabus_progress(items))


@router.get("/progress/{level:path}", response_model=SyllabusProgress)
async def get_level_progress(
    level: str,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SyllabusProgress:
    rows = await fetch_syllabus_items(db, user.user_id, level=level)
    items = [_item_from_row(row) for row in rows]
    summary = summarize_syllabus_progress(item for item in items if item.level == level)
    if not summary:
        return SyllabusProgress(level=level, total=0, completed=0, percentage=0)
    return summary[0]


@router.patch("/{syllabus_item_id}", response_model=SyllabusItemResponse)
async def update_syllabus_item(
    syllabus_item_id: UUID,
    payload: SyllabusItemUpdateRequest,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SyllabusItemResponse:
    existing = await get_syllabus_item_owned_by_user(db, syllabus_item_id, user.user_id)
    if not existing:
        raise not_found("syllabus item")

    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True, mode="json").items()
        if field in UPDATABLE_FIELDS and value is not None
    }
    if not changes:
        return _item_from_row(existing)

    assignments = ", ".join(f"{field} = :{field}" for field in changes)
    result = await db.execute(
        text(
            f"""
            UPDATE syllabus_items
            SET {assignments}
            WHERE id = :syllabus_item_id AND user_id = :user_id
            RETURNING {SYLLABUS_ITEM_COLUMNS}
            """
        ),
        {
            **changes,
            "syllabus_item_id": str(syllabus_item_id),
            "user_id": str(user.user_id),
        },
    )
    row = result.mappings().one()
    await db.commit()
    return _item_from_row(row)


@router.delete("/{syllabus_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_syllabus_item(
    syllabus_item_id: UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    result = await db.execute(
        text(
            """
            DELETE FROM syllabus_items
            WHERE id = :syllabus_item_id AND user_id = :user_id
            RETURNING id
            """
        ),
        {"syllabus_item_id": str(syllabus_item_id), "user_id": str(user.user_id)},
    )
    if result.scalar_one_or_none() is None:
        await db.rollback()
        raise not_found("syllabus item")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
