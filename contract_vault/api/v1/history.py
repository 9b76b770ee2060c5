"""
Search history endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.security import get_current_user
from contract_vault.db.base import get_db
from contract_vault.db.models.user import User
from contract_vault.schemas.common import create_response
from contract_vault.schemas.history import SearchHistoryCreate, SearchHistoryRead
from contract_vault.services.history_service import HistoryService

router = APIRouter()


def get_history_service() -> HistoryService:
    """Dependency to get history service instance"""
    return HistoryService()


@router.get("")
async def list_history(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    service: HistoryService = Depends(get_history_service),
    db: AsyncSession = Depends(get_db)
):
    entries, total = await service.list_for_user(db, user.id, page=page, limit=limit)
    return create_response(
        status=200,
        message="Search history retrieved",
        data={
            "history": [SearchHistoryRead.model_validate(e).model_dump(by_alias=True) for e in entries],
            "total": total,
            "page": page,
            "limit": limit,
        }
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_history(
    payload: SearchHistoryCreate,
    user: User = Depends(get_current_user),
    service: HistoryService = Depends(get_history_service),
    db: AsyncSession = Depends(get_db)
):
    entry = await service.record(db, user.id, payload.query, payload.results_count, payload.tab)
    return create_response(
        status=201,
        message="Search saved to history",
        data=SearchHistoryRead.model_validate(entry).model_dump(by_alias=True)
    )


@router.delete("")
async def clear_history(
    user: User = Depends(get_current_user),
    service: HistoryService = Depends(get_history_service),
    db: AsyncSession = Depends(get_db)
):
    deleted = await service.clear(db, user.id)
    return create_response(
        status=200,
        message=f"Cleared {deleted} history entries",
        data={"deletedCount": deleted}
    )


@router.delete("/{history_id}")
async def delete_history_entry(
    history_id: str,
    user: User = Depends(get_current_user),
    service: HistoryService = Depends(get_history_service),
    db: AsyncSession = Depends(get_db)
):
    await service.delete_entry(db, user.id, history_id)
    return create_response(status=200, message="History entry deleted")
