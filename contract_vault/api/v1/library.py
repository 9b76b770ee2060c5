"""
Bookmark and personal archive endpoints
Both lists belong to the signed-in user.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.security import get_current_user
from contract_vault.db.base import get_db
from contract_vault.db.models.user import User
from contract_vault.schemas.common import create_response
from contract_vault.services.user_library_service import UserLibraryService

bookmarks_router = APIRouter()
archive_router = APIRouter()


def get_library_service() -> UserLibraryService:
    """Dependency to get user library service instance"""
    return UserLibraryService()


@bookmarks_router.get("")
async def list_bookmarks(
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    bookmarks = await service.list_bookmarks(db, user.id)
    return create_response(
        status=200,
        message="Bookmarks retrieved",
        data={"bookmarks": bookmarks, "total": len(bookmarks)}
    )


@bookmarks_router.post("/{contract_id}", status_code=status.HTTP_201_CREATED)
async def add_bookmark(
    contract_id: str,
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    contract = await service.add_bookmark(db, user.id, contract_id)
    return create_response(
        status=201,
        message="Contract bookmarked",
        data={"contractId": contract.id, "contractTitle": contract.contract_title}
    )


@bookmarks_router.delete("/{contract_id}")
async def remove_bookmark(
    contract_id: str,
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    await service.remove_bookmark(db, user.id, contract_id)
    return create_response(status=200, message="Bookmark removed")


@bookmarks_router.delete("")
async def clear_bookmarks(
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    await service.clear_bookmarks(db, user.id)
    return create_response(status=200, message="All bookmarks cleared")


@archive_router.get("")
async def list_archive(
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    archived = await service.list_archived(db, user.id)
    return create_response(
        status=200,
        message="User archive retrieved",
        data={"archived": archived, "total": len(archived)}
    )


@archive_router.post("/{contract_id}", status_code=status.HTTP_201_CREATED)
async def archive_contract(
    contract_id: str,
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    """Hide a contract from this user's searches"""
    contract = await service.archive_for_user(db, user.id, contract_id)
    return create_response(
        status=201,
        message="Contract archived",
        data={"contractId": contract.id, "contractTitle": contract.contract_title}
    )


@archive_router.delete("/{contract_id}")
async def restore_contract(
    contract_id: str,
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    await service.restore_for_user(db, user.id, contract_id)
    return create_response(status=200, message="Contract restored from archive")


@archive_router.delete("")
async def clear_archive(
    user: User = Depends(get_current_user),
    service: UserLibraryService = Depends(get_library_service),
    db: AsyncSession = Depends(get_db)
):
    await service.clear_archive(db, user.id)
    return create_response(status=200, message="User archive cleared")
