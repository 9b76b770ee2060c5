"""
Admin endpoints: global archive and user management
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.security import require_admin
from contract_vault.db.base import get_db
from contract_vault.db.models.user import User
from contract_vault.schemas.common import create_response
from contract_vault.schemas.contract import ContractSummary
from contract_vault.schemas.user import RoleUpdate, UserRead
from contract_vault.services.contract_service import ContractService
from contract_vault.services.user_service import UserService

router = APIRouter()


def get_contract_service() -> ContractService:
    """Dependency to get contract service instance"""
    return ContractService()


def get_user_service() -> UserService:
    """Dependency to get user service instance"""
    return UserService()


@router.get("/archive")
async def list_global_archive(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    admin: User = Depends(require_admin),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    contracts, total = await service.list_global_archive(db, page=page, limit=limit)
    archived = []
    for contract in contracts:
        item = ContractSummary.model_validate(contract).model_dump(by_alias=True)
        item["archivedAt"] = contract.archived_at
        item["archivedBy"] = contract.archived_by
        archived.append(item)

    return create_response(
        status=200,
        message="Global archive retrieved",
        data={"archived": archived, "total": total, "page": page, "limit": limit}
    )


@router.post("/archive/{contract_id}")
async def archive_globally(
    contract_id: str,
    admin: User = Depends(require_admin),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    contract = await service.archive_globally(db, contract_id, admin.id)
    return create_response(
        status=200,
        message="Contract archived globally",
        data={"contractId": contract.id, "contractTitle": contract.contract_title}
    )


@router.post("/archive/{contract_id}/restore")
async def restore_globally(
    contract_id: str,
    admin: User = Depends(require_admin),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    await service.restore_globally(db, contract_id)
    return create_response(status=200, message="Contract restored from global archive")


@router.delete("/archive/{contract_id}")
async def permanently_delete(
    contract_id: str,
    admin: User = Depends(require_admin),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    await service.permanently_delete(db, contract_id)
    return create_response(status=200, message="Contract permanently deleted")


@router.delete("/archive")
async def empty_global_archive(
    admin: User = Depends(require_admin),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    deleted = await service.empty_global_archive(db)
    return create_response(
        status=200,
        message=f"Permanently deleted {deleted} archived contracts",
        data={"deletedCount": deleted}
    )


# Users

@router.get("/users")
async def list_users(
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db)
):
    users = await service.list_users(db)
    return create_response(
        status=200,
        message="Users retrieved successfully",
        data=[UserRead.model_validate(u).model_dump(by_alias=True) for u in users]
    )


@router.get("/users/stats")
async def user_stats(
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db)
):
    stats = await service.stats(db)
    return create_response(
        status=200,
        message="User stats retrieved successfully",
        data=stats.model_dump(by_alias=True)
    )


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db)
):
    user = await service.get_user(db, user_id)
    return create_response(
        status=200,
        message="User retrieved successfully",
        data=UserRead.model_validate(user).model_dump(by_alias=True)
    )


@router.patch("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    payload: RoleUpdate,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db)
):
    user = await service.update_role(db, user_id, payload.role, admin.id)
    return create_response(
        status=200,
        message=f"User role updated to {user.role}",
        data=UserRead.model_validate(user).model_dump(by_alias=True)
    )


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db)
):
    """Remove a user and everything they own: bookmarks, personal archive, history"""
    await service.delete_user(db, user_id, admin.id)
    return create_response(
        status=200,
        message="User deleted successfully",
        data={"id": user_id}
    )
