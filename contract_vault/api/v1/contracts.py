"""
Contract endpoints: CRUD, listing and one-shot search
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.exceptions import BadRequestError
from contract_vault.core.security import get_current_user, get_optional_user, require_admin
from contract_vault.db.base import get_db
from contract_vault.db.models.user import User
from contract_vault.schemas.common import create_response
from contract_vault.schemas.contract import ContractCreate, ContractUpdate, ContractRead
from contract_vault.services.contract_search import ContractSearchEngine
from contract_vault.services.contract_service import ContractService
from contract_vault.services.history_service import HistoryService

router = APIRouter()


def get_contract_service() -> ContractService:
    """Dependency to get contract service instance"""
    return ContractService()


def get_search_engine() -> ContractSearchEngine:
    """Dependency to get contract search engine instance"""
    return ContractSearchEngine()


def get_history_service() -> HistoryService:
    """Dependency to get history service instance"""
    return HistoryService()


@router.get("/search")
async def search_contracts(
    q: Optional[str] = Query(None, description="Free text, may include a year or month"),
    tab: str = Query("all", description="Client context label stored with the history entry"),
    user: Optional[User] = Depends(get_optional_user),
    engine: ContractSearchEngine = Depends(get_search_engine),
    history_service: HistoryService = Depends(get_history_service),
    db: AsyncSession = Depends(get_db)
):
    """
    Search contracts without streaming or AI summaries.

    The caller's personal archive is hidden from the results and, for a
    signed-in caller, the query is saved to their history.
    """
    query = (q or "").strip()
    if not query:
        raise BadRequestError("Search query is required")

    outcome = await engine.search(db, query, caller_id=user.id if user else None)

    if user:
        await history_service.record_best_effort(db, user.id, query, outcome.total, tab)

    return create_response(
        status=200,
        message="Search results retrieved successfully",
        data={
            "contracts": [c.model_dump(by_alias=True) for c in outcome.contracts],
            "total": outcome.total,
            "query": query,
            "parsed": {
                "cleanQuery": outcome.parsed.clean_query,
                "year": outcome.parsed.year,
                "month": outcome.parsed.month,
            },
        }
    )


@router.get("")
async def list_contracts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    operator: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    contractor_name: Optional[str] = Query(None, alias="contractorName"),
    has_document: Optional[bool] = Query(None, alias="hasDocument"),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    contracts, total = await service.list_contracts(
        db,
        page=page,
        limit=limit,
        operator=operator,
        year=year,
        contractor_name=contractor_name,
        has_document=has_document
    )
    return create_response(
        status=200,
        message="Contracts retrieved successfully",
        data={
            "contracts": [c.model_dump(by_alias=True) for c in contracts],
            "total": total,
            "page": page,
            "limit": limit,
        }
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contract(
    payload: ContractCreate,
    user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    contract = await service.create(db, payload)
    return create_response(
        status=201,
        message="Contract created successfully",
        data=ContractRead.model_validate(contract).model_dump(by_alias=True)
    )


@router.get("/{contract_id}")
async def get_contract(
    contract_id: str,
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    contract = await service.get_with_media(db, contract_id)
    return create_response(
        status=200,
        message="Contract retrieved successfully",
        data=contract.model_dump(by_alias=True)
    )


@router.put("/{contract_id}")
async def update_contract(
    contract_id: str,
    payload: ContractUpdate,
    user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    contract = await service.update(db, contract_id, payload)
    return create_response(
        status=200,
        message="Contract updated successfully",
        data=ContractRead.model_validate(contract).model_dump(by_alias=True)
    )


@router.delete("/{contract_id}")
async def delete_contract(
    contract_id: str,
    admin: User = Depends(require_admin),
    service: ContractService = Depends(get_contract_service),
    db: AsyncSession = Depends(get_db)
):
    await service.delete(db, contract_id)
    return create_response(status=200, message="Contract deleted successfully")
