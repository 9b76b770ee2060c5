"""
Contract service
CRUD over contract records plus the admin-controlled global archive.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, delete, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.exceptions import BadRequestError, ConflictError, NotFoundError
from contract_vault.db.models.contract import Contract
from contract_vault.db.models.media import Media
from contract_vault.db.models.user import UserBookmark, UserArchivedContract
from contract_vault.schemas.contract import ContractCreate, ContractUpdate, ContractWithMedia
from contract_vault.services.contract_search import attach_media, load_media_for_contracts

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"start_date", "end_date", "contract_value"}


class ContractService:
    """Service for contract records"""

    async def _get(self, db: AsyncSession, contract_id: str) -> Contract:
        contract = await db.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError("Contract not found")
        return contract

    async def _commit_unique(self, db: AsyncSession, contract_number: str) -> None:
        """Commit, mapping a contract number collision to ConflictError"""
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Duplicate contract number {contract_number}: {str(e.orig)}")
            raise ConflictError(f"Contract number {contract_number} already exists") from e

    async def create(self, db: AsyncSession, data: ContractCreate) -> Contract:
        contract = Contract(**data.model_dump())
        db.add(contract)
        await self._commit_unique(db, data.contract_number)
        await db.refresh(contract)
        logger.info(f"Created contract {contract.id} ({contract.contract_number})")
        return contract

    async def list_contracts(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        operator: Optional[str] = None,
        year: Optional[int] = None,
        contractor_name: Optional[str] = None,
        has_document: Optional[bool] = None
    ) -> Tuple[List[ContractWithMedia], int]:
        """
        Paginated contract listing, newest first, with non-deleted media.

        Returns:
            (contracts, total matching)
        """
        conditions = []
        if operator:
            conditions.append(Contract.operator == operator)
        if year is not None:
            conditions.append(Contract.year == year)
        if contractor_name:
            conditions.append(Contract.contractor_name.icontains(contractor_name, autoescape=True))
        if has_document is not None:
            conditions.append(Contract.has_document.is_(has_document))

        total = (await db.execute(
            select(func.count()).select_from(Contract).where(*conditions)
        )).scalar_one()

        result = await db.execute(
            select(Contract)
            .where(*conditions)
            .order_by(Contract.created_at.desc(), Contract.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        contracts = list(result.scalars().all())
        media_by_contract = await load_media_for_contracts(db, [c.id for c in contracts])

        return [attach_media(c, media_by_contract.get(c.id, [])) for c in contracts], total

    async def get_with_media(self, db: AsyncSession, contract_id: str) -> ContractWithMedia:
        contract = await self._get(db, contract_id)
        media_by_contract = await load_media_for_contracts(db, [contract.id])
        return attach_media(contract, media_by_contract.get(contract.id, []))

    async def update(self, db: AsyncSession, contract_id: str, data: ContractUpdate) -> Contract:
        contract = await self._get(db, contract_id)
        changes = {
            key: value for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        for key, value in changes.items():
            setattr(contract, key, value)
        await self._commit_unique(db, changes.get("contract_number", contract.contract_number))
        await db.refresh(contract)
        logger.info(f"Updated contract {contract_id}: {sorted(changes)}")
        return contract

    async def _purge(self, db: AsyncSession, contract_ids: Sequence[str]) -> None:
        """
        Remove contracts for good: drop every user's bookmark and personal
        archive entry for them and detach their media.
        """
        ids = list(contract_ids)
        if not ids:
            return
        await db.execute(delete(UserBookmark).where(UserBookmark.contract_id.in_(ids)))
        await db.execute(delete(UserArchivedContract).where(UserArchivedContract.contract_id.in_(ids)))
        await db.execute(update(Media).where(Media.contract_id.in_(ids)).values(contract_id=None))
        await db.execute(delete(Contract).where(Contract.id.in_(ids)))

    async def delete(self, db: AsyncSession, contract_id: str) -> None:
        """Permanent delete regardless of archive state"""
        await self._get(db, contract_id)
        await self._purge(db, [contract_id])
        await db.commit()
        logger.info(f"Deleted contract {contract_id}")

    # Global archive

    async def list_global_archive(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[List[Contract], int]:
        total = (await db.execute(
            select(func.count()).select_from(Contract).where(Contract.is_archived.is_(True))
        )).scalar_one()

        result = await db.execute(
            select(Contract)
            .where(Contract.is_archived.is_(True))
            .order_by(Contract.archived_at.desc(), Contract.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def archive_globally(self, db: AsyncSession, contract_id: str, admin_id: str) -> Contract:
        contract = await self._get(db, contract_id)
        if contract.is_archived:
            raise BadRequestError("Contract is already archived")

        contract.is_archived = True
        contract.archived_at = datetime.now(timezone.utc)
        contract.archived_by = admin_id
        await db.commit()
        await db.refresh(contract)
        logger.info(f"Contract {contract_id} archived globally by {admin_id}")
        return contract

    async def restore_globally(self, db: AsyncSession, contract_id: str) -> Contract:
        contract = await self._get(db, contract_id)
        if not contract.is_archived:
            raise BadRequestError("Contract is not archived")

        contract.is_archived = False
        contract.archived_at = None
        contract.archived_by = None
        await db.commit()
        await db.refresh(contract)
        logger.info(f"Contract {contract_id} restored from global archive")
        return contract

    async def permanently_delete(self, db: AsyncSession, contract_id: str) -> None:
        """Permanent delete of a globally archived contract"""
        contract = await self._get(db, contract_id)
        if not contract.is_archived:
            raise BadRequestError("Contract must be archived before permanent deletion")

        await self._purge(db, [contract_id])
        await db.commit()
        logger.info(f"Contract {contract_id} permanently deleted")

    async def empty_global_archive(self, db: AsyncSession) -> int:
        result = await db.execute(select(Contract.id).where(Contract.is_archived.is_(True)))
        contract_ids = list(result.scalars().all())

        await self._purge(db, contract_ids)
        await db.commit()
        logger.info(f"Permanently deleted {len(contract_ids)} archived contracts")
        return len(contract_ids)
