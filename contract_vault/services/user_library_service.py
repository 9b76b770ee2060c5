"""
User library service
Per-user bookmark list and personal archive (contracts hidden from that
user's searches only).
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.exceptions import BadRequestError, NotFoundError
from contract_vault.db.models.contract import Contract
from contract_vault.db.models.user import UserBookmark, UserArchivedContract
from contract_vault.schemas.contract import ContractSummary

logger = logging.getLogger(__name__)


class UserLibraryService:
    """Bookmarks and personal archive, both ordered lists of contract ids per user"""

    async def _get_contract(self, db: AsyncSession, contract_id: str) -> Contract:
        contract = await db.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError("Contract not found")
        return contract

    async def _list_entries(self, db: AsyncSession, model, timestamp_column, user_id: str, stamp_key: str) -> List[Dict[str, Any]]:
        """Join list entries to their contracts, keeping insertion order"""
        result = await db.execute(
            select(model, Contract)
            .join(Contract, Contract.id == model.contract_id)
            .where(model.user_id == user_id)
            .order_by(timestamp_column, model.id)
        )
        items = []
        for entry, contract in result.all():
            item = ContractSummary.model_validate(contract).model_dump(by_alias=True)
            item[stamp_key] = getattr(entry, timestamp_column.key)
            items.append(item)
        return items

    async def _add_entry(self, db: AsyncSession, model, user_id: str, contract_id: str, duplicate_message: str) -> Contract:
        contract = await self._get_contract(db, contract_id)

        existing = await db.execute(
            select(model.id).where(model.user_id == user_id, model.contract_id == contract_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise BadRequestError(duplicate_message)

        db.add(model(user_id=user_id, contract_id=contract_id))
        await db.commit()
        return contract

    async def _remove_entries(self, db: AsyncSession, model, user_id: str, contract_id: str = None) -> int:
        stmt = delete(model).where(model.user_id == user_id)
        if contract_id is not None:
            stmt = stmt.where(model.contract_id == contract_id)
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount or 0

    # Bookmarks

    async def list_bookmarks(self, db: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
        return await self._list_entries(db, UserBookmark, UserBookmark.bookmarked_at, user_id, "bookmarkedAt")

    async def add_bookmark(self, db: AsyncSession, user_id: str, contract_id: str) -> Contract:
        """
        Bookmark a contract.

        Raises:
            NotFoundError: Contract does not exist
            BadRequestError: Contract is already bookmarked
        """
        contract = await self._add_entry(db, UserBookmark, user_id, contract_id, "Contract already bookmarked")
        logger.info(f"User {user_id} bookmarked contract {contract_id}")
        return contract

    async def remove_bookmark(self, db: AsyncSession, user_id: str, contract_id: str) -> int:
        return await self._remove_entries(db, UserBookmark, user_id, contract_id)

    async def clear_bookmarks(self, db: AsyncSession, user_id: str) -> int:
        return await self._remove_entries(db, UserBookmark, user_id)

    # Personal archive

    async def archived_contract_ids(self, db: AsyncSession, user_id: str) -> List[str]:
        """Ids of contracts the user has hidden from their own searches"""
        result = await db.execute(
            select(UserArchivedContract.contract_id)
            .where(UserArchivedContract.user_id == user_id)
            .order_by(UserArchivedContract.archived_at, UserArchivedContract.id)
        )
        return list(result.scalars().all())

    async def list_archived(self, db: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
        return await self._list_entries(
            db, UserArchivedContract, UserArchivedContract.archived_at, user_id, "archivedAt"
        )

    async def archive_for_user(self, db: AsyncSession, user_id: str, contract_id: str) -> Contract:
        """
        Hide a contract from this user's search results.

        Raises:
            NotFoundError: Contract does not exist
            BadRequestError: Contract is already in the user's archive
        """
        contract = await self._add_entry(db, UserArchivedContract, user_id, contract_id, "Contract already archived")
        logger.info(f"User {user_id} archived contract {contract_id}")
        return contract

    async def restore_for_user(self, db: AsyncSession, user_id: str, contract_id: str) -> int:
        return await self._remove_entries(db, UserArchivedContract, user_id, contract_id)

    async def clear_archive(self, db: AsyncSession, user_id: str) -> int:
        return await self._remove_entries(db, UserArchivedContract, user_id)
