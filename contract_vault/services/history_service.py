"""
Search history service
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.exceptions import NotFoundError
from contract_vault.db.models.search_history import SearchHistory

logger = logging.getLogger(__name__)


class HistoryService:
    """Service for a user's saved searches"""

    async def record(
        self,
        db: AsyncSession,
        user_id: str,
        query: str,
        results_count: int,
        tab: Optional[str] = None
    ) -> SearchHistory:
        entry = SearchHistory(
            user_id=user_id,
            query=query,
            results_count=results_count,
            tab=tab or "all"
        )
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        return entry

    async def record_best_effort(
        self,
        db: AsyncSession,
        user_id: str,
        query: str,
        results_count: int,
        tab: Optional[str] = None
    ) -> Optional[SearchHistory]:
        """
        Save a search as a side effect of running it.

        Failures are logged and rolled back, never raised.
        """
        try:
            return await self.record(db, user_id, query, results_count, tab)
        except Exception as e:
            logger.error(f"Failed to save search history for user {user_id}: {str(e)}")
            try:
                await db.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after history failure also failed: {str(rollback_error)}")
            return None

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[SearchHistory], int]:
        """Newest first, paginated. Returns (entries, total)."""
        total = (await db.execute(
            select(func.count()).select_from(SearchHistory).where(SearchHistory.user_id == user_id)
        )).scalar_one()

        result = await db.execute(
            select(SearchHistory)
            .where(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.created_at.desc(), SearchHistory.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def delete_entry(self, db: AsyncSession, user_id: str, history_id: str) -> None:
        result = await db.execute(
            delete(SearchHistory).where(SearchHistory.id == history_id, SearchHistory.user_id == user_id)
        )
        if not result.rowcount:
            await db.rollback()
            raise NotFoundError("History entry not found")
        await db.commit()

    async def clear(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(delete(SearchHistory).where(SearchHistory.user_id == user_id))
        await db.commit()
        logger.info(f"Cleared {result.rowcount} history entries for user {user_id}")
        return result.rowcount or 0
