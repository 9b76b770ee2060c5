"""
User service
Admin-side user management: listing, role changes, deletion and counts.
"""

import logging
from typing import List

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.exceptions import BadRequestError, NotFoundError
from contract_vault.db.models.search_history import SearchHistory
from contract_vault.db.models.user import User, UserBookmark, UserArchivedContract
from contract_vault.schemas.user import UserRead, UserStats

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")
RECENT_USERS_LIMIT = 5


class UserService:
    """Service for user accounts as seen by an admin"""

    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return list(result.scalars().all())

    async def get_user(self, db: AsyncSession, user_id: str) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_role(self, db: AsyncSession, user_id: str, role: str, acting_admin_id: str) -> User:
        """
        Change a user's role.

        Raises:
            BadRequestError: Unknown role, or an admin demoting themselves
            NotFoundError: User does not exist
        """
        if role not in ROLES:
            raise BadRequestError("Invalid role")
        if user_id == acting_admin_id and role != "admin":
            raise BadRequestError("You cannot remove your own admin privileges")

        user = await self.get_user(db, user_id)
        user.role = role
        await db.commit()
        await db.refresh(user)
        logger.info(f"User {user_id} role set to {role} by {acting_admin_id}")
        return user

    async def delete_user(self, db: AsyncSession, user_id: str, acting_admin_id: str) -> None:
        """Delete a user together with their bookmarks, personal archive and search history"""
        if user_id == acting_admin_id:
            raise BadRequestError("You cannot delete your own account from admin panel")

        user = await self.get_user(db, user_id)
        await db.execute(delete(UserBookmark).where(UserBookmark.user_id == user_id))
        await db.execute(delete(UserArchivedContract).where(UserArchivedContract.user_id == user_id))
        await db.execute(delete(SearchHistory).where(SearchHistory.user_id == user_id))
        await db.delete(user)
        await db.commit()
        logger.info(f"User {user_id} deleted by {acting_admin_id}")

    async def stats(self, db: AsyncSession) -> UserStats:
        counts = await db.execute(select(User.role, func.count()).group_by(User.role))
        by_role = {role: count for role, count in counts.all()}

        recent = await db.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc()).limit(RECENT_USERS_LIMIT)
        )
        return UserStats(
            total_users=sum(by_role.values()),
            admin_count=by_role.get("admin", 0),
            user_count=by_role.get("user", 0),
            recent_users=[UserRead.model_validate(u) for u in recent.scalars().all()]
        )
