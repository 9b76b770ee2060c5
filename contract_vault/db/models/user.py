"""
User database models
Users plus their bookmark and personal-archive lists
"""

from uuid import uuid4

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from contract_vault.db.base import Base


class User(Base):
    """
    Model for application users.

    Identity is issued elsewhere; this service only stores what it needs to
    resolve a bearer token and to keep per-user contract lists.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default="user")  # user, admin

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id='{self.id}', role='{self.role}')>"


class UserBookmark(Base):
    """One bookmarked contract in a user's ordered bookmark list."""
    __tablename__ = "user_bookmarks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    bookmarked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'contract_id', name='uq_user_bookmarks_user_contract'),
    )


class UserArchivedContract(Base):
    """One contract hidden from a single user's search results."""
    __tablename__ = "user_archived_contracts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    archived_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'contract_id', name='uq_user_archived_user_contract'),
    )
