"""
Search history database model
"""

from uuid import uuid4

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from contract_vault.db.base import Base


class SearchHistory(Base):
    """Append-only record of a past search, owned by one user."""
    __tablename__ = "search_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    query = Column(Text, nullable=False)
    results_count = Column(Integer, nullable=False, default=0)
    tab = Column(String(50), nullable=False, default="all")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_search_history_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<SearchHistory(user_id='{self.user_id}', query='{self.query}')>"
