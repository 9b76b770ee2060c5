"""
Media database model
Stores metadata for uploaded files attached to contracts
"""

from uuid import uuid4

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from contract_vault.db.base import Base


class Media(Base):
    """
    Model for uploaded media files.

    Rows are soft-deleted only (is_deleted + deleted_at); the stored file is
    removed from the storage provider at that point.
    """
    __tablename__ = "media"

    # Primary key
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # File metadata
    url = Column(String(1024), nullable=False)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    mimetype = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    public_id = Column(String(512), nullable=False)  # Storage provider key

    # Ownership and attachment
    uploaded_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="SET NULL"), nullable=True)
    tags = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)

    # Soft delete
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_media_contract_id', 'contract_id'),
        Index('idx_media_is_deleted', 'is_deleted'),
        Index('idx_media_uploaded_by', 'uploaded_by'),
    )

    def __repr__(self):
        return f"<Media(id='{self.id}', original_name='{self.original_name}')>"
