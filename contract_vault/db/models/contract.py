"""
Contract database model
Stores procurement/service contract records
"""

from uuid import uuid4

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from contract_vault.db.base import Base


class Contract(Base):
    """
    Model for storing contract records.

    Contracts hidden by an admin carry is_archived=True and are excluded from
    every search until restored or permanently deleted.
    """
    __tablename__ = "contracts"

    # Primary key
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Contract identification
    operator = Column(String(255), nullable=False)
    contractor_name = Column(String(255), nullable=False, index=True)
    contract_title = Column(String(500), nullable=False)
    year = Column(Integer, nullable=False, index=True)
    contract_number = Column(String(100), nullable=False, unique=True)

    # Contract period and value
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    contract_value = Column(String(100), nullable=True)
    has_document = Column(Boolean, nullable=False, default=False)

    # Global (admin) archive
    is_archived = Column(Boolean, nullable=False, default=False, index=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    archived_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_contracts_contractor_year', 'contractor_name', 'year'),
        Index('idx_contracts_operator', 'operator'),
        Index('idx_contracts_has_document', 'has_document'),
        Index('idx_contracts_created_at', 'created_at'),
    )

    def __repr__(self):
        return f"<Contract(id='{self.id}', contract_number='{self.contract_number}')>"
