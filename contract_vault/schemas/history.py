"""
Search history Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import Field

from contract_vault.schemas.contract import CamelModel


class SearchHistoryCreate(CamelModel):
    """Request model for saving a search explicitly"""
    query: str = Field(..., min_length=1)
    results_count: int = Field(default=0, ge=0)
    tab: str = Field(default="all")


class SearchHistoryRead(CamelModel):
    id: str
    user_id: str
    query: str
    results_count: int
    tab: str
    created_at: Optional[datetime] = None
