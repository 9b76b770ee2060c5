"""
Contract and media Pydantic schemas
API payloads use camelCase keys; ORM attributes are snake_case.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that reads ORM objects and speaks camelCase"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ContractCreate(CamelModel):
    """Request model for creating a contract"""
    operator: str = Field(..., min_length=1)
    contractor_name: str = Field(..., min_length=1)
    contract_title: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    contract_number: str = Field(..., min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    contract_value: Optional[str] = None
    has_document: bool = False


class ContractUpdate(CamelModel):
    """Request model for a partial contract update"""
    operator: Optional[str] = Field(None, min_length=1)
    contractor_name: Optional[str] = Field(None, min_length=1)
    contract_title: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    contract_number: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    contract_value: Optional[str] = None
    has_document: Optional[bool] = None


class MediaRead(CamelModel):
    """Media fields exposed alongside contracts and in media listings"""
    id: str
    url: str
    filename: str
    original_name: str
    mimetype: str
    size: int
    contract_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ContractRead(CamelModel):
    """Full contract record"""
    id: str
    operator: str
    contractor_name: str
    contract_title: str
    year: int
    contract_number: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    contract_value: Optional[str] = None
    has_document: bool = False
    is_archived: bool = False
    archived_at: Optional[datetime] = None
    archived_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ContractWithMedia(ContractRead):
    """Contract plus its non-deleted media and, for multi-file contracts, a zip link"""
    media: List[MediaRead] = Field(default_factory=list)
    zip_url: Optional[str] = None


class ContractSummary(CamelModel):
    """Short contract card used by bookmark and archive listings"""
    id: str
    contract_title: str
    operator: str
    contractor_name: str
    contract_number: str
    year: int
    contract_value: Optional[str] = None
