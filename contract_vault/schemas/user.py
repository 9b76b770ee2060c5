"""
User Pydantic schemas for admin user management
"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field

from contract_vault.schemas.contract import CamelModel


class UserRead(CamelModel):
    id: str
    email: str
    username: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class RoleUpdate(CamelModel):
    """Request model for changing a user's role"""
    role: str = Field(..., description="'user' or 'admin'")


class UserStats(CamelModel):
    total_users: int
    admin_count: int
    user_count: int
    recent_users: List[UserRead] = Field(default_factory=list, description="Five newest users")
