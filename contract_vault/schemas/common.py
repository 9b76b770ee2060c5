"""
Response envelope shared by every JSON endpoint
"""

from typing import Any, Optional
from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """Standard response body: status code, success flag, message and payload"""
    status: int = Field(..., description="HTTP status code")
    success: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(..., description="Human readable outcome")
    data: Optional[Any] = Field(None, description="Operation payload")


def create_response(status: int, message: str, data: Any = None, success: bool = True) -> dict:
    """Build an envelope dict ready to be returned from a route."""
    return ApiResponse(status=status, success=success, message=message, data=data).model_dump()
