"""
Streaming search message schemas and event names
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class SearchEvent:
    """Event names exchanged over the search WebSocket"""
    SEARCH = "contract:search"
    START = "contract:search:start"
    PROGRESS = "contract:search:progress"
    RESULT = "contract:search:result"
    SUMMARY = "contract:search:summary"
    COMPLETE = "contract:search:complete"
    ERROR = "contract:search:error"


class SocketMessage(BaseModel):
    """Envelope for every WebSocket frame in either direction"""
    event: str = Field(..., description="Event name, e.g. 'contract:search'")
    data: Dict[str, Any] = Field(default_factory=dict, description="Event payload")


class StartSearchRequest(BaseModel):
    """Payload of a 'contract:search' message"""
    query: Optional[str] = Field(None, description="Free text, may embed a date like 'June 2024' or '06/2024'")
    tab: str = Field(default="all", description="Client context label stored with the search history")
