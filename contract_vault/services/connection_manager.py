"""
Registry of live search WebSocket connections
Holds connections only; search state belongs to each invocation.
"""

import logging
from typing import Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self._connections: Set[WebSocket] = set()

    def register(self, websocket: WebSocket) -> None:
        self._connections.add(websocket)
        logger.info(f"Search socket connected ({len(self._connections)} active)")

    def unregister(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info(f"Search socket disconnected ({len(self._connections)} active)")

    @property
    def active_count(self) -> int:
        return len(self._connections)


connection_manager = ConnectionManager()
