"""
Streaming search WebSocket

Clients send {"event": "contract:search", "data": {"query": ..., "tab": ...}}
and receive start/progress/result/summary/complete (or error) frames. Every
search message runs as its own task with its own database session; all of a
connection's tasks are cancelled when it disconnects.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Set

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.websockets import WebSocketState

from contract_vault.core.security import resolve_user, socket_token
from contract_vault.db.base import get_session_maker
from contract_vault.schemas.search import SearchEvent, SocketMessage, StartSearchRequest
from contract_vault.services.connection_manager import connection_manager
from contract_vault.services.search_stream import (
    ChannelClosed,
    SearchChannel,
    SearchStreamOrchestrator,
    build_search_orchestrator
)

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache()
def get_search_orchestrator() -> SearchStreamOrchestrator:
    """Dependency to get the shared (stateless) search orchestrator"""
    return build_search_orchestrator()


class WebSocketChannel(SearchChannel):
    """SearchChannel over one FastAPI WebSocket"""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.closed = False
        self._send_lock = asyncio.Lock()

    def is_open(self) -> bool:
        return (
            not self.closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def emit(self, event: str, data: Dict[str, Any]) -> None:
        if not self.is_open():
            raise ChannelClosed()
        async with self._send_lock:
            try:
                await self.websocket.send_json(SocketMessage(event=event, data=data).model_dump())
            except (WebSocketDisconnect, RuntimeError) as e:
                self.closed = True
                raise ChannelClosed() from e

    def close(self) -> None:
        self.closed = True


async def _run_search(
    orchestrator: SearchStreamOrchestrator,
    session_maker: async_sessionmaker,
    channel: WebSocketChannel,
    request: StartSearchRequest,
    caller_id: Optional[str]
) -> None:
    async with session_maker() as db:
        await orchestrator.run(db, channel, request.query, tab=request.tab, caller_id=caller_id)


@router.websocket("/ws")
async def search_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    session_maker: async_sessionmaker = Depends(get_session_maker),
    orchestrator: SearchStreamOrchestrator = Depends(get_search_orchestrator)
):
    await websocket.accept()

    async with session_maker() as db:
        user = await resolve_user(db, socket_token(token, websocket.headers.get("authorization")))
    caller_id = user.id if user else None

    channel = WebSocketChannel(websocket)
    connection_manager.register(websocket)
    tasks: Set[asyncio.Task] = set()

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))

            raw = frame.get("text")
            if raw is None:
                await channel.emit(SearchEvent.ERROR, {"message": "Invalid message format"})
                continue
            try:
                message = SocketMessage.model_validate_json(raw)
            except ValidationError:
                await channel.emit(SearchEvent.ERROR, {"message": "Invalid message format"})
                continue

            if message.event != SearchEvent.SEARCH:
                logger.debug(f"Ignoring unknown socket event '{message.event}'")
                continue

            try:
                request = StartSearchRequest.model_validate(message.data)
            except ValidationError:
                await channel.emit(SearchEvent.ERROR, {"message": "Search query is required"})
                continue

            task = asyncio.create_task(_run_search(orchestrator, session_maker, channel, request, caller_id))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
    except (WebSocketDisconnect, ChannelClosed):
        pass
    finally:
        # Unregister before any await: the gather can be cancelled too
        channel.close()
        connection_manager.unregister(websocket)
        for task in list(tasks):
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
