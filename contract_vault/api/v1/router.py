"""
API router
"""

from fastapi import APIRouter
from contract_vault.api.v1 import health
from contract_vault.api.v1 import search_socket
from contract_vault.api.v1 import contracts
from contract_vault.api.v1 import history
from contract_vault.api.v1 import library
from contract_vault.api.v1 import admin
from contract_vault.api.v1 import media

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["service"])
api_router.include_router(search_socket.router, prefix="/search", tags=["search"])
api_router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])
api_router.include_router(history.router, prefix="/history", tags=["history"])

# Per-user lists
api_router.include_router(library.bookmarks_router, prefix="/bookmarks", tags=["bookmarks"])
api_router.include_router(library.archive_router, prefix="/archive", tags=["archive"])

api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(media.router, prefix="/media", tags=["media"])
