"""
Health check endpoint
"""

from fastapi import APIRouter
from contract_vault.core.config import settings
from contract_vault.services.connection_manager import connection_manager

router = APIRouter()


@router.get("")
async def health():
    """
    Health check endpoint.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "ai_summaries_configured": bool(settings.OPENAI_API_KEY),
        "ocr_configured": bool(settings.MISTRAL_API_KEY),
        "active_search_connections": connection_manager.active_count
    }
