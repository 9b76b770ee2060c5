"""
Application entry point
"""

import os
import uvicorn
from contract_vault.core.config import settings
from contract_vault.main import app

if __name__ == "__main__":
    # Hosting platforms set PORT
    port = int(os.getenv("PORT", settings.PORT))
    uvicorn.run(
        app,
        host=settings.HOST,
        port=port,
        reload=settings.DEBUG
    )
