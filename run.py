"""Application starter."""

import os
import sys

import uvicorn

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from teachback.core.config import get_settings
from teachback.core.logging import setup_logger

logger = setup_logger(__name__)

if __name__ == "__main__":
    settings = get_settings()
    logger.info(f"Starting server on port {settings.DOCS_PORT}")
    uvicorn.run(
        "teachback.main:app",
        host="0.0.0.0",
        port=settings.DOCS_PORT,
        reload=settings.DEBUG,
    )
