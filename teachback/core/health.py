"""Health check module for application monitoring."""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from teachback.core.logging import setup_logger

logger = setup_logger(__name__)


async def check_database_connection(engine: AsyncEngine) -> bool:
    """Check if the database connection is healthy."""
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
    return True


def get_health_status(app_name: str, db_status: Optional[bool]):
    """
    Get health status response.

    Args:
        app_name: Application name reported in the payload
        db_status: Database status (True/False) or None to skip database check
    """
    if db_status is None:
        return {
            "message": "Service is healthy",
            "data": {
                "status": "healthy",
                "app": app_name,
                "database": "not_checked",
            },
        }

    status = "healthy" if db_status else "unhealthy"
    return {
        "message": f"Service is {status}",
        "data": {"status": status, "app": app_name, "database": db_status},
    }
