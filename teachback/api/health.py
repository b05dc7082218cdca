"""Health check API endpoints."""

from fastapi import APIRouter, Query, Request

from teachback.core.health import check_database_connection, get_health_status
from teachback.core.logging import setup_logger

logger = setup_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    request: Request,
    deep: bool = Query(
        default=False,
        description="Include database connectivity check",
    ),
):
    """
    Health check endpoint with optional deep checking.

    By default only reports that the application is running. Use
    ?deep=true to also run a trivial query against the database.
    """
    app_name = request.app.state.settings.APP_NAME
    if not deep:
        return get_health_status(app_name, db_status=None)

    db_status = await check_database_connection(request.app.state.engine)
    return get_health_status(app_name, db_status)
