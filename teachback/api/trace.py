"""Exchange tracing endpoint."""

from fastapi import APIRouter, Depends, status

from teachback.core.config import Settings
from teachback.core.exceptions import ValidationError
from teachback.core.logging import setup_logger
from teachback.dependencies import get_app_settings, get_tracing_service
from teachback.schemas.tracing import TraceRequest, TraceResponse
from teachback.services.tracing import TracingService

logger = setup_logger(__name__)

router = APIRouter(tags=["trace"])


@router.post(
    "/trace",
    status_code=status.HTTP_200_OK,
    response_model=TraceResponse,
    summary="Record a completed exchange in the tracing backend",
)
async def trace_exchange(
    request: TraceRequest,
    tracing_service: TracingService = Depends(get_tracing_service),
    settings: Settings = Depends(get_app_settings),
) -> TraceResponse:
    """
    Send one question/response pair through a traced completion.

    Raises:
        ValidationError: 400 if question or response is missing
        UpstreamError: 500 on completion failure or timeout
    """
    if not request.question or not request.response:
        raise ValidationError("Missing required fields")

    logger.info(f"Tracing exchange for user {request.user_id or 'anonymous'}")
    content = await tracing_service.trace_exchange(request.question, request.response)
    return TraceResponse(success=True, content=content, environment=settings.ENVIRONMENT)
