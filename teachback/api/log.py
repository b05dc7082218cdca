"""Conversation log endpoints: recording, browsing and CSV export."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from teachback.core.logging import setup_logger
from teachback.dependencies import get_conversation_log_service
from teachback.schemas.conversation import (
    ConversationListResponse,
    LogRequest,
    LogResponse,
)
from teachback.services.conversation_log import ConversationLogService

logger = setup_logger(__name__)

router = APIRouter(tags=["log"], prefix="/log")


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    response_model=LogResponse,
    summary="Record a completed question/response exchange",
)
async def log_exchange(
    request: LogRequest,
    log_service: ConversationLogService = Depends(get_conversation_log_service),
) -> LogResponse:
    """
    Upsert the session record for one exchange.

    Call exactly once per completed exchange: a retried call appends a
    duplicate turn.
    """
    record = await log_service.log_exchange(
        session_id=request.session_id,
        question=request.question,
        response=request.response,
    )
    return LogResponse(success=True, data=record)


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=ConversationListResponse,
    summary="List logged conversations",
)
async def list_conversations(
    sort_by: str = Query(default="timestamp", alias="sortBy", description="timestamp or id"),
    order: str = Query(default="DESC", description="ASC or DESC"),
    search: Optional[str] = Query(
        default=None, description="Case-insensitive filter on session id, questions and responses"
    ),
    log_service: ConversationLogService = Depends(get_conversation_log_service),
) -> ConversationListResponse:
    """Return all session records ordered as requested."""
    conversations = await log_service.list_conversations(sort_by, order, search)
    return ConversationListResponse(success=True, data=conversations)


@router.get(
    "/export",
    status_code=status.HTTP_200_OK,
    summary="Download logged conversations as CSV",
)
async def export_conversations(
    sort_by: str = Query(default="timestamp", alias="sortBy"),
    order: str = Query(default="DESC"),
    search: Optional[str] = Query(default=None),
    log_service: ConversationLogService = Depends(get_conversation_log_service),
) -> Response:
    """Return one CSV row per logged turn."""
    content = await log_service.export_csv(sort_by, order, search)
    filename = f"conversation_data_UTC_{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
