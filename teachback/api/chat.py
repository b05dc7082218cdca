"""Streamed chat endpoint."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from teachback.core.exceptions import UpstreamError, ValidationError
from teachback.core.logging import setup_logger
from teachback.dependencies import get_chat_service
from teachback.schemas.chat import ChatRequest
from teachback.services.chat import ChatService, format_stream_part

logger = setup_logger(__name__)

router = APIRouter(tags=["chat"])

STREAM_HEADERS = {"X-Vercel-AI-Data-Stream": "v1"}


@router.post(
    "/chat",
    status_code=status.HTTP_200_OK,
    summary="Stream a retrieval-augmented reply to the learner's message",
)
async def chat(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """
    Stream an assistant reply using the data stream protocol.

    This endpoint:
    1. Replies to greetings with a canned response (no retrieval, no model call)
    2. Otherwise embeds the question and retrieves similar documentation
    3. Streams the model output, one `0:"text"` line per increment
    4. Ends with `d:{"finishReason":"stop"}`, or `3:"error"` if the stream breaks
    5. Writes the exchange to long-term memory after the body has been sent

    Args:
        request: ChatRequest with messages, userId, persona and optional systemPrompt

    Returns:
        StreamingResponse: text/plain data stream

    Raises:
        ValidationError: 400 if there is no usable user message
        UpstreamError: 500 if anything fails before the first token.
        Errors after streaming has begun are sent within the stream.
    """
    try:
        chat_stream = await chat_service.start_chat(
            messages=request.messages,
            user_id=request.user_id,
            persona=request.persona,
            system_prompt=request.system_prompt,
        )
    except ValidationError:
        raise
    except Exception as e:
        logger.error(f"Error in chat route: {e}", exc_info=True)
        raise UpstreamError("Internal Server Error")

    async def stream_generator():
        """Format chat events as data stream parts."""
        async for event_type, data in chat_service.stream_events(chat_stream):
            yield format_stream_part(event_type, data)

    return StreamingResponse(
        stream_generator(),
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
        background=BackgroundTask(chat_service.remember, chat_stream.turn),
    )
