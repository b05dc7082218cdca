"""Streaming chat completions."""

from typing import AsyncIterator, List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from teachback.core.exceptions import UpstreamError
from teachback.core.logging import setup_logger
from teachback.schemas.chat import ChatMessage
from teachback.services.model import ModelService

logger = setup_logger(__name__)

MESSAGE_CLASSES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: Sequence[ChatMessage]) -> List[BaseMessage]:
    """Convert chat turns to LangChain messages, preserving order."""
    return [MESSAGE_CLASSES[message.role](content=message.content) for message in messages]


def chunk_text(chunk) -> str:
    """Extract the text increment from a streamed model chunk."""
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    # Some providers stream a list of content blocks
    if isinstance(content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return ""


class CompletionStreamer:
    """Invokes the chat model in streaming mode and relays text increments."""

    def __init__(self, model_service: ModelService) -> None:
        self._model_service = model_service

    async def open_stream(
        self, messages: Sequence[ChatMessage], *, user_id: str
    ) -> AsyncIterator[str]:
        """
        Start a streamed completion and wait for its first text increment.

        Args:
            messages: Ordered message list, system message first
            user_id: Caller-scoped identifier, attached to the run metadata

        Returns:
            A lazy, finite, non-restartable iterator of text increments. Errors
            raised while iterating it are UpstreamError.

        Raises:
            UpstreamError: If the model fails before producing the first token
        """
        try:
            model = self._model_service.get_model()
            stream = model.astream(
                to_langchain_messages(messages),
                config={"run_name": "teachback_chat", "metadata": {"user_id": user_id}},
            )
            iterator = stream.__aiter__()
            first = await self._next_text(iterator)
        except UpstreamError:
            raise
        except Exception as e:
            logger.error(f"Completion failed before first token: {e}", exc_info=True)
            raise UpstreamError(f"Completion request failed: {str(e)}")

        logger.info(
            f"Completion stream opened: user_id={user_id}, messages={len(messages)}, "
            f"empty={first is None}"
        )
        return self._relay(first, iterator)

    async def _next_text(self, iterator) -> Optional[str]:
        """Advance to the next non-empty increment; None at end of stream."""
        async for chunk in iterator:
            text = chunk_text(chunk)
            if text:
                return text
        return None

    async def _relay(self, first: Optional[str], iterator) -> AsyncIterator[str]:
        if first is None:
            return
        yield first
        try:
            async for chunk in iterator:
                text = chunk_text(chunk)
                if text:
                    yield text
        except Exception as e:
            logger.error(f"Completion stream failed mid-stream: {e}", exc_info=True)
            raise UpstreamError(f"Completion stream interrupted: {str(e)}")
