"""Long-term conversational memory backed by the mem0 platform."""

from typing import Any, Dict, Optional, Sequence

from mem0 import AsyncMemoryClient

from teachback.core.config import Settings
from teachback.core.logging import setup_logger
from teachback.schemas.chat import ChatMessage

logger = setup_logger(__name__)


class MemoryService:
    """Best-effort writer of conversation turns to the memory service.

    Failures are logged and never propagated to the request.
    """

    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.MEM0_API_KEY
        self._client = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def get_client(self) -> AsyncMemoryClient:
        """Get the memory client instance."""
        if self._client is None:
            logger.info("Initializing mem0 memory client")
            self._client = AsyncMemoryClient(api_key=self.api_key)
        return self._client

    async def add_memories(
        self,
        messages: Sequence[ChatMessage],
        *,
        user_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Store the turn list against the caller-scoped identifier.

        Args:
            messages: Prior turns plus the new user and assistant turns
            user_id: Caller-scoped identifier
            metadata: Optional metadata stored with the memories

        Returns:
            True if the write succeeded, False if it was skipped or failed
        """
        if not self.enabled:
            logger.debug("MEM0_API_KEY not set, skipping memory write")
            return False

        if not messages:
            return False

        try:
            client = self.get_client()
            await client.add(
                [{"role": m.role, "content": m.content} for m in messages],
                user_id=user_id,
                metadata=metadata or {},
            )
        except Exception as e:
            logger.error(
                f"Memory write failed for user {user_id}: {e}", exc_info=True
            )
            return False

        logger.info(f"Stored {len(messages)} messages in memory for user {user_id}")
        return True
