"""Chat orchestration: greeting check, retrieval, prompt assembly and streaming."""

import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from teachback.core.exceptions import TeachBackException, ValidationError
from teachback.core.logging import setup_logger
from teachback.prompts.chat import (
    build_greeting_messages,
    build_messages,
    build_system_prompt,
    resolve_base_prompt,
)
from teachback.schemas.chat import ChatMessage
from teachback.services.completion import CompletionStreamer
from teachback.services.embedding import EmbeddingService
from teachback.services.greeting import is_greeting, pick_greeting_response
from teachback.services.memory import MemoryService
from teachback.services.prompt_config import PromptConfigService
from teachback.services.vector_store import SimilarityStoreService

logger = setup_logger(__name__)

CHUNK_EVENT = "chat.chunk"
COMPLETE_EVENT = "chat.complete"
ERROR_EVENT = "chat.error"


@dataclass
class ChatTurn:
    """One learner exchange, filled in as the response streams."""

    user_id: str
    persona: str
    query: str
    prior_turns: List[ChatMessage] = field(default_factory=list)
    greeting: bool = False
    response: str = ""
    completed: bool = False

    def memory_messages(self) -> List[ChatMessage]:
        """Prior turns plus the new user and assistant turns, without system messages."""
        messages = [turn for turn in self.prior_turns if turn.role != "system"]
        messages.append(ChatMessage(role="user", content=self.query))
        messages.append(ChatMessage(role="assistant", content=self.response))
        return messages


@dataclass
class ChatStream:
    """A started chat: the turn being answered and its text increments."""

    turn: ChatTurn
    chunks: AsyncIterator[str]


class ChatService:
    """Service answering learner messages with retrieval-augmented, streamed completions."""

    def __init__(
        self,
        *,
        embedding_service: EmbeddingService,
        vector_store: SimilarityStoreService,
        completion_streamer: CompletionStreamer,
        memory_service: MemoryService,
        prompt_config_service: Optional[PromptConfigService] = None,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._completion_streamer = completion_streamer
        self._memory_service = memory_service
        self._prompt_config_service = prompt_config_service

    async def start_chat(
        self,
        *,
        messages: Sequence[ChatMessage],
        user_id: str,
        persona: str = "general",
        system_prompt: Optional[str] = None,
    ) -> ChatStream:
        """
        Prepare a response and open its stream.

        This method:
        1. Validates that the last message is a non-empty user turn
        2. Resolves the system prompt (request, stored settings, built-in default)
        3. Greetings: picks a canned reply, no retrieval and no model call
        4. Otherwise: embeds the query, fetches similar documentation and
           opens the model stream, waiting for its first token

        Args:
            messages: Conversation so far; the last entry is the new user message
            user_id: Caller-scoped identifier
            persona: Assistant persona ("general" or "roleplay")
            system_prompt: Optional system prompt override

        Returns:
            ChatStream whose chunks are forwarded to the client as they arrive

        Raises:
            ValidationError: If the request has no usable user message
            UpstreamError: If embedding, search or the completion fails before
                the first token
        """
        started = time.perf_counter()

        if not user_id or not user_id.strip():
            raise ValidationError("userId is required")
        if not messages:
            raise ValidationError("messages must not be empty")

        latest = messages[-1]
        if latest.role != "user" or not latest.content.strip():
            raise ValidationError("The last message must be a non-empty user message")

        turn = ChatTurn(
            user_id=user_id,
            persona=persona,
            query=latest.content,
            prior_turns=list(messages[:-1]),
        )
        base_prompt = await self._resolve_base_prompt(system_prompt)

        if is_greeting(turn.query):
            turn.greeting = True
            model_messages = build_greeting_messages(
                base_prompt, turn.prior_turns, turn.query, pick_greeting_response()
            )
            # The synthesized assistant turn is the whole reply
            reply = model_messages[-1].content
            logger.info(
                f"Greeting detected for user {user_id}, replying with canned response: "
                f"roles={[m.role for m in model_messages]}, reply={reply!r}"
            )
            return ChatStream(turn=turn, chunks=_single_chunk(reply))

        logger.info(f"Processing regular query for user {user_id} with {persona} persona")

        embedding = await self._embedding_service.embed_query(turn.query)
        context = await self._vector_store.find_similar_content(embedding)

        model_messages = build_messages(
            build_system_prompt(base_prompt, context), turn.prior_turns, turn.query
        )
        logger.info(
            f"Sending {len(model_messages)} messages to model "
            f"(1 system + {len(model_messages) - 1} turns, context_length={len(context)})"
        )

        chunks = await self._completion_streamer.open_stream(
            model_messages, user_id=user_id
        )
        logger.info(
            f"Stream initialization time: {(time.perf_counter() - started) * 1000:.2f}ms"
        )
        return ChatStream(turn=turn, chunks=chunks)

    async def stream_events(
        self, chat_stream: ChatStream
    ) -> AsyncGenerator[Tuple[str, Dict[str, Any]], None]:
        """
        Relay text increments as events.

        Yields:
            Tuples of (event_type, data) where:
            - ("chat.chunk", {"content": "..."}) for every increment
            - ("chat.complete", {"finish_reason": "stop"}) after the last one, or
            - ("chat.error", {"error": "..."}) if the stream broke mid-way
        """
        turn = chat_stream.turn
        try:
            async for text in chat_stream.chunks:
                turn.response += text
                yield (CHUNK_EVENT, {"content": text})
        except asyncio.CancelledError:
            logger.info(
                f"Client disconnected from chat stream for user {turn.user_id}. Closing generator."
            )
            raise
        except Exception as e:
            logger.error(f"Chat streaming failed: {e}", exc_info=True)
            yield (ERROR_EVENT, {"error": "Failed to stream chat response"})
            return

        turn.completed = True
        logger.info(
            f"Chat response complete for user {turn.user_id}: "
            f"length={len(turn.response)}, greeting={turn.greeting}"
        )
        yield (COMPLETE_EVENT, {"finish_reason": "stop"})

    async def remember(self, turn: ChatTurn) -> bool:
        """
        Write a completed exchange to long-term memory.

        Runs after the response body has been sent. Never raises.
        """
        if not turn.completed:
            logger.debug(f"Skipping memory write for incomplete turn of user {turn.user_id}")
            return False

        try:
            return await self._memory_service.add_memories(
                turn.memory_messages(),
                user_id=turn.user_id,
                metadata={"persona": turn.persona},
            )
        except Exception as e:
            logger.error(f"Memory write failed for user {turn.user_id}: {e}", exc_info=True)
            return False

    async def _resolve_base_prompt(self, system_prompt: Optional[str]) -> str:
        """Request override, then the stored configuration, then the default."""
        if system_prompt and system_prompt.strip():
            return system_prompt

        if self._prompt_config_service is None:
            return resolve_base_prompt(None)

        try:
            configuration = await self._prompt_config_service.get_configuration()
        except TeachBackException as e:
            logger.warning(f"Falling back to default system prompt: {e.message}")
            return resolve_base_prompt(None)
        return resolve_base_prompt(configuration.prompt)


def format_stream_part(event_type: str, data: Dict[str, Any]) -> str:
    """
    Format an event as a data stream protocol line.

    Args:
        event_type: chat.chunk, chat.complete or chat.error
        data: Event payload

    Returns:
        ``0:"text"`` for increments, ``3:"message"`` for errors and
        ``d:{"finishReason": ...}`` for end of stream, newline terminated
    """
    if event_type == CHUNK_EVENT:
        return f"0:{json.dumps(data['content'])}\n"
    if event_type == ERROR_EVENT:
        return f"3:{json.dumps(data['error'])}\n"
    if event_type == COMPLETE_EVENT:
        finish = json.dumps(
            {"finishReason": data.get("finish_reason", "stop")}, separators=(",", ":")
        )
        return f"d:{finish}\n"
    raise ValueError(f"Unknown stream event type: {event_type}")


async def _single_chunk(text: str) -> AsyncIterator[str]:
    yield text
