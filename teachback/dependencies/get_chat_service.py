"""Dependency injection functions for the chat and settings services."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from teachback.db.database import get_db
from teachback.repositories import PromptConfigRepository
from teachback.services.chat import ChatService
from teachback.services.prompt_config import PromptConfigService


def get_prompt_config_repository(
    session: AsyncSession = Depends(get_db),
) -> PromptConfigRepository:
    """Get prompt configuration repository instance."""
    return PromptConfigRepository(session)


def get_prompt_config_service(
    prompt_config_repo: PromptConfigRepository = Depends(get_prompt_config_repository),
) -> PromptConfigService:
    """Get prompt configuration service instance with injected repository."""
    return PromptConfigService(prompt_config_repo=prompt_config_repo)


def get_chat_service(
    request: Request,
    prompt_config_service: PromptConfigService = Depends(get_prompt_config_service),
) -> ChatService:
    """Get chat service wired to the application's process-scoped clients."""
    state = request.app.state
    return ChatService(
        embedding_service=state.embedding_service,
        vector_store=state.vector_store,
        completion_streamer=state.completion_streamer,
        memory_service=state.memory_service,
        prompt_config_service=prompt_config_service,
    )
