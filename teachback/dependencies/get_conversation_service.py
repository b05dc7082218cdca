"""Dependency injection functions for the conversation log service."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teachback.db.database import get_db
from teachback.repositories import ConversationRepository
from teachback.services.conversation_log import ConversationLogService


def get_conversation_repository(
    session: AsyncSession = Depends(get_db),
) -> ConversationRepository:
    """Get conversation repository instance."""
    return ConversationRepository(session)


def get_conversation_log_service(
    conversation_repo: ConversationRepository = Depends(get_conversation_repository),
) -> ConversationLogService:
    """Get conversation log service instance with injected repository."""
    return ConversationLogService(conversation_repo=conversation_repo)
