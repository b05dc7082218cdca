"""Repository classes for database operations."""

from .conversation_repo import ConversationRepository, ConversationRepositoryProtocol
from .prompt_config_repo import PromptConfigRepository, PromptConfigRepositoryProtocol

__all__ = [
    "ConversationRepository",
    "ConversationRepositoryProtocol",
    "PromptConfigRepository",
    "PromptConfigRepositoryProtocol",
]
