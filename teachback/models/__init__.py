"""Database ORM models."""

from .conversation_session import ConversationSessionModel
from .prompt_configuration import PromptConfigurationModel

__all__ = ["ConversationSessionModel", "PromptConfigurationModel"]
