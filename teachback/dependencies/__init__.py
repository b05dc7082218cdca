"""FastAPI dependency injection functions."""

from .get_chat_service import (
    get_chat_service,
    get_prompt_config_repository,
    get_prompt_config_service,
)
from .get_clients import get_app_settings, get_speech_service, get_tracing_service
from .get_conversation_service import (
    get_conversation_log_service,
    get_conversation_repository,
)

__all__ = [
    "get_app_settings",
    "get_chat_service",
    "get_conversation_log_service",
    "get_conversation_repository",
    "get_prompt_config_repository",
    "get_prompt_config_service",
    "get_speech_service",
    "get_tracing_service",
]
