"""Prompt configuration service for the admin settings screen."""

from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from teachback.core.exceptions import PersistenceError
from teachback.core.logging import setup_logger
from teachback.models.prompt_configuration import PromptConfigurationModel
from teachback.repositories import PromptConfigRepositoryProtocol
from teachback.schemas.settings import (
    DEFAULT_DESCRIPTION,
    DEFAULT_HEADING,
    DEFAULT_PAGE_TITLE,
    PromptConfiguration,
)

logger = setup_logger(__name__)


def resolve_configuration(row: Optional[PromptConfigurationModel]) -> PromptConfiguration:
    """Substitute documented defaults for unset or empty fields."""
    if row is None:
        return PromptConfiguration()
    return PromptConfiguration(
        prompt=row.prompt or "",
        heading=row.heading or DEFAULT_HEADING,
        description=row.description or DEFAULT_DESCRIPTION,
        page_title=row.page_title or DEFAULT_PAGE_TITLE,
    )


class PromptConfigService:
    """Reads and updates the single global prompt configuration."""

    def __init__(self, prompt_config_repo: PromptConfigRepositoryProtocol) -> None:
        self._repo = prompt_config_repo

    async def get_configuration(self) -> PromptConfiguration:
        """
        Get the most recently updated configuration with defaults applied.

        Raises:
            PersistenceError: If the database read fails
        """
        try:
            row = await self._repo.get_latest()
            configuration = resolve_configuration(row)
            # Read-only; do not hold the connection for the rest of the request
            await self._repo.release()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching prompt configuration: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch prompt")
        return configuration

    async def update_configuration(self, updates: Dict[str, Any]) -> PromptConfiguration:
        """
        Update only the provided fields.

        Args:
            updates: Mapping of field name (prompt, heading, description,
                page_title) to new value. ``None`` values are ignored.

        Raises:
            PersistenceError: If the database write fails
        """
        changes = {key: value for key, value in updates.items() if value is not None}

        try:
            row = await self._repo.update_latest(changes)
        except SQLAlchemyError as e:
            logger.error(f"Error updating prompt configuration: {e}", exc_info=True)
            raise PersistenceError("Failed to update prompt")
        return resolve_configuration(row)

    async def ensure_default(self) -> None:
        """Seed the default row when the table is empty."""
        if await self._repo.count() == 0:
            await self._repo.create(
                prompt="",
                heading=DEFAULT_HEADING,
                description=DEFAULT_DESCRIPTION,
                page_title=DEFAULT_PAGE_TITLE,
            )
            logger.info("Seeded default prompt configuration")
