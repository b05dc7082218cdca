"""Repository for PromptConfigurationModel database operations with Protocol."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from teachback.core.logging import setup_logger
from teachback.models.prompt_configuration import PromptConfigurationModel

logger = setup_logger(__name__)

EDITABLE_FIELDS = ("prompt", "heading", "description", "page_title")


class PromptConfigRepositoryProtocol(Protocol):
    """Protocol for PromptConfigRepository interface."""

    async def get_latest(self) -> Optional[PromptConfigurationModel]: ...

    async def count(self) -> int: ...

    async def release(self) -> None: ...

    async def create(self, **fields: Any) -> PromptConfigurationModel: ...

    async def update_latest(
        self, updates: Dict[str, Any]
    ) -> PromptConfigurationModel: ...


class PromptConfigRepository:
    """Repository for PromptConfigurationModel operations with injected session."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_latest(self) -> Optional[PromptConfigurationModel]:
        """Get the most recently updated configuration row."""
        result = await self.session.execute(
            select(PromptConfigurationModel)
            .order_by(
                PromptConfigurationModel.updated_at.desc(),
                PromptConfigurationModel.id.desc(),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def release(self) -> None:
        """End the current transaction so its pooled connection is returned."""
        await self.session.commit()

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(PromptConfigurationModel)
        )
        return result.scalar() or 0

    async def create(self, **fields: Any) -> PromptConfigurationModel:
        """Insert a configuration row."""
        values = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
        values.setdefault("prompt", "")
        row = PromptConfigurationModel(**values)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        logger.info(f"Created prompt configuration row: {row.id}")
        return row

    async def update_latest(self, updates: Dict[str, Any]) -> PromptConfigurationModel:
        """
        Update the given fields of the latest row, creating one if none exists.

        Args:
            updates: Column name to new value; unknown columns are ignored

        Returns:
            The updated row
        """
        values = {key: value for key, value in updates.items() if key in EDITABLE_FIELDS}

        row = await self.get_latest()
        if row is None:
            return await self.create(**values)

        for key, value in values.items():
            setattr(row, key, value)
        row.updated_at = datetime.now(timezone.utc)

        await self.session.commit()
        await self.session.refresh(row)
        logger.info(
            f"Updated prompt configuration row {row.id}: fields={sorted(values)}"
        )
        return row
