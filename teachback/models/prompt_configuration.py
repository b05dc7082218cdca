"""SQLAlchemy ORM model for the admin-editable prompt configuration."""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, DateTime, Integer, Text, text

from teachback.db.database import Base


class PromptConfigurationModel(Base):
    """ORM model for prompt configuration rows. The latest ``updated_at`` wins."""

    __tablename__ = "prompt_configurations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prompt = Column(Text, nullable=False, default="")
    heading = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    page_title = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<PromptConfigurationModel(id={self.id}, updated_at={self.updated_at})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "heading": self.heading,
            "description": self.description,
            "page_title": self.page_title,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
