"""SQLAlchemy ORM model for logged conversation sessions."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB

from teachback.db.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere
ConversationData = JSON().with_variant(JSONB(), "postgresql")


class ConversationSessionModel(Base):
    """ORM model for the conversation log table.

    One row per browser session. ``question``/``response`` hold the first
    exchange; every exchange, including the first, is appended to
    ``conversation_data`` in order of occurrence.
    """

    __tablename__ = "conversation_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, nullable=False, unique=True, index=True)
    question = Column(Text, nullable=False)
    response = Column(Text, nullable=False)
    conversation_data = Column(ConversationData, default=list, nullable=False)
    timestamp = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ConversationSessionModel(id={self.id}, session_id={self.session_id}, turns={len(self.turns)})>"

    @property
    def turns(self) -> List[Dict[str, Any]]:
        return list(self.conversation_data or [])

    def to_dict(self) -> Dict[str, Any]:
        """Convert session record to dictionary."""
        return {
            "id": self.id,
            "session_id": self.session_id,
            "question": self.question,
            "response": self.response,
            "conversation_data": self.turns,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
