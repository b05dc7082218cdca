"""Conversation log service: per-session Q&A records for later review."""

import csv
import io
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from teachback.core.exceptions import PersistenceError, ValidationError
from teachback.core.logging import setup_logger
from teachback.repositories import ConversationRepositoryProtocol

logger = setup_logger(__name__)

CSV_HEADERS = [
    "Session Date (UTC)",
    "Session ID",
    "Question",
    "Response",
    "Timestamp (UTC)",
]


class ConversationLogService:
    """Service for recording and browsing logged conversations."""

    def __init__(self, conversation_repo: ConversationRepositoryProtocol) -> None:
        self._repo = conversation_repo

    async def log_exchange(
        self, session_id: str, question: str, response: str
    ) -> Dict[str, Any]:
        """
        Upsert the session record with one completed exchange.

        Not idempotent: a repeated call appends a duplicate turn.

        Returns:
            The stored record as a dictionary

        Raises:
            PersistenceError: If the database write fails
        """
        now = datetime.now(timezone.utc)
        try:
            record = await self._repo.get_by_session_id(session_id, for_update=True)
            if record is None:
                record = await self._repo.create(
                    session_id=session_id,
                    question=question,
                    response=response,
                    timestamp=now,
                )
            else:
                record = await self._repo.append_turn(
                    record, question=question, response=response, timestamp=now
                )
        except SQLAlchemyError as e:
            logger.error(f"Error storing chat data: {e}", exc_info=True)
            raise PersistenceError("Failed to store chat data")

        return record.to_dict()

    async def list_conversations(
        self,
        sort_by: str = "timestamp",
        order: str = "DESC",
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        List all session records.

        Args:
            sort_by: "id", anything else sorts by timestamp
            order: "ASC" or "DESC", case-insensitive
            search: Optional case-insensitive filter on session id, questions
                and responses

        Raises:
            ValidationError: If order is not ASC/DESC
            PersistenceError: If the database read fails
        """
        normalized_order = (order or "DESC").upper()
        if normalized_order not in ("ASC", "DESC"):
            raise ValidationError(f"Invalid order: {order}. Must be 'ASC' or 'DESC'")
        sort_column = "id" if sort_by == "id" else "timestamp"

        try:
            records = await self._repo.list_all(sort_column, normalized_order)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching conversations: {e}", exc_info=True)
            raise PersistenceError("Failed to fetch conversations")

        conversations = [record.to_dict() for record in records]
        if search:
            conversations = [c for c in conversations if _matches(c, search)]
        return conversations

    async def export_csv(
        self,
        sort_by: str = "timestamp",
        order: str = "DESC",
        search: Optional[str] = None,
    ) -> str:
        """Render the conversation log as CSV, one row per turn."""
        conversations = await self.list_conversations(sort_by, order, search)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for conversation in conversations:
            for turn in conversation["conversation_data"]:
                writer.writerow(
                    [
                        conversation["timestamp"],
                        conversation["session_id"],
                        turn.get("question", ""),
                        turn.get("response", ""),
                        turn.get("timestamp", ""),
                    ]
                )
        return buffer.getvalue()


def _matches(conversation: Dict[str, Any], search: str) -> bool:
    term = search.lower()
    if term in conversation["session_id"].lower():
        return True
    return any(
        term in turn.get("question", "").lower()
        or term in turn.get("response", "").lower()
        for turn in conversation["conversation_data"]
    )
