"""Repository for ConversationSessionModel database operations with Protocol."""

from datetime import datetime
from typing import List, Optional, Protocol

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from teachback.core.logging import setup_logger
from teachback.models.conversation_session import ConversationSessionModel

logger = setup_logger(__name__)

SORTABLE_COLUMNS = {
    "id": ConversationSessionModel.id,
    "timestamp": ConversationSessionModel.timestamp,
}


class ConversationRepositoryProtocol(Protocol):
    """Protocol for ConversationRepository interface."""

    async def get_by_session_id(
        self, session_id: str, for_update: bool = False
    ) -> Optional[ConversationSessionModel]: ...

    async def create(
        self, session_id: str, question: str, response: str, timestamp: datetime
    ) -> ConversationSessionModel: ...

    async def append_turn(
        self,
        record: ConversationSessionModel,
        question: str,
        response: str,
        timestamp: datetime,
    ) -> ConversationSessionModel: ...

    async def list_all(
        self, sort_by: str = "timestamp", order: str = "DESC"
    ) -> List[ConversationSessionModel]: ...


class ConversationRepository:
    """Repository for ConversationSessionModel operations with injected session."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_session_id(
        self, session_id: str, for_update: bool = False
    ) -> Optional[ConversationSessionModel]:
        """Get the record for a browser session, optionally locking its row."""
        result = await self.session.execute(session_record_query(session_id, for_update))
        return result.scalar_one_or_none()

    async def create(
        self, session_id: str, question: str, response: str, timestamp: datetime
    ) -> ConversationSessionModel:
        """Create a record whose turn list holds the first exchange."""
        record = ConversationSessionModel(
            session_id=session_id,
            question=question,
            response=response,
            conversation_data=[_turn(question, response, timestamp)],
            timestamp=timestamp,
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        logger.info(f"Created conversation record for session: {session_id}")
        return record

    async def append_turn(
        self,
        record: ConversationSessionModel,
        question: str,
        response: str,
        timestamp: datetime,
    ) -> ConversationSessionModel:
        """Append an exchange to the record and refresh its timestamp."""
        # Assign a new list so the JSON column is marked dirty
        record.conversation_data = record.turns + [
            _turn(question, response, timestamp)
        ]
        record.timestamp = timestamp
        await self.session.commit()
        await self.session.refresh(record)
        logger.debug(
            f"Appended turn {len(record.turns)} to session {record.session_id}"
        )
        return record

    async def list_all(
        self, sort_by: str = "timestamp", order: str = "DESC"
    ) -> List[ConversationSessionModel]:
        """List every record ordered by id or timestamp."""
        if order.upper() not in ("ASC", "DESC"):
            raise ValueError(
                f"Invalid order parameter: {order}. Must be 'ASC' or 'DESC'"
            )

        column = SORTABLE_COLUMNS.get(sort_by, ConversationSessionModel.timestamp)
        if order.upper() == "ASC":
            query = select(ConversationSessionModel).order_by(
                column.asc(), ConversationSessionModel.id.asc()
            )
        else:
            query = select(ConversationSessionModel).order_by(
                column.desc(), ConversationSessionModel.id.desc()
            )

        result = await self.session.execute(query)
        records = list(result.scalars().all())
        logger.debug(f"Retrieved {len(records)} conversation records")
        return records


def session_record_query(session_id: str, for_update: bool = False) -> Select:
    """SELECT for one session record; FOR UPDATE serializes concurrent appends."""
    query = select(ConversationSessionModel).where(
        ConversationSessionModel.session_id == session_id
    )
    if for_update:
        query = query.with_for_update()
    return query

def _turn(question: str, response: str, timestamp: datetime) -> dict:
    return {
        "question": question,
        "response": response,
        "timestamp": timestamp.isoformat(),
    }
