"""Conversation log models."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LogRequest(BaseModel):
    """Request model for recording one completed exchange."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., min_length=1, alias="sessionId")
    question: str = Field(..., min_length=1)
    response: str = Field(..., description="Assistant reply; may be empty")


class ConversationTurn(BaseModel):
    question: str
    response: str
    timestamp: str


class ConversationRecord(BaseModel):
    """A logged session with its ordered turn list."""

    id: int
    session_id: str
    question: str
    response: str
    conversation_data: List[ConversationTurn] = Field(default_factory=list)
    timestamp: Optional[str] = None


class LogResponse(BaseModel):
    success: bool = True
    data: ConversationRecord


class ConversationListResponse(BaseModel):
    success: bool = True
    data: List[ConversationRecord]
