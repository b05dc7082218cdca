"""Exchange tracing models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TraceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: Optional[str] = None
    response: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


class TraceResponse(BaseModel):
    success: bool = True
    content: Optional[str] = None
    environment: str
