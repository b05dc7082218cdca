"""Chat models for the streamed teach-back conversation."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Persona = Literal["general", "roleplay"]
PERSONAS = ("general", "roleplay")


class ChatMessage(BaseModel):
    """A single conversation turn."""

    role: Literal["system", "user", "assistant"] = Field(
        ..., description="Author of the turn"
    )
    content: str = Field(..., description="Turn text")


class ChatRequest(BaseModel):
    """Request model for a streamed chat completion."""

    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Conversation so far, oldest first. The last entry is the learner's new message.",
    )
    user_id: str = Field(
        ...,
        alias="userId",
        description="Per-browser-session identifier used to key long-term memory",
    )
    persona: Persona = Field(default="general", description="Assistant persona")
    system_prompt: Optional[str] = Field(
        default=None,
        alias="systemPrompt",
        description="System prompt override. Falls back to the stored configuration, then the built-in default.",
    )

    @field_validator("persona", mode="before")
    @classmethod
    def _fallback_persona(cls, value):
        """Unknown personas fall back to 'general' instead of failing."""
        return value if value in PERSONAS else "general"
