"""Speech helper models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TextToSpeechRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = Field(default=None, description="Text to synthesize")
    voice_id: Optional[str] = Field(
        default=None, alias="voiceId", description="Voice override; server default when omitted"
    )


class TranscriptionResponse(BaseModel):
    text: str
