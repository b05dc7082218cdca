"""Prompt configuration models for the admin settings screen."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HEADING = "👋 Hi There!"
DEFAULT_DESCRIPTION = "Welcome to the chat interface. Please click Begin to start."
DEFAULT_PAGE_TITLE = "Teach Back : Testing agent"


class PromptConfiguration(BaseModel):
    """Resolved prompt configuration. Fields are never null."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(default="", description="Custom system prompt; empty means the built-in default")
    heading: str = Field(default=DEFAULT_HEADING)
    description: str = Field(default=DEFAULT_DESCRIPTION)
    page_title: str = Field(default=DEFAULT_PAGE_TITLE, alias="pageTitle")


class SettingsUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    heading: Optional[str] = None
    description: Optional[str] = None
    page_title: Optional[str] = Field(default=None, alias="pageTitle")


class SuccessResponse(BaseModel):
    success: bool = True
