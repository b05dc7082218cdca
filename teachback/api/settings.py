"""Prompt configuration endpoints for the admin screen."""

from fastapi import APIRouter, Depends, status

from teachback.core.logging import setup_logger
from teachback.dependencies import get_prompt_config_service
from teachback.schemas.settings import (
    PromptConfiguration,
    SettingsUpdateRequest,
    SuccessResponse,
)
from teachback.services.prompt_config import PromptConfigService

logger = setup_logger(__name__)

router = APIRouter(tags=["settings"], prefix="/settings")


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=PromptConfiguration,
    summary="Get the current prompt configuration",
)
async def get_settings(
    prompt_config_service: PromptConfigService = Depends(get_prompt_config_service),
) -> PromptConfiguration:
    """Return {prompt, heading, description, pageTitle} with defaults for unset fields."""
    return await prompt_config_service.get_configuration()


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse,
    summary="Update the prompt configuration",
)
async def update_settings(
    request: SettingsUpdateRequest,
    prompt_config_service: PromptConfigService = Depends(get_prompt_config_service),
) -> SuccessResponse:
    """Update only the fields present in the body; the rest keep their stored values."""
    updates = request.model_dump(exclude_unset=True)
    logger.info(f"Updating prompt configuration fields: {sorted(updates)}")
    await prompt_config_service.update_configuration(updates)
    return SuccessResponse(success=True)
