"""Accessors for process-scoped clients created in the application lifespan."""

from fastapi import Request

from teachback.core.config import Settings
from teachback.services.speech import SpeechService
from teachback.services.tracing import TracingService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_speech_service(request: Request) -> SpeechService:
    return request.app.state.speech_service


def get_tracing_service(request: Request) -> TracingService:
    return request.app.state.tracing_service
