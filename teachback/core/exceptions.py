"""Custom exception classes."""

from typing import Any, Dict, Optional


class TeachBackException(Exception):
    """Base exception for the teach-back application."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(TeachBackException):
    """Missing or invalid request field."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, status_code=400, details=details)


class UpstreamError(TeachBackException):
    """Third-party API failure or timeout (embedding, search, model, audio)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, status_code=500, details=details)


class PersistenceError(TeachBackException):
    """Relational store failure."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, status_code=500, details=details)
