"""Admin token middleware."""

import secrets

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from teachback.core.logging import setup_logger

logger = setup_logger(__name__)

ADMIN_TOKEN_HEADER = "Admin-Token"

# (method, path) pairs that belong to the admin screens
PROTECTED_ROUTES = {
    ("POST", "/settings"),
    ("GET", "/log"),
    ("GET", "/log/export"),
}


class AdminTokenMiddleware(BaseHTTPMiddleware):
    """Middleware requiring an Admin-Token header on admin routes.

    The guard is inactive when no admin token is configured.
    """

    def __init__(self, app: ASGIApp, admin_token: str = ""):
        super().__init__(app)
        self.admin_token = admin_token

    async def dispatch(self, request: Request, call_next):
        """Process the request and check the admin token where required."""
        if not self.admin_token:
            return await call_next(request)

        if (request.method, request.url.path.rstrip("/") or "/") not in PROTECTED_ROUTES:
            return await call_next(request)

        auth_token = request.headers.get(ADMIN_TOKEN_HEADER)

        if not auth_token:
            logger.warning(f"Missing {ADMIN_TOKEN_HEADER} header for path: {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": f"Missing {ADMIN_TOKEN_HEADER} header"},
            )

        if not secrets.compare_digest(auth_token, self.admin_token):
            logger.warning(f"Invalid {ADMIN_TOKEN_HEADER} for path: {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Invalid admin token"},
            )

        logger.debug(f"Admin authentication successful for path: {request.url.path}")
        return await call_next(request)
