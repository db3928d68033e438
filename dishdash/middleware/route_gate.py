"""Request gate that runs before routing.

Paths are public or protected. Anonymous requests to protected paths are
sent to sign-in with the original path as ``callbackUrl``; signed-in users are
kept out of the sign-in flow. Nothing else is touched.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from dishdash.core.errors import StorageError
from dishdash.core.security import DASHBOARD_PATH, SIGN_IN_PATH, sign_in_url
from dishdash.schemas.auth import Principal

logger = logging.getLogger(__name__)

AUTH_API_PATH = "/api/auth"

# directory prefixes cover the prefix itself and anything below it
DEFAULT_EXCLUDED_PREFIXES = ("/static", "/docs", "/redoc")
DEFAULT_EXCLUDED_PATHS = ("/favicon.ico", "/openapi.json")


class RouteAccess(str, Enum):
    public = "public"
    protected = "protected"


def is_under(path: str, prefix: str) -> bool:
    """True for ``prefix`` itself and paths below it, never for "/docs-private"."""
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def classify(path: str) -> RouteAccess:
    if path == "/" or is_under(path, SIGN_IN_PATH) or is_under(path, AUTH_API_PATH):
        return RouteAccess.public
    return RouteAccess.protected


def gate(path: str, principal: Optional[Principal]) -> Optional[str]:
    """Redirect location for this request, or None to let it through."""
    access = classify(path)
    if access == RouteAccess.protected and principal is None:
        return sign_in_url(path)
    if is_under(path, SIGN_IN_PATH) and principal is not None:
        return DASHBOARD_PATH
    return None


class RouteGateMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        excluded_prefixes: Sequence[str] = DEFAULT_EXCLUDED_PREFIXES,
        excluded_paths: Sequence[str] = DEFAULT_EXCLUDED_PATHS,
    ):
        super().__init__(app)
        self.excluded_prefixes = tuple(excluded_prefixes)
        self.excluded_paths = frozenset(excluded_paths)

    def is_excluded(self, path: str) -> bool:
        if path in self.excluded_paths:
            return True
        return any(is_under(path, prefix) for prefix in self.excluded_prefixes)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if self.is_excluded(path):
            return await call_next(request)

        try:
            principal = await run_in_threadpool(request.app.state.auth.resolve, request)
        except StorageError:
            # exception handlers sit below this middleware
            return JSONResponse(status_code=500, content={"detail": "Something went wrong. Please try again."})

        request.state.principal = principal
        location = gate(path, principal)
        if location is not None:
            logger.debug("Gate redirect %s -> %s", path, location)
            return RedirectResponse(location, status_code=307)
        return await call_next(request)
