import hashlib
import logging
import secrets
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

from dishdash.schemas.auth import Principal

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

SIGN_IN_PATH = "/sign-in"
DASHBOARD_PATH = "/dashboard"


# Tokens

def generate_token() -> str:
    return secrets.token_urlsafe(32)


def hash_token(token: str, secret: str) -> str:
    """Digest stored in place of a magic link token."""
    return hashlib.sha256(f"{token}{secret}".encode()).hexdigest()


def normalize_identifier(email: str) -> str:
    return email.strip().lower()


# Session cookie

def encode_session_cookie(session_token: str, expires: datetime, secret: str) -> str:
    return jwt.encode({"sid": session_token, "exp": expires}, secret, algorithm=ALGORITHM)


def decode_session_cookie(value: str, secret: str) -> Optional[str]:
    """Returns the session token carried by the cookie, or None if it was tampered with or expired."""
    try:
        payload = jwt.decode(value, secret, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.warning("Rejected session cookie: %s", exc)
        return None

    session_token = payload.get("sid")
    if not isinstance(session_token, str) or not session_token:
        logger.warning("Session cookie without a session id")
        return None
    return session_token


# Redirect helpers

def sign_in_url(callback_url: Optional[str] = None) -> str:
    if not callback_url:
        return SIGN_IN_PATH
    return f"{SIGN_IN_PATH}?callbackUrl={quote(callback_url, safe='')}"


def safe_callback_url(callback_url: Optional[str]) -> str:
    # Only same-site absolute paths, never "//host" or full URLs
    if callback_url and callback_url.startswith("/") and not callback_url.startswith("//"):
        return callback_url
    return DASHBOARD_PATH


def redirect_to(location: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        detail="Redirect",
        headers={"Location": location},
    )


# Guards

def get_principal(request: Request) -> Optional[Principal]:
    # The route gate resolves the principal once per request
    if hasattr(request.state, "principal"):
        return request.state.principal
    principal = request.app.state.auth.resolve(request)
    request.state.principal = principal
    return principal


def ensure_authenticated(principal: Optional[Principal], callback_url: Optional[str] = None) -> Principal:
    if principal is None:
        raise redirect_to(sign_in_url(callback_url))
    return principal


def ensure_admin(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise redirect_to(sign_in_url())
    if not principal.is_admin:
        raise redirect_to(DASHBOARD_PATH)
    return principal


def require_auth(callback_url: Optional[str] = None):
    """Dependency factory: the signed-in principal, or a redirect to sign-in."""

    def dependency(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
        return ensure_authenticated(principal, callback_url)

    return dependency


def require_admin(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    return ensure_admin(principal)
