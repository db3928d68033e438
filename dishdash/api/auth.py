import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from dishdash.core.errors import DeliveryError, VerificationError
from dishdash.core.security import SIGN_IN_PATH, get_principal, safe_callback_url
from dishdash.schemas.auth import MagicLinkRequest, MagicLinkResponse, Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# Request a sign-in link
@router.post("/signin/email", response_model=MagicLinkResponse)
def request_magic_link(payload: MagicLinkRequest, request: Request):
    try:
        request.app.state.issuer.issue(payload.email, safe_callback_url(payload.callback_url))
    except DeliveryError as exc:
        logger.warning("Magic link delivery failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send magic link. Please try again.",
        )
    return MagicLinkResponse(url=f"{SIGN_IN_PATH}/verify?email={quote(payload.email, safe='')}")


# Link from the email
@router.get("/callback/email")
def verify_magic_link(
    request: Request,
    token: str = Query(...),
    email: str = Query(...),
    callback_url: Optional[str] = Query(None, alias="callbackUrl"),
):
    auth = request.app.state.auth
    try:
        auth_session = auth.verify(email, token)
    except VerificationError as exc:
        # Invalid and expired links look the same to the user
        logger.info("Rejected sign-in link for %s: %s", email, exc)
        return RedirectResponse(f"{SIGN_IN_PATH}?error=Verification", status_code=status.HTTP_303_SEE_OTHER)

    settings = auth.settings
    response = RedirectResponse(safe_callback_url(callback_url), status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=auth.session_cookie(auth_session),
        max_age=int(auth.session_max_age.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        path="/",
    )
    return response


@router.post("/signout")
def sign_out(request: Request):
    auth = request.app.state.auth
    session_token = auth.session_token_from(request)
    if session_token:
        auth.sign_out(session_token)

    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(auth.settings.session_cookie_name, path="/")
    return response


@router.get("/session")
def read_session(principal: Optional[Principal] = Depends(get_principal)):
    if principal is None:
        return {}
    return {"user": principal}
