from typing import Optional

from fastapi import APIRouter, Depends, Query

from dishdash.core.security import get_principal
from dishdash.schemas.auth import Principal

router = APIRouter(tags=["pages"])

VERIFICATION_ERROR = "This sign-in link is invalid or has expired. Please request a new one."
GENERIC_ERROR = "Something went wrong. Please try again."


@router.get("/")
def root(principal: Optional[Principal] = Depends(get_principal)):
    return {
        "message": "DishDash: track, plan, and share your restaurant adventures",
        "authenticated": principal is not None,
        "email": principal.email if principal else None,
    }


@router.get("/sign-in")
def sign_in_page(
    error: Optional[str] = Query(None),
    callback_url: Optional[str] = Query(None, alias="callbackUrl"),
):
    body = {"message": "Sign in with your email to get started", "callbackUrl": callback_url or "/dashboard"}
    if error:
        # one message for every failure kind
        body["error"] = VERIFICATION_ERROR if error == "Verification" else GENERIC_ERROR
    return body


@router.get("/sign-in/verify")
def verify_request_page(email: Optional[str] = Query(None)):
    return {
        "message": "Check your email",
        "email": email or "your email",
        "detail": "The link expires in 24 hours. If you don't see the email, check your spam folder.",
    }
