from fastapi import APIRouter, Depends

from dishdash.core.security import require_auth
from dishdash.schemas.auth import Principal

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def dashboard(principal: Principal = Depends(require_auth("/dashboard"))):
    return {
        "message": "Welcome back!",
        "user": principal,
        "is_admin": principal.is_admin,
    }
