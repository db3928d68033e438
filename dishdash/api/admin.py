from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from dishdash.core.security import require_admin
from dishdash.database import get_session
from dishdash.models.user import User
from dishdash.schemas.auth import Principal
from dishdash.schemas.user import UserRead

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=List[UserRead])
def list_users(
    session: Session = Depends(get_session),
    admin: Principal = Depends(require_admin),
):
    return session.exec(select(User).order_by(User.created_at)).all()
