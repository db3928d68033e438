import logging
from datetime import timedelta
from typing import Optional

from fastapi import Request
from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from dishdash.core.config import Settings
from dishdash.core.errors import ExpiredTokenError, InvalidTokenError, StorageError
from dishdash.core.security import (
    decode_session_cookie,
    encode_session_cookie,
    generate_token,
    hash_token,
    normalize_identifier,
)
from dishdash.models.enums import UserRole
from dishdash.models.session import AuthSession
from dishdash.models.user import User
from dishdash.models.verification_token import VerificationToken
from dishdash.schemas.auth import Principal
from dishdash.utils.dates import as_utc, now_utc

logger = logging.getLogger(__name__)


class AuthService:
    """Owns the credential tables: redeems magic links and resolves sessions.

    Built once at startup and shared through ``app.state.auth``.
    """

    def __init__(self, engine: Engine, settings: Settings):
        self.engine = engine
        self.settings = settings
        self.session_max_age = timedelta(days=settings.session_max_age_days)
        # read once: later changes never re-promote existing users
        self.admin_email = settings.admin_email.lower() if settings.admin_email else None

    # Verification

    def verify(self, identifier: str, token: str) -> AuthSession:
        """Redeems a magic link and opens a session for its owner.

        Raises InvalidTokenError when no matching token exists and
        ExpiredTokenError when it exists but is past its expiry. The token row
        is gone afterwards in every case.
        """
        identifier = normalize_identifier(identifier)
        hashed = hash_token(token, self.settings.auth_secret)

        try:
            with Session(self.engine) as session:
                expires = self._consume_token(session, identifier, hashed)
                if expires is None:
                    raise InvalidTokenError("Verification token not found")
                if as_utc(expires) <= now_utc():
                    session.commit()
                    raise ExpiredTokenError("Verification token expired")

                user = self._get_or_create_user(session, identifier)

                auth_session = AuthSession(
                    session_token=generate_token(),
                    user_id=user.id,
                    expires=now_utc() + self.session_max_age,
                )
                session.add(auth_session)
                session.commit()
                session.refresh(auth_session)
        except SQLAlchemyError as exc:
            logger.exception("Storage failure while verifying a sign-in link")
            raise StorageError("Could not verify sign-in link") from exc

        logger.info("Session opened for user %s", auth_session.user_id)
        return auth_session

    def _consume_token(self, session: Session, identifier: str, hashed: str):
        # Single DELETE ... RETURNING so concurrent redemptions cannot both win
        statement = (
            delete(VerificationToken)
            .where(
                VerificationToken.identifier == identifier,
                VerificationToken.token == hashed,
            )
            .returning(VerificationToken.expires)
            .execution_options(synchronize_session=False)
        )
        return session.execute(statement).scalar_one_or_none()

    def _find_user(self, session: Session, email: str) -> Optional[User]:
        return session.exec(select(User).where(User.email == email)).first()

    def _get_or_create_user(self, session: Session, email: str) -> User:
        user = self._find_user(session, email)
        if user:
            self.provision_role(user)
            session.add(user)
            session.flush()
            return user

        user = User(email=email, name=email.split("@")[0])
        self.provision_role(user)
        try:
            with session.begin_nested():
                session.add(user)
                session.flush()
        except IntegrityError:
            # another link for the same address created the user first
            logger.info("User %s was created concurrently, reusing it", email)
            return session.exec(select(User).where(User.email == email)).one()

        logger.info("Created user %s", email)
        return user

    def provision_role(self, user: User) -> None:
        """Assigns admin or user on first sign-in; a set role is never touched."""
        if user.role is not None:
            return

        is_admin = self.admin_email is not None and user.email.lower() == self.admin_email
        user.role = UserRole.admin if is_admin else UserRole.user
        user.updated_at = now_utc()
        logger.info("Provisioned role %s for %s", user.role.value, user.email)

    # Sessions

    def session_cookie(self, auth_session: AuthSession) -> str:
        return encode_session_cookie(
            auth_session.session_token, as_utc(auth_session.expires), self.settings.auth_secret
        )

    def session_token_from(self, request: Request) -> Optional[str]:
        cookie = request.cookies.get(self.settings.session_cookie_name)
        if not cookie:
            return None
        return decode_session_cookie(cookie, self.settings.auth_secret)

    def resolve(self, request: Request) -> Optional[Principal]:
        session_token = self.session_token_from(request)
        if session_token is None:
            return None
        return self.resolve_token(session_token)

    def resolve_token(self, session_token: str) -> Optional[Principal]:
        try:
            with Session(self.engine) as session:
                row = session.exec(
                    select(AuthSession, User)
                    .join(User, User.id == AuthSession.user_id, isouter=True)
                    .where(AuthSession.session_token == session_token)
                ).first()
                if row is None:
                    return None

                auth_session, user = row
                if as_utc(auth_session.expires) <= now_utc():
                    session.delete(auth_session)
                    session.commit()
                    return None
        except SQLAlchemyError as exc:
            logger.exception("Storage failure while resolving a session")
            raise StorageError("Could not resolve session") from exc

        if user is None:
            logger.warning("Session %s points to a missing user %s", auth_session.id, auth_session.user_id)
            return None
        if user.role is None:
            logger.warning("User %s has a session but no role", user.id)
            return None

        return Principal(id=user.id, email=user.email, name=user.name, role=user.role)

    def sign_out(self, session_token: str) -> None:
        try:
            with Session(self.engine) as session:
                session.execute(
                    delete(AuthSession).where(AuthSession.session_token == session_token)
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Storage failure while signing out")
            raise StorageError("Could not sign out") from exc
