import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from sqlalchemy import event
from sqlmodel import Session, create_engine, select

from dishdash.core.errors import ExpiredTokenError, InvalidTokenError, StorageError
from dishdash.database import create_db_and_tables
from dishdash.models.enums import UserRole
from dishdash.models.session import AuthSession
from dishdash.models.user import User
from dishdash.models.verification_token import VerificationToken
from dishdash.services.auth import AuthService
from dishdash.services.magic_link import MagicLinkIssuer
from dishdash.utils.dates import as_utc, now_utc


def _user(engine, email):
    with Session(engine) as session:
        return session.exec(select(User).where(User.email == email)).one()


def _issue(issuer, mailer, email):
    issuer.issue(email, "/dashboard")
    return mailer.last_link()


def test_verify_creates_user_and_thirty_day_session(issuer, mailer, auth_service, engine):
    email, token = _issue(issuer, mailer, "diner@example.com")

    auth_session = auth_service.verify(email, token)

    user = _user(engine, "diner@example.com")
    assert auth_session.user_id == user.id
    assert user.name == "diner"
    assert user.role == UserRole.user
    lifetime = as_utc(auth_session.expires) - now_utc()
    assert timedelta(days=29, hours=23) < lifetime <= timedelta(days=30)


def test_token_is_single_use(issuer, mailer, auth_service, engine):
    email, token = _issue(issuer, mailer, "diner@example.com")

    auth_service.verify(email, token)
    with pytest.raises(InvalidTokenError):
        auth_service.verify(email, token)

    with Session(engine) as session:
        assert session.exec(select(VerificationToken)).all() == []
        assert len(session.exec(select(AuthSession)).all()) == 1


def test_unknown_token_is_invalid(issuer, mailer, auth_service):
    email, _ = _issue(issuer, mailer, "diner@example.com")

    with pytest.raises(InvalidTokenError):
        auth_service.verify(email, "not-the-token")


def test_token_is_bound_to_its_identifier(issuer, mailer, auth_service):
    _, token = _issue(issuer, mailer, "diner@example.com")

    with pytest.raises(InvalidTokenError):
        auth_service.verify("someone-else@example.com", token)


def test_expired_token_is_rejected_and_removed(issuer, mailer, auth_service, engine):
    email, token = _issue(issuer, mailer, "diner@example.com")
    with Session(engine) as session:
        row = session.exec(select(VerificationToken)).one()
        row.expires = now_utc() - timedelta(minutes=1)
        session.add(row)
        session.commit()

    with pytest.raises(ExpiredTokenError):
        auth_service.verify(email, token)

    with Session(engine) as session:
        assert session.exec(select(VerificationToken)).all() == []
        assert session.exec(select(User)).all() == []

    with pytest.raises(InvalidTokenError):
        auth_service.verify(email, token)


def test_admin_address_matches_case_insensitively(issuer, mailer, auth_service, engine):
    email, token = _issue(issuer, mailer, "Admin@DishDash.COM")

    auth_service.verify(email, token)

    assert _user(engine, "admin@dishdash.com").role == UserRole.admin


def test_role_is_provisioned_only_once(issuer, mailer, auth_service, engine, settings):
    email, token = _issue(issuer, mailer, "diner@example.com")
    auth_service.verify(email, token)
    first = _user(engine, "diner@example.com")

    settings.admin_email = "diner@example.com"
    promoted_config = AuthService(engine, settings)
    email, token = _issue(issuer, mailer, "diner@example.com")
    promoted_config.verify(email, token)

    again = _user(engine, "diner@example.com")
    assert again.id == first.id
    assert again.role == UserRole.user


def test_no_admin_address_means_no_admin(issuer, mailer, engine, settings):
    settings.admin_email = None
    service = AuthService(engine, settings)
    email, token = _issue(issuer, mailer, "admin@dishdash.com")

    service.verify(email, token)

    assert _user(engine, "admin@dishdash.com").role == UserRole.user


def test_user_created_by_another_link_is_reused(issuer, mailer, auth_service, engine, monkeypatch):
    email, token = _issue(issuer, mailer, "diner@example.com")
    auth_service.verify(email, token)
    existing = _user(engine, "diner@example.com")

    # lookup misses as though the other redemption had not committed yet
    monkeypatch.setattr(auth_service, "_find_user", lambda session, email: None)
    email, token = _issue(issuer, mailer, "diner@example.com")
    auth_session = auth_service.verify(email, token)

    assert auth_session.user_id == existing.id
    with Session(engine) as session:
        assert len(session.exec(select(User)).all()) == 1
        assert len(session.exec(select(AuthSession)).all()) == 2


def test_storage_failure_raises_storage_error(issuer, mailer, auth_service, engine):
    email, token = _issue(issuer, mailer, "diner@example.com")
    VerificationToken.__table__.drop(engine)

    with pytest.raises(StorageError):
        auth_service.verify(email, token)


def test_concurrent_redemption_succeeds_once(tmp_path, settings, mailer):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    # take the write lock up front so the second redemption waits instead of failing
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    create_db_and_tables(engine)
    service = AuthService(engine, settings)
    email, token = _issue(MagicLinkIssuer(engine, settings, mailer), mailer, "diner@example.com")

    barrier = threading.Barrier(2)

    def attempt(_):
        barrier.wait()
        try:
            return service.verify(email, token)
        except InvalidTokenError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(attempt, range(2)))

    sessions = [r for r in results if isinstance(r, AuthSession)]
    failures = [r for r in results if isinstance(r, InvalidTokenError)]
    assert len(sessions) == 1
    assert len(failures) == 1

    with Session(engine) as session:
        assert len(session.exec(select(AuthSession)).all()) == 1
        assert len(session.exec(select(User)).all()) == 1
    engine.dispose()
