from datetime import timedelta

import pytest
from sqlmodel import Session, select

from dishdash.core.errors import DeliveryError, StorageError
from dishdash.core.security import hash_token
from dishdash.models.verification_token import VerificationToken
from dishdash.utils.dates import as_utc, now_utc


def _tokens(engine):
    with Session(engine) as session:
        return session.exec(select(VerificationToken)).all()


def test_issue_creates_one_token_expiring_in_24_hours(issuer, engine):
    before = now_utc()
    issuer.issue("diner@example.com", "/dashboard")
    after = now_utc()

    tokens = _tokens(engine)
    assert len(tokens) == 1
    assert tokens[0].identifier == "diner@example.com"
    expires = as_utc(tokens[0].expires)
    assert before + timedelta(hours=24) <= expires <= after + timedelta(hours=24)


def test_issue_keeps_earlier_tokens_for_same_address(issuer, engine, mailer):
    issuer.issue("diner@example.com", "/dashboard")
    issuer.issue("diner@example.com", "/dashboard")

    assert len(_tokens(engine)) == 2
    assert len(mailer.sent) == 2
    assert mailer.sent[0].text != mailer.sent[1].text


def test_stored_token_is_a_hash_of_the_emailed_token(issuer, engine, mailer, settings):
    issuer.issue("diner@example.com", "/dashboard")

    _, token = mailer.last_link()
    stored = _tokens(engine)[0].token
    assert stored != token
    assert stored == hash_token(token, settings.auth_secret)


def test_identifier_is_normalized(issuer, engine, mailer):
    issuer.issue("  Diner@Example.COM ", "/dashboard")

    assert _tokens(engine)[0].identifier == "diner@example.com"
    assert mailer.sent[0].to == "diner@example.com"


def test_message_bodies_share_the_same_url(issuer, mailer, settings):
    issuer.issue("diner@example.com", "/visits")

    message = mailer.sent[0]
    url = mailer.last_url
    assert url.startswith(f"{settings.app_url}/api/auth/callback/email?")
    assert "callbackUrl=%2Fvisits" in url
    assert "email=diner%40example.com" in url
    assert message.subject == "Sign in to DishDash"
    assert message.from_ == settings.email_from
    assert url in message.text
    assert url in message.html
    assert f'href="{url}"' in message.html


def test_rejected_recipient_raises_delivery_error(issuer, mailer, engine):
    mailer.reject.add("bounce@example.com")

    with pytest.raises(DeliveryError) as excinfo:
        issuer.issue("bounce@example.com", "/dashboard")

    assert excinfo.value.rejected == ("bounce@example.com",)
    assert "bounce@example.com" in str(excinfo.value)
    # the row was written before delivery and simply expires
    assert len(_tokens(engine)) == 1


def test_storage_failure_raises_storage_error_before_sending(issuer, engine, mailer):
    VerificationToken.__table__.drop(engine)

    with pytest.raises(StorageError):
        issuer.issue("diner@example.com", "/dashboard")

    assert mailer.sent == []
