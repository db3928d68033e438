import logging
from datetime import timedelta
from urllib.parse import urlencode

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from dishdash.core.config import Settings
from dishdash.core.errors import DeliveryError, StorageError
from dishdash.core.security import generate_token, hash_token, normalize_identifier
from dishdash.models.verification_token import VerificationToken
from dishdash.services.mailer import Mailer, MailMessage
from dishdash.utils import magic_link_email
from dishdash.utils.dates import now_utc

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/api/auth/callback/email"


class MagicLinkIssuer:
    def __init__(self, engine: Engine, settings: Settings, mailer: Mailer):
        self.engine = engine
        self.settings = settings
        self.mailer = mailer
        self.token_max_age = timedelta(hours=settings.verification_token_max_age_hours)

    def build_url(self, email: str, token: str, callback_url: str) -> str:
        query = urlencode({"callbackUrl": callback_url, "token": token, "email": email})
        return f"{self.settings.app_url}{CALLBACK_PATH}?{query}"

    def issue(self, email: str, callback_url: str) -> None:
        """Stores a fresh single-use token for ``email`` and mails the sign-in link.

        Earlier unexpired links for the same address stay valid. Raises
        DeliveryError when the relay rejects the recipient; there is no retry.
        """
        identifier = normalize_identifier(email)
        token = generate_token()

        try:
            with Session(self.engine) as session:
                session.add(
                    VerificationToken(
                        identifier=identifier,
                        token=hash_token(token, self.settings.auth_secret),
                        expires=now_utc() + self.token_max_age,
                    )
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Storage failure while issuing a sign-in link")
            raise StorageError("Could not store verification token") from exc

        url = self.build_url(identifier, token, callback_url)
        hours = self.settings.verification_token_max_age_hours
        result = self.mailer.send(
            MailMessage(
                to=identifier,
                from_=self.settings.email_from,
                subject=magic_link_email.render_subject(),
                text=magic_link_email.render_text(url, hours),
                html=magic_link_email.render_html(url, hours),
            )
        )

        failed = [address for address in result.rejected if address]
        if failed:
            raise DeliveryError(f"Email failed to send to: {', '.join(failed)}", tuple(failed))

        logger.info("Sign-in link sent to %s", identifier)
