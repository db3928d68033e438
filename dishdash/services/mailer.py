import logging
import smtplib
import ssl
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Protocol

from dishdash.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    from_: str
    subject: str
    text: str
    html: str


@dataclass(frozen=True)
class MailResult:
    accepted: tuple[str, ...] = field(default_factory=tuple)
    rejected: tuple[str, ...] = field(default_factory=tuple)


class Mailer(Protocol):
    def send(self, message: MailMessage) -> MailResult: ...


class SmtpMailer:
    """Sends mail through an SMTP relay over implicit TLS (Resend on port 465).

    Transport failures are reported as rejected recipients; deciding what a
    rejection means is left to the caller.
    """

    def __init__(self, host: str, port: int, username: str, password: str, timeout: float = 10):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.resend_api_key or "",
        )

    def send(self, message: MailMessage) -> MailResult:
        email = EmailMessage()
        email["To"] = message.to
        email["From"] = message.from_
        email["Subject"] = message.subject
        email.set_content(message.text)
        email.add_alternative(message.html, subtype="html")

        try:
            with smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=ssl.create_default_context()
            ) as smtp:
                smtp.login(self.username, self.password)
                refused = smtp.send_message(email)
        except smtplib.SMTPRecipientsRefused as exc:
            logger.warning("SMTP relay refused %s", ", ".join(exc.recipients))
            return MailResult(rejected=tuple(exc.recipients))
        except (smtplib.SMTPException, OSError):
            logger.exception("SMTP delivery to %s failed", message.to)
            return MailResult(rejected=(message.to,))

        if refused:
            return MailResult(rejected=tuple(refused))
        return MailResult(accepted=(message.to,))
