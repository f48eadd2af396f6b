"""Email service for sending emails.

Wraps an optional email provider. Callers get a plain success flag: an
unconfigured mailer and a failing transport both yield False, so flows that
send mail can fall back instead of failing.
"""

from latchkey.core.config import Settings
from latchkey.core.logging import get_logger
from latchkey.infrastructure.services.email.email_provider import EmailProvider
from latchkey.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings

logger = get_logger(__name__)


class EmailService:
    """Service for sending emails."""

    def __init__(self, provider: EmailProvider | None = None) -> None:
        """Initialize the email service.

        Args:
            provider: Transport used to deliver mail. None disables delivery.
        """
        self.provider = provider

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailService":
        """Build an email service with SMTP delivery if SMTP is configured."""
        if not settings.mail_configured:
            logger.warning("Mailer is not configured. Emails will not be sent.")
            return cls()
        return cls(SMTPProvider(SMTPSettings.from_settings(settings)))

    @property
    def is_configured(self) -> bool:
        return self.provider is not None

    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        """Send an email.

        Args:
            to: Recipient email address.
            subject: Subject line.
            text: Plain text body.
            html: HTML body.

        Returns:
            True if the email was handed to the transport, False otherwise.
        """
        if self.provider is None:
            logger.warning("Mailer is not configured. Email was not sent.", subject=subject)
            return False

        try:
            return await self.provider.send_email(
                to=to,
                subject=subject,
                html_body=html,
                text_body=text,
            )
        except Exception as e:
            logger.error("Email delivery failed", subject=subject, error=str(e))
            return False
