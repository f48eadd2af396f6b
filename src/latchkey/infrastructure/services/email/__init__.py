"""Email transports."""

from latchkey.infrastructure.services.email.email_provider import EmailProvider
from latchkey.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings

__all__ = ["EmailProvider", "SMTPProvider", "SMTPSettings"]
