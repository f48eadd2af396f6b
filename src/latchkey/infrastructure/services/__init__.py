"""Infrastructure services."""

from latchkey.infrastructure.services.email_service import EmailService

__all__ = ["EmailService"]
