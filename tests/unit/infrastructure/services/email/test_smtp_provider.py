"""Unit tests for the SMTP email provider."""

import unittest.mock as mock

import aiosmtplib
import pytest

from latchkey.core.config import Settings
from latchkey.infrastructure.services.email.smtp_provider import (
    SMTPProvider,
    SMTPSettings,
)


@pytest.fixture
def smtp_settings() -> SMTPSettings:
    """Fixture for SMTP settings."""
    return SMTPSettings(
        host="smtp.example.com",
        port=587,
        username="test_user",
        password="test_password",
        from_email="noreply@example.com",
        from_name="Latchkey Test",
    )


@pytest.fixture
def smtp_provider(smtp_settings: SMTPSettings) -> SMTPProvider:
    """Fixture for SMTP provider."""
    return SMTPProvider(smtp_settings)


def _patch_smtp():
    patcher = mock.patch("aiosmtplib.SMTP")
    mock_smtp_class = patcher.start()
    mock_smtp = mock.AsyncMock()
    mock_smtp_class.return_value.__aenter__.return_value = mock_smtp
    return patcher, mock_smtp_class, mock_smtp


@pytest.mark.asyncio
async def test_smtp_send_email_success(smtp_provider: SMTPProvider) -> None:
    """Test successful email sending."""
    patcher, mock_smtp_class, mock_smtp = _patch_smtp()
    try:
        success = await smtp_provider.send_email(
            to="recipient@example.com",
            subject="Test Subject",
            html_body="<p>HTML Body</p>",
            text_body="Text Body",
        )
    finally:
        patcher.stop()

    assert success is True
    mock_smtp_class.assert_called_once_with(
        hostname="smtp.example.com",
        port=587,
        use_tls=False,
        timeout=10,
    )
    mock_smtp.starttls.assert_awaited_once()
    mock_smtp.login.assert_awaited_once_with("test_user", "test_password")
    mock_smtp.send_message.assert_awaited_once()

    sent_message = mock_smtp.send_message.call_args[0][0]
    assert sent_message["Subject"] == "Test Subject"
    assert sent_message["To"] == "recipient@example.com"
    assert sent_message["From"] == "Latchkey Test <noreply@example.com>"


@pytest.mark.asyncio
async def test_smtp_send_email_ssl(smtp_settings: SMTPSettings) -> None:
    """Implicit TLS connects with use_tls and skips STARTTLS."""
    provider = SMTPProvider(smtp_settings.model_copy(update={"port": 465, "use_ssl": True}))

    patcher, mock_smtp_class, mock_smtp = _patch_smtp()
    try:
        assert await provider.send_email("r@example.com", "S", "<p>h</p>", "t") is True
    finally:
        patcher.stop()

    mock_smtp_class.assert_called_once_with(
        hostname="smtp.example.com",
        port=465,
        use_tls=True,
        timeout=10,
    )
    mock_smtp.starttls.assert_not_awaited()


@pytest.mark.asyncio
async def test_smtp_send_email_without_credentials(smtp_settings: SMTPSettings) -> None:
    provider = SMTPProvider(smtp_settings.model_copy(update={"username": None, "password": None}))

    patcher, _, mock_smtp = _patch_smtp()
    try:
        await provider.send_email("r@example.com", "S", "<p>h</p>", "t")
    finally:
        patcher.stop()

    mock_smtp.login.assert_not_awaited()
    mock_smtp.send_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_smtp_send_email_failure_is_raised(smtp_provider: SMTPProvider) -> None:
    patcher, _, mock_smtp = _patch_smtp()
    mock_smtp.send_message.side_effect = aiosmtplib.SMTPException("Connection refused")
    try:
        with pytest.raises(aiosmtplib.SMTPException):
            await smtp_provider.send_email("r@example.com", "S", "<p>h</p>", "t")
    finally:
        patcher.stop()


def test_smtp_settings_from_settings() -> None:
    settings = Settings(
        _env_file=None,
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_from="noreply@example.com",
    )

    smtp_settings = SMTPSettings.from_settings(settings)

    assert smtp_settings.host == "smtp.example.com"
    assert smtp_settings.port == 2525
    assert smtp_settings.username is None
    assert smtp_settings.from_email == "noreply@example.com"


def test_smtp_settings_require_host_and_sender() -> None:
    with pytest.raises(ValueError):
        SMTPSettings.from_settings(Settings(_env_file=None, smtp_host="smtp.example.com"))
