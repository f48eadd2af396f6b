"""Tests for the command-line interface."""

import os
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from latchkey import __version__
from latchkey.cli import cli
from latchkey.core.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_info_shows_parsed_token_lifetimes():
    with patch.dict(os.environ, {"LATCHKEY_JWT_ACCESS_EXPIRES_IN": "5m"}):
        result = CliRunner().invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "300s (5m)" in result.output
    assert "604800s (7d)" in result.output


def test_init_db_refuses_production_without_force():
    env = {
        "LATCHKEY_ENVIRONMENT": "production",
        "LATCHKEY_JWT_ACCESS_SECRET": "prod-access",
        "LATCHKEY_JWT_REFRESH_SECRET": "prod-refresh",
        "LATCHKEY_JWT_RESET_SECRET": "prod-reset",
    }
    with patch.dict(os.environ, env), patch("latchkey.cli.configure_logging"):
        result = CliRunner().invoke(cli, ["init-db"])

    assert result.exit_code == 1
    assert "--force" in result.output


def test_serve_passes_options_to_uvicorn():
    with patch("uvicorn.run") as mock_run:
        result = CliRunner().invoke(cli, ["serve", "--host", "127.0.0.1", "--port", "9001"])

    assert result.exit_code == 0
    args, kwargs = mock_run.call_args
    assert args[0] == "latchkey.infrastructure.api.app:create_app"
    assert kwargs["factory"] is True
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9001
