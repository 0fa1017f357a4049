"""Tests for runtime settings validation and loading."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.config import AppSettings, SettingsLoadError, config_load_database_url, config_load_settings


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path) -> None:
    """Run each test without dotenv files or ambient setting variables."""

    monkeypatch.chdir(tmp_path)
    for variable_name in (
        "ENVIRONMENT_NAME",
        "DATABASE_URL",
        "ADMIN_API_TOKEN",
        "OPENING_PERIOD_NAME",
        "RECONCILIATION_TOLERANCE",
        "API_DEFAULT_LIMIT",
        "API_MAX_LIMIT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(variable_name, raising=False)


def test_settings_defaults() -> None:
    """Provide working defaults for a local run.

    Returns:
        None: Assertions validate defaults.

    Raises:
        AssertionError: Raised when defaults change unexpectedly.
    """

    settings = AppSettings()

    assert settings.environment_name == "development"
    assert settings.admin_api_token is None
    assert settings.opening_period_name == "Opening period"
    assert settings.reconciliation_tolerance == Decimal("0.01")
    assert settings.api_default_limit <= settings.api_max_limit
    assert settings.log_level == "INFO"


def test_settings_normalize_token_name_and_log_level() -> None:
    """Strip tokens and names and uppercase the log level.

    Returns:
        None: Assertions validate normalized values.

    Raises:
        AssertionError: Raised when normalization deviates.
    """

    blank_token = AppSettings(admin_api_token="   ")
    settings = AppSettings(admin_api_token=" secret ", opening_period_name=" Kickoff ", log_level=" debug ")

    assert blank_token.admin_api_token is None
    assert settings.admin_api_token == "secret"
    assert settings.opening_period_name == "Kickoff"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [
        {"log_level": "verbose"},
        {"opening_period_name": "   "},
        {"reconciliation_tolerance": "0"},
        {"api_default_limit": 10, "api_max_limit": 5},
        {"application_port": 0},
    ],
)
def test_settings_reject_invalid_values(overrides) -> None:
    """Reject values that would break ledger or API behavior.

    Returns:
        None: Assertions validate rejection.

    Raises:
        AssertionError: Raised when invalid values are accepted.
    """

    with pytest.raises(ValidationError):
        AppSettings(**overrides)


def test_config_load_settings_reads_environment(monkeypatch) -> None:
    """Read settings from environment variables.

    Returns:
        None: Assertions validate loaded values.

    Raises:
        AssertionError: Raised when environment values are ignored.
    """

    monkeypatch.setenv("ADMIN_API_TOKEN", "from-env")
    monkeypatch.setenv("RECONCILIATION_TOLERANCE", "0.05")

    settings = config_load_settings()

    assert settings.admin_api_token == "from-env"
    assert settings.reconciliation_tolerance == Decimal("0.05")


def test_config_load_settings_wraps_validation_errors(monkeypatch) -> None:
    """Raise SettingsLoadError with the underlying validation error chained.

    Returns:
        None: Assertions validate error type and cause.

    Raises:
        AssertionError: Raised when validation errors escape unwrapped.
    """

    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(SettingsLoadError) as error_info:
        config_load_settings()

    assert isinstance(error_info.value.__cause__, ValidationError)


def test_config_load_database_url_rejects_blank(monkeypatch) -> None:
    """Return the configured URL and refuse a blank one.

    Returns:
        None: Assertions validate both outcomes.

    Raises:
        AssertionError: Raised when a blank URL is accepted.
    """

    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://ledger@db/ledger")
    assert config_load_database_url() == "postgresql+psycopg://ledger@db/ledger"

    monkeypatch.setenv("DATABASE_URL", "  ")
    with pytest.raises(SettingsLoadError):
        config_load_database_url()
