"""Settings validation."""

import pytest
from pydantic import ValidationError

from app.core.config import Settings, get_settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.action_timeout_seconds == 30.0
    assert settings.onboarding_welcome_template == "member_welcome"
    assert settings.onboarding_auto_start is True
    assert settings.request_id_header == "X-Request-ID"


def test_cors_origins_split_and_trimmed() -> None:
    settings = Settings(allowed_origins=" https://a.org ,, https://b.org", _env_file=None)
    assert settings.cors_origins == ["https://a.org", "https://b.org"]


def test_secrets_are_not_echoed() -> None:
    settings = Settings(cron_secret="s3cret", _env_file=None)
    assert "s3cret" not in repr(settings)
    assert settings.cron_secret.get_secret_value() == "s3cret"


@pytest.mark.parametrize(
    "overrides",
    [
        {"action_timeout_seconds": 0},
        {"request_timeout_seconds": -1},
        {"database_url": "localhost:5432/guildhall"},
    ],
)
def test_invalid_values_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


def test_get_settings_is_cached(monkeypatch) -> None:
    get_settings.cache_clear()
    monkeypatch.setenv("ACTION_TIMEOUT_SECONDS", "12.5")
    try:
        assert get_settings() is get_settings()
        assert get_settings().action_timeout_seconds == 12.5
    finally:
        get_settings.cache_clear()
