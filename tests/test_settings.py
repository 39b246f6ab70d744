"""Tests for ConnectorSettings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sqla_resultset import ConnectorSettings, UsageError


def test_to_url_applies_credentials():
    settings = ConnectorSettings(
        url="postgresql+psycopg://db.internal/app", user="app", password="s3cret"
    )
    url = settings.to_url()

    assert url.username == "app"
    assert url.password == "s3cret"
    assert url.database == "app"


def test_password_is_hidden():
    settings = ConnectorSettings(url="sqlite://", password="s3cret")
    assert "s3cret" not in repr(settings)


def test_engine_options_skip_unset_values():
    options = ConnectorSettings(url="sqlite://").engine_options()
    assert options == {"echo": False, "pool_pre_ping": False}


def test_engine_options_include_pool_settings():
    settings = ConnectorSettings(
        url="sqlite://",
        pool_pre_ping=True,
        pool_size=5,
        pool_recycle=3600,
        connect_args={"timeout": 10},
    )
    assert settings.engine_options() == {
        "echo": False,
        "pool_pre_ping": True,
        "pool_size": 5,
        "pool_recycle": 3600,
        "connect_args": {"timeout": 10},
    }


def test_settings_are_frozen():
    settings = ConnectorSettings(url="sqlite://")
    with pytest.raises(ValidationError):
        settings.echo = True  # type: ignore[misc]


def test_pool_size_must_be_positive():
    with pytest.raises(ValidationError):
        ConnectorSettings(url="sqlite://", pool_size=0)


def test_from_env(monkeypatch):
    monkeypatch.setenv("RESULTSET_URL", "mysql+pymysql://db/app")
    monkeypatch.setenv("RESULTSET_USER", "app")
    monkeypatch.setenv("RESULTSET_PASSWORD", "pw")
    monkeypatch.setenv("RESULTSET_POOL_PRE_PING", "yes")
    monkeypatch.setenv("RESULTSET_ECHO", "0")
    monkeypatch.setenv("RESULTSET_POOL_RECYCLE", "3600")

    settings = ConnectorSettings.from_env()

    assert settings.url == "mysql+pymysql://db/app"
    assert settings.user == "app"
    assert settings.password is not None
    assert settings.password.get_secret_value() == "pw"
    assert settings.pool_pre_ping is True
    assert settings.echo is False
    assert settings.pool_recycle == 3600
    assert settings.pool_size is None


def test_from_env_custom_prefix(monkeypatch):
    monkeypatch.setenv("APP_DB_URL", "sqlite://")
    assert ConnectorSettings.from_env("APP_DB_").url == "sqlite://"


def test_from_env_requires_url(monkeypatch):
    monkeypatch.delenv("RESULTSET_URL", raising=False)
    with pytest.raises(UsageError, match="RESULTSET_URL"):
        ConnectorSettings.from_env()


@pytest.mark.parametrize(
    ("variable", "value"),
    [
        ("RESULTSET_ECHO", "ture"),
        ("RESULTSET_POOL_SIZE", "abc"),
        ("RESULTSET_POOL_SIZE", "0"),
        ("RESULTSET_POOL_RECYCLE", "soon"),
    ],
)
def test_from_env_rejects_invalid_values(monkeypatch, variable: str, value: str):
    monkeypatch.setenv("RESULTSET_URL", "sqlite://")
    monkeypatch.setenv(variable, value)

    with pytest.raises(ValidationError):
        ConnectorSettings.from_env()


def test_constructor_values_win_over_environment(monkeypatch):
    monkeypatch.setenv("RESULTSET_URL", "sqlite:///from-env.db")
    monkeypatch.setenv("RESULTSET_ECHO", "true")

    settings = ConnectorSettings(url="sqlite://")

    assert settings.url == "sqlite://"
    assert settings.echo is True
