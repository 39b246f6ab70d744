"""Connection settings for :class:`~sqla_resultset.connector.Connector`."""

from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from .exceptions import UsageError

DEFAULT_ENV_PREFIX = "RESULTSET_"


class ConnectorSettings(BaseSettings):
    """
    Immutable engine configuration.

    Values passed to the constructor win; anything not passed is read from
    ``RESULTSET_``-prefixed environment variables (``RESULTSET_URL``,
    ``RESULTSET_POOL_PRE_PING``, ...).

    Attributes:
        url: SQLAlchemy database URL, e.g. ``"postgresql+psycopg://db/app"``.
        user: Username overriding the one embedded in ``url``.
        password: Password overriding the one embedded in ``url``.
        echo: Log every statement through SQLAlchemy's own logger.
        pool_pre_ping: Test pooled connections before handing them out.
        pool_size: Pool size (``None`` keeps the dialect default).
        pool_recycle: Recycle connections older than this many seconds.
        connect_args: Extra DBAPI ``connect()`` keyword arguments.
    """

    model_config = SettingsConfigDict(
        env_prefix=DEFAULT_ENV_PREFIX,
        frozen=True,
        extra="ignore",
    )

    url: str
    user: str | None = None
    password: SecretStr | None = None
    echo: bool = False
    pool_pre_ping: bool = False
    pool_size: int | None = Field(default=None, ge=1)
    pool_recycle: int | None = None
    connect_args: dict[str, Any] = Field(default_factory=dict)

    def to_url(self) -> URL:
        """Return the effective URL with credentials applied."""
        url = make_url(self.url)
        if self.user is not None:
            url = url.set(username=self.user)
        if self.password is not None:
            url = url.set(password=self.password.get_secret_value())
        return url

    def engine_options(self) -> dict[str, Any]:
        """Keyword arguments for ``sqlalchemy.create_engine``."""
        options: dict[str, Any] = {
            "echo": self.echo,
            "pool_pre_ping": self.pool_pre_ping,
        }
        if self.pool_size is not None:
            options["pool_size"] = self.pool_size
        if self.pool_recycle is not None:
            options["pool_recycle"] = self.pool_recycle
        if self.connect_args:
            options["connect_args"] = dict(self.connect_args)
        return options

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_ENV_PREFIX) -> ConnectorSettings:
        """
        Load settings from ``{prefix}``-prefixed environment variables.

        Raises:
            UsageError: If ``{prefix}URL`` is not set.
            pydantic.ValidationError: If a variable holds an invalid value,
                e.g. ``{prefix}POOL_SIZE=abc``.
        """
        try:
            return cls(_env_prefix=prefix)
        except ValidationError as exc:
            if any(
                err["type"] == "missing" and err["loc"] == ("url",)
                for err in exc.errors()
            ):
                raise UsageError(
                    f"Environment variable {prefix}URL is not set"
                ) from exc
            raise
