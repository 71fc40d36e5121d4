"""
Configuration settings for poststore.

Uses Pydantic Settings to load the database connection parameters and logging
options from environment variables (or a `.env` file). `ConnectionOptions` is the
immutable snapshot the store factory is built from; it can also be assembled
from any string-keyed mapping using the dotted `db.*` keys.
"""
from __future__ import annotations

import re
from datetime import timedelta
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from poststore.errors import ConfigurationError

# Dotted configuration keys -> ConnectionOptions fields.
CONFIG_KEYS: Dict[str, str] = {
    "db.host": "host",
    "db.username": "username",
    "db.password": "password",
    "db.database": "database",
    "db.max-idle-connections": "max_idle_connections",
    "db.max-open-connections": "max_open_connections",
    "db.max-connection-life-time": "max_connection_life_time",
    "db.log-level": "log_level",
    "db.connect-timeout": "connect_timeout",
}

_SECONDS = re.compile(r"\d+(?:\.\d+)?")
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Any) -> Any:
    """
    Accept Go-style duration strings ("10s", "1m30s", "250ms") and plain
    seconds given as text ("30", "1.5"), as environment values always are.

    Anything else is handed back untouched so pydantic can apply its own
    timedelta parsing (numbers, ISO 8601 strings).
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return text
    if _SECONDS.fullmatch(text):
        return timedelta(seconds=float(text))
    pos = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            return value
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        return value
    return timedelta(seconds=seconds)


def split_host(host: str) -> Tuple[str, Optional[int]]:
    """
    Split "host[:port]" into its parts.

    IPv6 literals carry a port only in brackets ("[::1]:5432"); a bare "::1"
    is a host without port.
    """
    if host.startswith("["):
        addr, sep, rest = host[1:].partition("]")
        if not sep or (rest and not rest.startswith(":")):
            raise ValueError(f"malformed bracketed host {host!r}")
        port = rest[1:]
    elif host.count(":") == 1:
        addr, _, port = host.partition(":")
    else:
        return host, None
    if not port:
        return addr, None
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"invalid port {port!r} in host {host!r}")
    return addr, int(port)


class Settings(BaseSettings):
    # Database
    db_host: str = Field("127.0.0.1:5432", alias="DB_HOST")
    db_username: str = Field("postgres", alias="DB_USERNAME")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_database: str = Field("poststore", alias="DB_DATABASE")
    db_max_idle_connections: int = Field(10, alias="DB_MAX_IDLE_CONNECTIONS")
    db_max_open_connections: int = Field(100, alias="DB_MAX_OPEN_CONNECTIONS")
    db_max_connection_life_time: timedelta = Field(
        timedelta(seconds=10), alias="DB_MAX_CONNECTION_LIFE_TIME"
    )
    db_log_level: int = Field(1, alias="DB_LOG_LEVEL")
    db_connect_timeout: timedelta = Field(timedelta(seconds=10), alias="DB_CONNECT_TIMEOUT")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("db_max_connection_life_time", "db_connect_timeout", mode="before")
    @classmethod
    def _parse_durations(cls, value: Any) -> Any:
        return parse_duration(value)


class ConnectionOptions(BaseModel):
    """
    Immutable snapshot of everything needed to open the connection pool.

    `log_level` follows the ORM-style scale: 1 silent, 2 error, 3 warn, 4 info.
    """

    host: str = "127.0.0.1:5432"
    username: str = "postgres"
    password: str = Field("postgres", repr=False)
    database: str = "poststore"
    max_idle_connections: int = Field(10, ge=0)
    max_open_connections: int = Field(100, ge=1)
    max_connection_life_time: timedelta = timedelta(seconds=10)
    log_level: int = Field(1, ge=1, le=4)
    connect_timeout: timedelta = timedelta(seconds=10)

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @field_validator("max_connection_life_time", "connect_timeout", mode="before")
    @classmethod
    def _parse_durations(cls, value: Any) -> Any:
        return parse_duration(value)

    @field_validator("host", "database")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @model_validator(mode="after")
    def _check_limits(self) -> "ConnectionOptions":
        if self.max_idle_connections > self.max_open_connections:
            raise ValueError(
                "max_idle_connections must not exceed max_open_connections"
            )
        if self.max_connection_life_time <= timedelta(0):
            raise ValueError("max_connection_life_time must be positive")
        if self.connect_timeout <= timedelta(0):
            raise ValueError("connect_timeout must be positive")
        return self

    @field_validator("host")
    @classmethod
    def _valid_port(cls, value: str) -> str:
        split_host(value)
        return value

    @property
    def hostname(self) -> str:
        return split_host(self.host)[0]

    @property
    def port(self) -> int | None:
        return split_host(self.host)[1]

    def describe(self) -> Dict[str, Any]:
        """Option values safe to log or show (password masked)."""
        values = self.model_dump()
        values["password"] = "******" if self.password else ""
        return values

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ConnectionOptions":
        """
        Build options from a string-keyed config lookup using the `db.*` keys.

        Unknown keys are ignored; missing keys fall back to the defaults.
        """
        fields = {CONFIG_KEYS[key]: value for key, value in values.items() if key in CONFIG_KEYS}
        return _build(fields)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionOptions":
        return _build(
            {
                "host": settings.db_host,
                "username": settings.db_username,
                "password": settings.db_password,
                "database": settings.db_database,
                "max_idle_connections": settings.db_max_idle_connections,
                "max_open_connections": settings.db_max_open_connections,
                "max_connection_life_time": settings.db_max_connection_life_time,
                "log_level": settings.db_log_level,
                "connect_timeout": settings.db_connect_timeout,
            }
        )


def _build(fields: Dict[str, Any]) -> ConnectionOptions:
    try:
        return ConnectionOptions(**fields)
    except ValidationError as exc:
        shown = dict(fields)
        if "password" in shown:
            shown["password"] = "******"
        raise ConfigurationError(
            f"invalid database options {shown}: {exc.error_count()} error(s)", options=shown
        ) from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


def load_connection_options() -> ConnectionOptions:
    """Read ConnectionOptions from the process configuration."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        shown = _rejected_values(exc)
        raise ConfigurationError(
            f"invalid database settings in environment {shown}: {exc.error_count()} error(s)",
            options=shown,
        ) from exc
    return ConnectionOptions.from_settings(settings)


def _rejected_values(exc: ValidationError) -> Dict[str, Any]:
    """Map each rejected setting to its input value, password masked."""
    shown: Dict[str, Any] = {}
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"]) or "settings"
        shown[name] = "******" if "password" in name.lower() else error.get("input")
    return shown


__all__ = [
    "CONFIG_KEYS",
    "ConnectionOptions",
    "Settings",
    "get_settings",
    "load_connection_options",
    "parse_duration",
]
