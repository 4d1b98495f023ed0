"""Application configuration: env-driven bootstrap settings and the YAML config record."""

import re
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for db_source (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "sqlite://",
)

# Symmetric key length required by the token maker.
MIN_SYMMETRIC_KEY_LEN = 32

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


class ConfigError(Exception):
    """Raised when the configuration file cannot be loaded or selected."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def parse_duration(value: Any) -> Any:
    """
    Parse Go-style duration strings ("15m", "24h", "1h30m", "500ms").

    Anything that is not such a string is returned unchanged so pydantic can
    apply its own timedelta parsing (seconds, ISO 8601).
    """
    if not isinstance(value, str):
        return value
    text = value.strip().lower()
    if not text or _DURATION_PART.sub("", text):
        return value
    seconds = sum(
        float(amount) * _DURATION_UNITS[unit]
        for amount, unit in _DURATION_PART.findall(text)
    )
    return timedelta(seconds=seconds)


class Settings(BaseSettings):
    """Process bootstrap settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    POSADA_ENV: str = "development"
    POSADA_CONFIG_PATH: str = "app.yaml"
    LOG_LEVEL: str = "INFO"

    @field_validator("POSADA_ENV")
    @classmethod
    def validate_env(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("POSADA_ENV cannot be empty")
        return v.strip()


class Config(BaseModel):
    """The configuration record selected from app.yaml for one environment."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    db_driver: str = "postgres"
    db_source: str
    migration_url: str = "alembic"
    http_server_address: str = "0.0.0.0:8080"
    token_symmetric_key: str
    access_token_duration: timedelta = timedelta(minutes=15)
    refresh_token_duration: timedelta = timedelta(hours=24)
    default_role: str = "customer"
    authorization_header_key: str = "authorization"
    authorization_type_bearer: str = "bearer"
    authorization_payload_key: str = "authorization_payload"
    access_control_allow_origin: str = "*"
    access_control_allow_headers: str = "Content-Type, Authorization"
    access_control_allow_methods: str = "GET, POST, PUT, DELETE, OPTIONS"

    @field_validator("access_token_duration", "refresh_token_duration", mode="before")
    @classmethod
    def parse_go_duration(cls, v: Any) -> Any:
        return parse_duration(v)

    @field_validator("access_token_duration", "refresh_token_duration")
    @classmethod
    def validate_positive_duration(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("token durations must be positive")
        if v.microseconds:
            # Token timestamps only carry whole seconds.
            raise ValueError("token durations must be a whole number of seconds")
        return v

    @field_validator("db_source")
    @classmethod
    def validate_db_source(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("db_source must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "db_source must be a PostgreSQL or SQLite URL (e.g. postgresql://)"
            )
        v = v.strip()
        if v.startswith("postgres://"):
            # SQLAlchemy only registers the "postgresql" dialect name.
            v = "postgresql://" + v[len("postgres://"):]
        return v

    @field_validator("token_symmetric_key")
    @classmethod
    def validate_symmetric_key(cls, v: str) -> str:
        if len(v) < MIN_SYMMETRIC_KEY_LEN:
            raise ValueError(
                f"token_symmetric_key must be at least {MIN_SYMMETRIC_KEY_LEN} characters"
            )
        return v

    @field_validator("authorization_header_key", "authorization_type_bearer")
    @classmethod
    def lower_case(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("authorization header key and type must be non-empty")
        return v.strip().lower()

    @model_validator(mode="after")
    def validate_durations(self) -> "Config":
        if self.refresh_token_duration < self.access_token_duration:
            raise ValueError(
                "refresh_token_duration must not be shorter than access_token_duration"
            )
        return self

    @property
    def server_host(self) -> str:
        host, _, _ = self.http_server_address.rpartition(":")
        return host or "0.0.0.0"

    @property
    def server_port(self) -> int:
        _, _, port = self.http_server_address.rpartition(":")
        return int(port)


def load_config(path: str | Path, env: str) -> Config:
    """Read the YAML file at path and return the validated record for env."""
    if not env:
        raise ConfigError("the environment cannot be empty")
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot load config: {e}") from e
    try:
        document = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"unable to unmarshal YAML config: {e}") from e

    environments = document.get("config") if isinstance(document, dict) else None
    if not isinstance(environments, dict) or env not in environments:
        raise ConfigError(f"the environment does not exist: {env}")
    try:
        return Config.model_validate(environments[env])
    except ValidationError as e:
        raise ConfigError(f"invalid configuration for {env}: {e}") from e


@lru_cache
def get_settings() -> Settings:
    """Return cached bootstrap settings."""
    return Settings()


@lru_cache
def get_config() -> Config:
    """Load the config record selected by POSADA_ENV (cached for the process)."""
    settings = get_settings()
    return load_config(settings.POSADA_CONFIG_PATH, settings.POSADA_ENV)
