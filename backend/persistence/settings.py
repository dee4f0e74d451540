"""Database connection settings loaded from the environment."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Self

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from persistence.errors import ConfigurationError


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DB_", frozen=True, extra="ignore")

    driver: Literal["sqlite", "mysql"] = "sqlite"

    # Used as an identifier in CREATE DATABASE, so it is never a bound parameter.
    name: str = Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_]+$")

    host: str = "localhost"
    port: int = Field(default=3306, ge=1, le=65535)
    user: str = ""
    password: str = Field(default="", repr=False)

    # sqlite only: directory holding <name>.db
    data_dir: str = "backend/data"

    connect_timeout: int = Field(default=10, gt=0)

    @model_validator(mode="after")
    def _validate_server_credentials(self) -> Self:
        if self.driver == "mysql" and not self.user:
            raise ValueError("DB_USER is required for the mysql driver")
        return self

    @property
    def sqlite_path(self) -> Path:
        return Path(self.data_dir) / f"{self.name}.db"


def load_settings(env_file: str | Path | None = None) -> DatabaseSettings:
    """Read settings once at process start.

    Missing or unparsable keys raise ConfigurationError; nothing else in the
    persistence layer can work without them, so callers should abort startup.
    """
    if env_file is not None and not Path(env_file).is_file():
        raise ConfigurationError(f"Settings file not found: {env_file}")
    try:
        if env_file is None:
            return DatabaseSettings()  # type: ignore[call-arg]
        return DatabaseSettings(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "settings" for err in exc.errors())
        raise ConfigurationError(f"Unable to load database settings ({fields}): {exc}") from exc
