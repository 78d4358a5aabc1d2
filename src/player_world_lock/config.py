"""Configuration for player world locks.

World configuration lives in ``player_world_lock.json`` in the world directory.
Host-level settings (where the world and shared lock directory are) come
from environment variables or a ``.env`` file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .identifiers import SAFE_CHARSET_DISPLAY, is_safe_identifier

CONFIG_FILENAME = "player_world_lock.json"


class WorldLockConfig(BaseModel):
    """Immutable world settings read once at startup."""

    model_config = ConfigDict(frozen=True)

    instance_name: str = Field(..., description="Name of this server instance.")
    lock_provider: str = Field(..., min_length=1, description="Registered backend to use.")
    is_lock_master: Optional[StrictBool] = Field(
        False,
        description=(
            "Claim unclaimed players for this instance. The files backends cannot "
            "arbitrate races, so set this on one server in the group only."
        ),
    )
    friendly_names: Dict[str, str] = Field(
        default_factory=dict,
        description="Optional instance name -> description shown to redirected players.",
    )

    @field_validator("is_lock_master")
    @classmethod
    def _absent_lock_master_is_false(cls, value: Optional[bool]) -> bool:
        # JSON null means the key was left unset.
        return bool(value)

    @field_validator("instance_name")
    @classmethod
    def _instance_name_is_safe(cls, value: str) -> str:
        if not value or not is_safe_identifier(value):
            raise ValueError(
                "current instance name was not safe. use URL-encoding base64 chars only, "
                f"e.g. the characters {SAFE_CHARSET_DISPLAY}"
            )
        return value


class HostSettings(BaseSettings):
    """Host settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PLAYER_WORLD_LOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    world_path: Path = Field(Path("."), description="World directory holding the JSON config.")
    lockdir: Optional[str] = Field(
        None, description="Shared lock directory used by the files backend."
    )
    service_url: Optional[str] = Field(
        None, description="Base URL of the lock service used by the http backend."
    )
    http_timeout: float = Field(10.0, description="Request timeout for the http backend.")
    log_level: str = Field("INFO", description="Logging level for the CLI.")

    def config_path(self) -> Path:
        return Path(self.world_path) / CONFIG_FILENAME


def get_host_settings() -> HostSettings:
    """Return host settings read from the current environment."""
    return HostSettings()


def format_errors(exc: ValidationError) -> str:
    """Turn pydantic errors into a concise human-readable string."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(piece) for piece in err["loc"]) or "<root>"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def load_config(path: Path | str) -> WorldLockConfig:
    """Read and validate the world config file; every failure is a ConfigurationError."""
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"could not read {config_path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{config_path} contained invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{config_path} expected a JSON object, got {type(data).__name__}"
        )

    try:
        return WorldLockConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid settings in {config_path}: {format_errors(exc)}") from exc
