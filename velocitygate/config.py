import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, TypeAdapter, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from velocitygate.lib.sliding_window import DEFAULT_SHARDS, IDLE_THRESHOLD_SECONDS, WINDOW_SECONDS
from velocitygate.lib.reaper import SWEEP_INTERVAL_SECONDS

# Load .env file early so env vars are available for YAML interpolation
load_dotenv(Path.cwd() / ".env")

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

_config_path_override: Path | None = None


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def set_config_path(path: Path | None) -> None:
    """Force a specific config file, e.g. from the CLI -f option."""
    global _config_path_override
    _config_path_override = Path(path) if path is not None else None


def get_config_path() -> Path:
    """Resolve the config file: override first, then app.<VELOCITYGATE_ENV>.yaml."""
    if _config_path_override is not None:
        return _config_path_override
    env = os.environ.get("VELOCITYGATE_ENV", "").strip().lower()
    if env and env != "production":
        return Path.cwd() / f"app.{env}.yaml"
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse the YAML config with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class VelocityGateConfig(BaseModel):
    """Bot bouncer configuration.

    The signature list and velocity threshold are fixed; only the on/off
    switch and memory housekeeping can be tuned.
    """

    enabled: bool = True
    idle_threshold_seconds: float = IDLE_THRESHOLD_SECONDS
    sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS
    shards: int = DEFAULT_SHARDS

    @field_validator("sweep_interval_seconds")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("sweep_interval_seconds must be positive")
        return value

    @field_validator("shards")
    @classmethod
    def _positive_shards(cls, value: int) -> int:
        if value < 1:
            raise ValueError("shards must be at least 1")
        return value

    @model_validator(mode="after")
    def _idle_exceeds_window(self) -> "VelocityGateConfig":
        if self.idle_threshold_seconds <= WINDOW_SECONDS:
            raise ValueError(
                f"idle_threshold_seconds must be greater than the {WINDOW_SECONDS}s counting window"
            )
        return self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    debug: bool = False

    # Bot bouncer config (loaded from app.yaml or VELOCITYGATE__* env vars)
    velocitygate: VelocityGateConfig = VelocityGateConfig()


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and the YAML config file."""
    # First create base settings from .env
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    # Merge YAML config with settings
    updates = {}

    if "debug" in app_config:
        updates["debug"] = TypeAdapter(bool).validate_python(app_config["debug"])

    if "velocitygate" in app_config:
        merged = base_settings.velocitygate.model_dump()
        merged.update(app_config["velocitygate"] or {})
        updates["velocitygate"] = VelocityGateConfig(**merged)

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings


def clear_settings_cache() -> None:
    get_settings.cache_clear()
