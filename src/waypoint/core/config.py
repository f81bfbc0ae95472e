# src/waypoint/core/config.py
"""
Configuration schema and loading for waypoint.

Uses Pydantic for validation, PyYAML for the settings file and
pydantic-settings for WAYPOINT_* environment overrides.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from waypoint.redirect.policy import DEFAULT_MAX_REDIRECTS, RedirectPolicy, RedirectPredicate
from waypoint.redirect.predicates import all_of, deny_scheme_downgrade, same_host_only

# Matches ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

# Sections whose own keys are normalized to lowercase when loading YAML.
# Values nested deeper (e.g. http.headers) keep their original keys.
_SECTIONS = ("redirect", "http", "logging")


class RedirectSettings(BaseModel):
    """Redirect-following configuration.

    max_redirects is passed to the policy unvalidated: the policy clamps it
    (below 1 means 5, above 20 means 20), matching what callers get when
    they build a RedirectPolicy directly.

    Example YAML:
        redirect:
          max_redirects: 10
          allow_scheme_downgrade: false
          same_host_only: false
    """

    model_config = {"frozen": True}

    max_redirects: int = Field(
        default=DEFAULT_MAX_REDIRECTS,
        description="Maximum hops per call (clamped to 1..20)",
    )
    allow_scheme_downgrade: bool = Field(
        default=True,
        description="Follow redirects from https to http",
    )
    same_host_only: bool = Field(
        default=False,
        description="Only follow redirects that stay on the originating host and port",
    )

    def to_policy(self) -> RedirectPolicy:
        """Build the RedirectPolicy these settings describe."""
        predicates: list[RedirectPredicate] = []
        if not self.allow_scheme_downgrade:
            predicates.append(deny_scheme_downgrade)
        if self.same_host_only:
            predicates.append(same_host_only)

        should_redirect: RedirectPredicate | None
        if not predicates:
            should_redirect = None
        elif len(predicates) == 1:
            should_redirect = predicates[0]
        else:
            should_redirect = all_of(*predicates)

        return RedirectPolicy(should_redirect=should_redirect, max_redirects=self.max_redirects)


class HttpSettings(BaseModel):
    """Transport configuration."""

    model_config = {"frozen": True}

    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout")
    user_agent: str = Field(default="waypoint", min_length=1, description="User-Agent header value")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Default headers sent with every request",
    )

    def default_headers(self) -> dict[str, str]:
        """Headers for the transport, with User-Agent unless headers sets one."""
        if any(name.lower() == "user-agent" for name in self.headers):
            return dict(self.headers)
        return {"User-Agent": self.user_agent, **self.headers}


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")
    json_output: bool = Field(default=False, description="Emit JSON log lines instead of console output")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class WaypointSettings(BaseSettings):
    """Top-level waypoint configuration.

    All sections are optional; an empty settings file yields the defaults.
    WAYPOINT_* environment variables override whatever the file (or the
    constructor) supplies, e.g. WAYPOINT_REDIRECT__MAX_REDIRECTS=10.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="WAYPOINT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    redirect: RedirectSettings = Field(default_factory=RedirectSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats file contents passed in as init kwargs.
        # .env files are loaded by the CLI into the environment instead.
        return (env_settings, init_settings)


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def load_settings(config_path: Path) -> WaypointSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (WAYPOINT_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: WAYPOINT_REDIRECT__MAX_REDIRECTS for nested keys.
    String values in the file may reference ${VAR} or ${VAR:-default}.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated WaypointSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
        ValueError: If the file's top level is not a mapping
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        loaded = yaml.safe_load(f)

    # An empty file loads as None
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Settings file must contain a mapping at top level, got {type(loaded).__name__}")

    raw_config = {str(k).lower(): v for k, v in loaded.items()}
    for section in _SECTIONS:
        if isinstance(raw_config.get(section), dict):
            raw_config[section] = {str(k).lower(): v for k, v in raw_config[section].items()}

    raw_config = _expand_env_vars(raw_config)

    return WaypointSettings(**raw_config)
