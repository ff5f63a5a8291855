"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Command-line flags      (passed as constructor args by yavs.cli)
  2. Environment variables   (YAVS__FEED__REFRESH_INTERVAL=5m)
  3. yavs.yaml               (searched in cwd, then ~/.config/yavs/)
  4. Hardcoded defaults

The config file is optional. The feed URL has no default and must come
from one of the layers above.
"""

from __future__ import annotations

import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_go_duration(value: str) -> timedelta | None:
    """Parse a Go-style duration such as ``1h30m`` or ``250ms``.

    Returns ``None`` when *value* is not in that format so pydantic can
    try its own timedelta formats (ISO 8601, plain seconds).
    """
    text = value.strip()
    sign = 1.0
    if text[:1] in ("-", "+"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if not text:
        return None
    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            return None
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        return None
    return timedelta(seconds=sign * total)


def _find_config_file() -> str | None:
    """Return the path of the first yavs.yaml found, or None."""
    candidates = [
        Path("yavs.yaml"),
        Path.home() / ".config" / "yavs" / "yavs.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "localhost"
    port: int = 8080


class FeedSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str = ""
    # Zero or negative disables the periodic refresh.
    refresh_interval: timedelta = timedelta(0)
    # Empty disables the on-demand refresh endpoint. Shadows a package of the same name.
    refresh_path: str = "/refresh"

    @field_validator("refresh_interval", mode="before")
    @classmethod
    def parse_refresh_interval(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return float(v)  # plain seconds, e.g. "0" from the command line
            except ValueError:
                pass
            parsed = parse_go_duration(v)
            if parsed is not None:
                return parsed
        return v

    @field_validator("refresh_path")
    @classmethod
    def validate_refresh_path(cls, v: str) -> str:
        v = v.strip()
        if v and not v.startswith("/"):
            raise ValueError(f"refresh_path must start with '/': {v!r}")
        return v

    @property
    def refresh_seconds(self) -> float:
        return self.refresh_interval.total_seconds()


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = 30.0
    max_redirects: int = 5


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Merges holding the write lock longer than this are logged as warnings.
    lock_hold_warning_ms: float = 250.0


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: YAVS__SERVER__PORT=9090
        env_prefix="YAVS__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    # Label shown in usage text and startup logs only.
    domain: str = ""
    server: ServerSettings = ServerSettings()
    feed: FeedSettings = FeedSettings()
    fetcher: FetcherSettings = FetcherSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # CLI flags (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
