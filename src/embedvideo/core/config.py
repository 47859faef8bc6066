"""Application configuration utilities.

This module defines settings loaded from environment variables and the
immutable width-limit snapshot handed to the parameter validator.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

WIDTH_FLOOR: int = 100
WIDTH_CEILING: int = 1024
FALLBACK_DEFAULT_WIDTH: int = 425


class Settings(BaseSettings):
    """Typed application settings loaded from the environment.

    Notes
    -----
    - Environment variables are read with the ``EV_`` prefix (e.g., ``EV_MAX_WIDTH``).
    - ``min_width`` and ``max_width`` are advisory; they are clamped into a hard
      envelope by ``EmbedLimits.from_settings``.
    - ``enabled_services`` restricts the registry; ``None`` enables every service.
    """

    model_config = SettingsConfigDict(env_prefix="EV_", env_file=".env", extra="ignore")

    app_name: str = Field(default="EmbedVideo", description="Application display name")
    debug: bool = Field(default=False, description="Enable debug mode")

    min_width: Optional[int] = Field(default=WIDTH_FLOOR, description="Minimum embed width")
    max_width: Optional[int] = Field(default=960, description="Maximum embed width")
    default_width: int = Field(
        default=FALLBACK_DEFAULT_WIDTH,
        description="Width used when neither the request nor the service provides one",
    )

    ffprobe_location: Path = Field(
        default=Path("/usr/bin/ffprobe"),
        description="Location of the ffprobe executable",
    )
    enabled_services: Optional[list[str]] = Field(
        default=None,
        description="Allowlist of service names; all built-in services when unset",
    )

    server: str = Field(
        default="http://localhost",
        description="Public server name, embedded in the outbound user agent",
    )
    script_path: str = Field(default="", description="Script root substituted into extern clauses")
    media_base_dir: Path = Field(
        default=Path.home() / "Videos",
        description="Base directory under which local media files may be probed",
    )

    http_timeout: float = Field(default=10.0, description="Connect and overall HTTP timeout in seconds")
    max_redirects: int = Field(default=10, description="Maximum redirects followed per request")


@dataclass(frozen=True)
class EmbedLimits:
    """Width bounds and defaults resolved once at startup.

    Notes
    -----
    - Misconfigured bounds are overridden: the minimum never drops below
      ``WIDTH_FLOOR`` and the maximum never exceeds ``WIDTH_CEILING``.
    """

    min_width: int = WIDTH_FLOOR
    max_width: int = WIDTH_CEILING
    default_width: int = FALLBACK_DEFAULT_WIDTH

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmbedLimits":
        """Build a clamped snapshot from the advisory settings values."""

        min_width: int = WIDTH_FLOOR
        if settings.min_width is not None and settings.min_width >= WIDTH_FLOOR:
            min_width = settings.min_width
        max_width: int = WIDTH_CEILING
        if settings.max_width is not None and settings.max_width <= WIDTH_CEILING:
            max_width = settings.max_width
        default_width: int = settings.default_width if settings.default_width > 0 else FALLBACK_DEFAULT_WIDTH
        return cls(min_width=min_width, max_width=max_width, default_width=default_width)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache application settings.

    Notes
    -----
    - Cached with ``functools.lru_cache(maxsize=1)`` to provide a single settings instance
      across the process. Subsequent calls return the same object.

    Returns
    -------
    Settings
        The application settings instance.
    """

    return Settings()
