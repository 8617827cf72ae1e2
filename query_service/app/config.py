"""
Gateway settings, read from the environment.

| Variable                  | Default                 |
|---------------------------|-------------------------|
| QUERY_BACKENDS            | http://127.0.0.1:6071   |
| BACKEND_TIMEOUT_SECONDS   | 5.0                     |
| FANOUT_MAX_WORKERS        | 8                       |
| ALIVE_THRESHOLD_SECONDS   | 120                     |
| CORS_ALLOW_ORIGINS        | *                       |
| HTTP_HOST / HTTP_PORT     | 0.0.0.0 / 9966          |
"""

import logging
import os

from pydantic import BaseModel, Field

logger = logging.getLogger("config")

VERSION = "1.4.0"

# Environment variable -> Settings field
_ENV_FIELDS = {
    "QUERY_BACKENDS": "backends",
    "BACKEND_TIMEOUT_SECONDS": "backend_timeout",
    "FANOUT_MAX_WORKERS": "fanout_max_workers",
    "ALIVE_THRESHOLD_SECONDS": "alive_threshold_seconds",
    "CORS_ALLOW_ORIGINS": "cors_allow_origins",
    "HTTP_HOST": "http_host",
    "HTTP_PORT": "http_port",
}

_LIST_FIELDS = ("backends", "cors_allow_origins")


def _split(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    backends: list[str] = Field(default_factory=lambda: ["http://127.0.0.1:6071"], min_length=1)
    backend_timeout: float = Field(default=5.0, gt=0)
    fanout_max_workers: int = Field(default=8, ge=1)
    alive_threshold_seconds: int = Field(default=120, ge=0)
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    http_host: str = "0.0.0.0"
    http_port: int = Field(default=9966, gt=0, le=65535)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from *environ* (defaults to ``os.environ``).

        Unset or empty variables keep the field default; pydantic coerces
        and validates the rest.

        Raises:
            pydantic.ValidationError: a variable is malformed or out of range.
        """
        env = os.environ if environ is None else environ
        data = {}
        for var, name in _ENV_FIELDS.items():
            raw = env.get(var)
            if raw:
                data[name] = _split(raw) if name in _LIST_FIELDS else raw
        return cls(**data)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info(
            "Settings loaded: %d backend(s), fan-out %d, alive threshold %ds",
            len(_settings.backends),
            _settings.fanout_max_workers,
            _settings.alive_threshold_seconds,
        )
    return _settings
