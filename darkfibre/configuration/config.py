from __future__ import annotations

import os


def _as_bool(value: str | None, default: bool = False) -> bool:
    """Parse a truthy/falsey string into a boolean."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


class Settings:
    # Darkfibre API (read by the CLI only, the client takes explicit arguments)
    DARKFIBRE_BASE_URL: str = os.getenv("DARKFIBRE_BASE_URL", "https://api.darkfibre.dev/v1")
    DARKFIBRE_API_KEY: str = os.getenv("DARKFIBRE_API_KEY", "")
    DARKFIBRE_PRIVATE_KEY: str = os.getenv("DARKFIBRE_PRIVATE_KEY", "")
    DARKFIBRE_HTTP_TIMEOUT_SECONDS: float = float(os.getenv("DARKFIBRE_HTTP_TIMEOUT_SECONDS", "30"))

    # Debug / logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()
    LOG_LEVEL_DARKFIBRE: str = os.getenv("LOG_LEVEL_DARKFIBRE", "INFO").upper()
    LOG_LEVEL_LIB_HTTPX: str = os.getenv("LOG_LEVEL_LIB_HTTPX", "WARNING").upper()
    LOG_LEVEL_LIB_HTTPCORE: str = os.getenv("LOG_LEVEL_LIB_HTTPCORE", "WARNING").upper()
    NO_COLOR: bool = _as_bool(os.getenv("NO_COLOR"), False)


settings = Settings()
