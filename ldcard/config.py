import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number of seconds, got {raw!r}.")


def _log_level_from_env(name: str, default: str) -> str:
    level = os.getenv(name, default).strip().upper() or default
    if not isinstance(logging.getLevelName(level), int):
        raise RuntimeError(f"{name} must be a logging level name, got {level!r}.")
    return level


@dataclass(frozen=True)
class Settings:
    """Runtime configuration loaded from environment variables."""

    # Bluesky public AppView base, used for profile (avatar) lookups
    bluesky_appview_base: str = "https://public.api.bsky.app"
    http_timeout: float = 15.0

    # Card rendering
    container_id: str = "card"

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Optional overrides:
        - BLUESKY_APPVIEW_BASE
        - LDCARD_HTTP_TIMEOUT
        - LDCARD_CONTAINER_ID
        - LDCARD_LOG_LEVEL
        """

        return cls(
            bluesky_appview_base=os.getenv(
                "BLUESKY_APPVIEW_BASE", "https://public.api.bsky.app"
            ).rstrip("/"),
            http_timeout=_float_from_env("LDCARD_HTTP_TIMEOUT", 15.0),
            container_id=os.getenv("LDCARD_CONTAINER_ID", "card"),
            log_level=_log_level_from_env("LDCARD_LOG_LEVEL", "WARNING"),
        )
