# settings.py

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load .env
load_dotenv()

BASE_URL = "https://api.themoviedb.org/3"
IMG_BASE = "https://image.tmdb.org/t/p/w500"
PLACEHOLDER_POSTER = "https://via.placeholder.com/300x450/667eea/ffffff?text=No+Image"
VERSION = "1.0.0"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class GatewaySettings:
    api_key: Optional[str] = None
    environment: str = "development"
    port: int = 3000
    base_url: str = BASE_URL
    timeout: float = 10.0
    max_attempts: int = 2
    base_delay: float = 0.5
    max_delay: float = 2.0
    rate_limit_max: int = 100
    rate_limit_window: float = 15 * 60

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        """
        Read gateway settings from the environment (.env already loaded).
        A missing TMDB_API_KEY is allowed: the routes answer 503 instead.
        """
        return cls(
            api_key=os.getenv("TMDB_API_KEY") or None,
            environment=os.getenv("APP_ENV", "development"),
            port=_env_int("PORT", 3000),
            base_url=os.getenv("TMDB_BASE_URL", BASE_URL),
            timeout=_env_float("UPSTREAM_TIMEOUT", 10.0),
            max_attempts=max(1, _env_int("RETRY_MAX_ATTEMPTS", 2)),
            base_delay=_env_float("RETRY_BASE_DELAY", 0.5),
            max_delay=_env_float("RETRY_MAX_DELAY", 2.0),
            rate_limit_max=_env_int("RATE_LIMIT_MAX", 100),
            rate_limit_window=_env_float("RATE_LIMIT_WINDOW", 15 * 60),
        )


@dataclass
class ClientSettings:
    gateway_url: str = "http://localhost:3000"
    # Direct upstream tier stays disabled unless a public key is set explicitly
    public_api_key: Optional[str] = None
    base_url: str = BASE_URL
    debounce_seconds: float = 0.3
    timeout: float = 10.0

    @property
    def direct_upstream_enabled(self) -> bool:
        return bool(self.public_api_key)

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            gateway_url=os.getenv("GATEWAY_URL", "http://localhost:3000").rstrip("/"),
            public_api_key=os.getenv("TMDB_PUBLIC_KEY") or None,
            base_url=os.getenv("TMDB_BASE_URL", BASE_URL),
            debounce_seconds=_env_float("DEBOUNCE_SECONDS", 0.3),
            timeout=_env_float("CLIENT_TIMEOUT", 10.0),
        )
