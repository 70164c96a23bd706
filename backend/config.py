"""Centralized configuration: all env vars in one place."""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_BITCOIN_API_URL = "https://api.api-ninjas.com/v1/bitcoin"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.port: int = int(os.getenv("PORT", "3000"))
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Upstream pricing API
        self.bitcoin_api_url: str = os.getenv("BITCOIN_API_URL", DEFAULT_BITCOIN_API_URL)
        self.bitcoin_api_key: str | None = os.getenv("BITCOIN_API_KEY")
        self.upstream_timeout_seconds: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

        # Cache
        self.bitcoin_cache_ttl_ms: int = int(os.getenv("BITCOIN_CACHE_TTL_MS", "10000"))
        self.bitcoin_single_flight: bool = _env_bool("BITCOIN_SINGLE_FLIGHT")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing env vars needed to reach the pricing API."""
        required = ["BITCOIN_API_KEY"]
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "BITCOIN_API_KEY": "bitcoin_api_key",
    }
    return mapping.get(env_var, env_var.lower())
