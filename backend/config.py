"""
Configuration management for the checkout payment backend.

Loads settings from .env via pydantic-settings.

Notes:
    - The Midtrans server key signs webhook notifications and authenticates
      token requests; it never leaves the server.
    - validate_production_settings() enforces live keys and strict CORS in
      production.
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List

from domain.constants import (
    DEFAULT_PACKAGE_PRICES,
    SNAP_JS_PRODUCTION_URL,
    SNAP_JS_SANDBOX_URL,
    SNAP_PRODUCTION_BASE_URL,
    SNAP_SANDBOX_BASE_URL,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Midtrans Snap ───────────────────────────────────────────────
    midtrans_is_production: bool = False
    midtrans_server_key: str = ""
    midtrans_client_key: str = ""
    gateway_timeout_seconds: float = 10.0

    # ── Price Catalog ───────────────────────────────────────────────
    # Env override must be a JSON object, e.g. PACKAGE_PRICES='{"Basic": 50000}'
    package_prices: Dict[str, int] = dict(DEFAULT_PACKAGE_PRICES)

    # ── Orders ──────────────────────────────────────────────────────
    order_id_strategy: str = "timestamp"  # "timestamp" | "secure"
    enforce_terminal_states: bool = False

    # ── Rate Limiting ───────────────────────────────────────────────
    token_rate_limit: int = 10
    token_rate_window_seconds: int = 60

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    port: int = 4000

    # ── CORS ────────────────────────────────────────────────────────
    # Empty disables CORS (frontend served from the same origin).
    cors_origins: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def snap_base_url(self) -> str:
        """Snap API host for the configured gateway mode."""
        if self.midtrans_is_production:
            return SNAP_PRODUCTION_BASE_URL
        return SNAP_SANDBOX_BASE_URL

    @property
    def snap_js_url(self) -> str:
        """snap.js location the checkout page should load."""
        if self.midtrans_is_production:
            return SNAP_JS_PRODUCTION_URL
        return SNAP_JS_SANDBOX_URL

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. Outside production, missing keys are
        only reported as warnings so the service can still boot for local
        work on the page.
        """
        if self.environment == "production":
            if not self.midtrans_server_key:
                raise ValueError(
                    "MIDTRANS_SERVER_KEY must be set in production. "
                    "It authenticates token requests and verifies webhooks."
                )
            if not self.midtrans_client_key:
                raise ValueError(
                    "MIDTRANS_CLIENT_KEY must be set in production. "
                    "The checkout page needs it to load snap.js."
                )
            if not self.midtrans_is_production:
                raise ValueError(
                    "MIDTRANS_IS_PRODUCTION must be true in production. "
                    "Sandbox tokens cannot collect real payments."
                )
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            logger.info("✅ Production settings validated")
        else:
            warnings = []
            if not self.midtrans_server_key:
                warnings.append("MIDTRANS_SERVER_KEY is missing (token + webhook endpoints will fail)")
            if not self.midtrans_client_key:
                warnings.append("MIDTRANS_CLIENT_KEY is missing (snap.js cannot be loaded)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
