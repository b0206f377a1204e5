"""
Application configuration

SECURITY: Defaults are fail-safe for production.
- DEBUG defaults to False
- Provider API keys have empty defaults (provider is skipped when unset)
- Runtime validation catches insecure configurations
"""
import json
import os
import logging
from typing import Dict, List, Union
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Default CORS origins (dashboard dev servers)
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

DEFAULT_PROVIDERS = ["easypost", "veeqo"]


def _parse_list(v, default: List[str]) -> List[str]:
    """Accept a JSON array or a comma-separated string."""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if not v or v.strip() == "":
            return list(default)
        if v.startswith("["):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App - defaults are PRODUCTION safe
    APP_NAME: str = "ShipGate"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON array or comma-separated string
    CORS_ORIGINS: Union[str, List[str]] = DEFAULT_CORS_ORIGINS

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        return _parse_list(v, DEFAULT_CORS_ORIGINS)

    # EasyPost (multi-carrier rate API)
    EASYPOST_API_KEY: str = ""
    EASYPOST_API_BASE: str = "https://api.easypost.com/v2"

    # Veeqo (order platform delivery quotes)
    VEEQO_API_KEY: str = ""
    VEEQO_API_BASE: str = "https://api.veeqo.com"

    # Providers queried for rates, in merge order
    ENABLED_PROVIDERS: Union[str, List[str]] = DEFAULT_PROVIDERS

    @field_validator("ENABLED_PROVIDERS", mode="before")
    @classmethod
    def parse_enabled_providers(cls, v):
        return [p.lower() for p in _parse_list(v, DEFAULT_PROVIDERS)]

    # Per-provider budget for a rate fetch
    PROVIDER_TIMEOUT_SECONDS: float = 15.0

    # Order history (append-only audit of rate fetches and purchases)
    HISTORY_ENABLED: bool = True
    HISTORY_DATABASE_URL: str = "sqlite+aiosqlite:///./data/orders.db"

    # Extra canonicalizer entries seeded at startup
    # EXTRA_CARRIER_MAPPINGS: {"Parcelforce": "Parcelforce Worldwide"}
    # EXTRA_SERVICE_MAPPINGS: {"UPS:Saver": "UPS Worldwide Saver"}
    EXTRA_CARRIER_MAPPINGS: Dict[str, str] = {}
    EXTRA_SERVICE_MAPPINGS: Dict[str, str] = {}

    @model_validator(mode="after")
    def validate_production_config(self):
        """Runtime validation to catch insecure production configurations."""
        if self.ENVIRONMENT == "production":
            errors = []

            if self.DEBUG:
                errors.append(
                    "DEBUG=True is forbidden in production. "
                    "Set DEBUG=false or ENVIRONMENT=development"
                )

            for origin in self.CORS_ORIGINS:
                if origin == "*":
                    errors.append("Wildcard '*' CORS origin is forbidden in production")

            if errors:
                raise ValueError(
                    "PRODUCTION SECURITY VIOLATIONS:\n" + "\n".join(f"  - {e}" for e in errors)
                )

        return self


# Try to load settings, provide helpful error on failure
try:
    settings = Settings()
except Exception:
    if os.getenv("ENVIRONMENT", "development") == "development":
        logger.warning(
            "Settings validation failed, using development defaults. "
            "Check your .env file."
        )
        os.environ["ENVIRONMENT"] = "development"
        settings = Settings(DEBUG=False)
    else:
        raise
