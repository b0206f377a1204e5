"""
API dependencies

Shared service instances live on app.state. They are created in the app
lifespan, or lazily on first use when the lifespan did not run.
"""
import logging

from fastapi import Request

from shipgate.core.config import Settings, settings
from shipgate.core.database import AsyncSessionLocal
from shipgate.modules.shipping.mapping import Canonicalizer
from shipgate.modules.shipping.normalize import RateNormalizer
from shipgate.modules.shipping.providers import ProviderFactory
from shipgate.services.history_service import HistoryService
from shipgate.services.rate_service import RateService

logger = logging.getLogger(__name__)


def build_canonicalizer(config: Settings = settings) -> Canonicalizer:
    """Default tables plus any EXTRA_*_MAPPINGS from settings."""
    canonicalizer = Canonicalizer.with_defaults()
    canonicalizer.register_many(config.EXTRA_CARRIER_MAPPINGS, config.EXTRA_SERVICE_MAPPINGS)
    return canonicalizer


def build_rate_service(canonicalizer: Canonicalizer, config: Settings = settings) -> RateService:
    providers = ProviderFactory.get_enabled_providers(config)
    logger.info(f"Active rate providers: {[p.provider_tag.value for p in providers]}")
    return RateService(
        providers,
        RateNormalizer(canonicalizer),
        timeout_seconds=config.PROVIDER_TIMEOUT_SECONDS,
    )


def build_history_service(config: Settings = settings) -> HistoryService:
    return HistoryService(AsyncSessionLocal, enabled=config.HISTORY_ENABLED)


def get_canonicalizer(request: Request) -> Canonicalizer:
    state = request.app.state
    if getattr(state, "canonicalizer", None) is None:
        state.canonicalizer = build_canonicalizer()
    return state.canonicalizer


def get_rate_service(request: Request) -> RateService:
    state = request.app.state
    if getattr(state, "rate_service", None) is None:
        state.rate_service = build_rate_service(get_canonicalizer(request))
    return state.rate_service


def get_history_service(request: Request) -> HistoryService:
    state = request.app.state
    if getattr(state, "history_service", None) is None:
        state.history_service = build_history_service()
    return state.history_service
