"""
Provider Registry and Factory v1.0.0

- ProviderFactory creates provider instances based on ProviderTag
- Only returns providers that are enabled in settings and have credentials
"""
from typing import Dict, List, Optional, Type
import logging

import httpx

from shipgate.core.config import Settings
from shipgate.core.exceptions import UnknownProviderError
from shipgate.modules.shipping.normalize import ProviderTag

logger = logging.getLogger(__name__)

# Registry of provider implementations
_PROVIDER_REGISTRY: Dict[ProviderTag, Type["BaseRateProvider"]] = {}


def register_provider(provider_tag: ProviderTag):
    """
    Decorator to register a provider implementation.

    Usage:
        @register_provider(ProviderTag.EASYPOST)
        class EasyPostProvider(BaseRateProvider):
            ...
    """
    def decorator(cls):
        _PROVIDER_REGISTRY[provider_tag] = cls
        logger.debug(f"Registered provider: {provider_tag.value} -> {cls.__name__}")
        return cls
    return decorator


class ProviderFactory:
    """
    Factory for creating provider instances.

    Checks ENABLED_PROVIDERS and credentials before returning providers.
    """

    @classmethod
    def create(
        cls,
        provider_tag: ProviderTag,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "BaseRateProvider":
        """
        Instantiate a provider regardless of enablement.

        Raises:
            UnknownProviderError: no implementation registered for the tag
        """
        tag = ProviderTag.parse(provider_tag)
        provider_cls = _PROVIDER_REGISTRY.get(tag)
        if not provider_cls:
            raise UnknownProviderError(tag.value)
        return provider_cls(settings, http_client=http_client)

    @classmethod
    def get_provider(
        cls,
        provider_tag: ProviderTag,
        settings: Settings,
    ) -> Optional["BaseRateProvider"]:
        """
        Get a provider instance if enabled and configured.

        Returns:
            BaseRateProvider instance or None if disabled/unconfigured
        """
        tag = ProviderTag.parse(provider_tag)
        if tag.value not in settings.ENABLED_PROVIDERS:
            logger.debug(f"Provider {tag.value} is disabled")
            return None

        provider = cls.create(tag, settings)
        if not provider.is_configured():
            logger.warning(f"Provider {tag.value} is enabled but has no API key")
            return None
        return provider

    @classmethod
    def get_enabled_providers(cls, settings: Settings) -> List["BaseRateProvider"]:
        """Get all enabled and configured provider instances, in settings order."""
        providers = []
        for name in settings.ENABLED_PROVIDERS:
            try:
                tag = ProviderTag.parse(name)
            except UnknownProviderError:
                logger.warning(f"Ignoring unknown provider in ENABLED_PROVIDERS: {name}")
                continue
            provider = cls.get_provider(tag, settings)
            if provider:
                providers.append(provider)
        return providers

    @classmethod
    def get_registered_providers(cls) -> List[ProviderTag]:
        """Get list of all registered provider tags."""
        return list(_PROVIDER_REGISTRY.keys())


# Import providers to trigger registration
# These imports must be at the bottom to avoid circular imports
from shipgate.modules.shipping.providers.base import BaseRateProvider  # noqa: E402
from shipgate.modules.shipping.providers.easypost import EasyPostProvider  # noqa: E402, F401
from shipgate.modules.shipping.providers.veeqo import VeeqoProvider  # noqa: E402, F401
