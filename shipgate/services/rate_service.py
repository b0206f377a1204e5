"""
Rate Aggregation Service v1.0.0

- Fetches raw rates from every enabled provider concurrently
- A failing or slow provider contributes no rates plus a recorded error
- Normalizes each record, then filters/orders with the caller's policy
- Dispatches label purchases to the provider that quoted the rate

Usage:
    service = RateService(providers, RateNormalizer(canonicalizer))
    result = await service.get_rates(shipment, PolicySpec(max_price=8))
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from shipgate.core.exceptions import (
    ProviderError,
    ShippingLabelError,
    UnknownProviderError,
)
from shipgate.modules.shipping.normalize import CanonicalRate, ProviderTag, RateNormalizer
from shipgate.modules.shipping.policy import PolicySpec, rank_rates
from shipgate.modules.shipping.providers.base import (
    BaseRateProvider,
    LabelPurchase,
    ProviderQuote,
    PurchaseRequest,
    ShipmentInput,
)

logger = logging.getLogger(__name__)


@dataclass
class ProviderFailure:
    """A provider that contributed no rates to this request."""
    provider: ProviderTag
    message: str
    code: str = "PROVIDER_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider.value, "message": self.message, "code": self.code}


@dataclass
class RateResult:
    """Merged, normalized, policy-ordered rates plus per-provider failures."""
    rates: List[CanonicalRate] = field(default_factory=list)
    errors: List[ProviderFailure] = field(default_factory=list)


class RateService:
    """Multi-provider rate aggregation and label purchase."""

    def __init__(
        self,
        providers: Sequence[BaseRateProvider],
        normalizer: RateNormalizer,
        timeout_seconds: Optional[float] = None,
    ):
        self._providers: Dict[ProviderTag, BaseRateProvider] = {p.provider_tag: p for p in providers}
        self.normalizer = normalizer
        self.timeout_seconds = timeout_seconds

    @property
    def providers(self) -> List[ProviderTag]:
        return list(self._providers)

    def get_provider(self, provider: Any) -> BaseRateProvider:
        """
        Resolve an active provider.

        Raises:
            UnknownProviderError: tag is unknown or the provider is not active
        """
        tag = ProviderTag.parse(provider)
        instance = self._providers.get(tag)
        if instance is None:
            raise UnknownProviderError(tag.value)
        return instance

    async def _fetch(self, provider: BaseRateProvider, shipment: ShipmentInput) -> ProviderQuote:
        if self.timeout_seconds:
            return await asyncio.wait_for(provider.get_rates(shipment), timeout=self.timeout_seconds)
        return await provider.get_rates(shipment)

    async def fetch_quotes(self, shipment: ShipmentInput):
        """
        Query every provider concurrently.

        Returns:
            (quotes, failures) - quotes in provider registration order
        """
        providers = list(self._providers.values())
        results = await asyncio.gather(
            *(self._fetch(p, shipment) for p in providers),
            return_exceptions=True,
        )

        quotes: List[ProviderQuote] = []
        failures: List[ProviderFailure] = []
        for provider, result in zip(providers, results):
            tag = provider.provider_tag
            if isinstance(result, asyncio.TimeoutError):
                logger.error(f"Rate fetch from {tag.value} timed out after {self.timeout_seconds}s")
                failures.append(ProviderFailure(tag, "Provider timed out", "PROVIDER_TIMEOUT"))
            elif isinstance(result, ProviderError):
                logger.error(f"Error getting rates from {tag.value}: {result.message}")
                failures.append(ProviderFailure(tag, result.message, result.code))
            elif isinstance(result, Exception):
                logger.exception(f"Unexpected error getting rates from {tag.value}", exc_info=result)
                failures.append(ProviderFailure(tag, "Failed to retrieve rates"))
            elif isinstance(result, BaseException):
                raise result
            else:
                logger.info(f"Got {len(result.rates)} rates from {tag.value}")
                quotes.append(result)

        return quotes, failures

    def normalize_quotes(self, quotes: Sequence[ProviderQuote]) -> List[CanonicalRate]:
        """Normalize every quote's records, keeping merge order."""
        merged: List[CanonicalRate] = []
        for quote in quotes:
            merged.extend(self.normalizer.normalize_many(quote.rates, quote.provider, quote.context))
        return merged

    async def get_rates(
        self,
        shipment: ShipmentInput,
        policy: Optional[PolicySpec] = None,
    ) -> RateResult:
        """
        Get shipping rates from all active providers.

        Args:
            shipment: Addresses, parcel and cross-reference ids
            policy: Optional constraints

        Returns:
            RateResult with rates sorted by price (lowest first)
        """
        if not self._providers:
            logger.warning("No providers enabled for rate lookup")
            return RateResult()

        quotes, failures = await self.fetch_quotes(shipment)
        rates = rank_rates(self.normalize_quotes(quotes), policy)
        return RateResult(rates=rates, errors=failures)

    async def buy_label(self, purchase: PurchaseRequest) -> LabelPurchase:
        """
        Purchase a label from the provider that quoted the rate.

        Raises:
            UnknownProviderError: provider is not active
            ShippingLabelError: upstream purchase failed
        """
        provider = self.get_provider(purchase.provider)
        try:
            label = await provider.buy_label(purchase)
        except ProviderError as e:
            logger.error(f"Label purchase via {provider.provider_tag.value} failed: {e.message}")
            raise ShippingLabelError(
                f"Failed to purchase shipping label: {e.message}",
                rate_id=purchase.rate_id,
                provider=provider.provider_tag.value,
            ) from e

        logger.info(f"Label purchased via {provider.provider_tag.value}, rate {purchase.rate_id}")
        return label

    async def close(self):
        """Close every provider's HTTP client."""
        for provider in self._providers.values():
            await provider.close()
