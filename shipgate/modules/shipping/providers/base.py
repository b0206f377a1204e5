"""
Base Rate Provider Interface v1.0.0

- All upstream rate sources implement this interface
- Providers return their native rate records untouched; the RateNormalizer
  owns the mapping into CanonicalRate
- Shared httpx plumbing lives here (lazy client, auth headers, error mapping)
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from shipgate.core.config import Settings
from shipgate.core.exceptions import ProviderNotConfiguredError, ProviderRequestError
from shipgate.modules.shipping.normalize import ProviderTag

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 30.0


# =============================================================================
# Provider-Agnostic Data Classes
# =============================================================================

@dataclass
class ShipmentInput:
    """Addresses and parcel for a rate request."""
    from_address: Dict[str, Any]
    to_address: Dict[str, Any]
    parcel: Dict[str, Any]
    order_id: Optional[str] = None
    allocation_id: Optional[int] = None


@dataclass
class ProviderQuote:
    """Raw rate records from one provider plus the ids needed to buy later."""
    provider: ProviderTag
    rates: List[Dict[str, Any]] = field(default_factory=list)
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PurchaseRequest:
    """Everything a provider needs to re-resolve a rate at purchase time."""
    rate_id: str
    provider: ProviderTag
    shipment_id: Optional[str] = None
    allocation_id: Optional[int] = None
    carrier_id: Optional[Any] = None
    service_code: Optional[str] = None
    remote_shipment_id: Optional[str] = None
    order_id: Optional[str] = None


@dataclass
class LabelPurchase:
    """Result of a label purchase."""
    provider: ProviderTag
    rate_id: str
    tracking_code: Optional[str] = None
    label_url: Optional[str] = None
    carrier: Optional[str] = None
    service: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    raw_response: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider.value,
            "rate_id": self.rate_id,
            "tracking_code": self.tracking_code,
            "label_url": self.label_url,
            "carrier": self.carrier,
            "service": self.service,
            "price": self.price,
            "currency": self.currency,
        }


# =============================================================================
# Base Provider Interface
# =============================================================================

class BaseRateProvider(ABC):
    """
    Abstract base class for all rate providers.

    Subclasses supply the tag, credentials check, auth headers, and the two
    API operations.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self._settings = settings
        self._client = http_client

    @property
    @abstractmethod
    def provider_tag(self) -> ProviderTag:
        """Return the provider tag enum value."""

    @property
    @abstractmethod
    def base_url(self) -> str:
        """API root, without trailing slash."""

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present."""

    @abstractmethod
    def _auth(self) -> Dict[str, Any]:
        """httpx request kwargs carrying credentials (headers or auth)."""

    @abstractmethod
    async def get_rates(self, shipment: ShipmentInput) -> ProviderQuote:
        """
        Fetch raw rate records for a shipment.

        Returns:
            ProviderQuote with native records and cross-reference context
        """

    @abstractmethod
    async def buy_label(self, purchase: PurchaseRequest) -> LabelPurchase:
        """Purchase a label for a previously quoted rate."""

    # ==================== HTTP plumbing ====================

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=DEFAULT_HTTP_TIMEOUT,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _check_configured(self) -> None:
        if not self.is_configured():
            raise ProviderNotConfiguredError(
                f"{self.provider_tag.value} is not configured",
                provider=self.provider_tag.value,
            )

    async def _make_request(
        self,
        method: str,
        path: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Any:
        """Make authenticated API request and return decoded JSON."""
        self._check_configured()
        client = await self._get_http_client()
        url = f"{self.base_url}{path}"
        tag = self.provider_tag.value

        try:
            response = await client.request(method.upper(), url, json=data, params=params, **self._auth())
        except httpx.RequestError as e:
            logger.error(f"{tag} request failed: {e}")
            raise ProviderRequestError(f"Network error: {e}", provider=tag, code="NETWORK_ERROR")

        logger.debug(f"{tag} API {method} {path} -> {response.status_code}")

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"raw": response.text[:500]}
            message = self._error_message(error_data) or f"{tag} API error"
            logger.error(f"{tag} API error: {response.status_code} - {message}")
            raise ProviderRequestError(
                message,
                provider=tag,
                status_code=response.status_code,
                details={"response": error_data},
            )

        try:
            return response.json()
        except ValueError:
            raise ProviderRequestError(
                f"{tag} returned a non-JSON body",
                provider=tag,
                status_code=response.status_code,
            )

    @staticmethod
    def _error_message(error_data: Any) -> Optional[str]:
        """Pull a message out of a provider error body."""
        if not isinstance(error_data, dict):
            return None
        error = error_data.get("error")
        if isinstance(error, dict):
            return error.get("message")
        if isinstance(error, str):
            return error
        return error_data.get("message")
