"""
Veeqo Provider v1.0.0

Order-platform delivery quotes:
- GET /shipping/quotes/amazon_shipping_v2?allocation_id= lists quotes for
  an order allocation
- POST /shipping/shipments books the chosen quote and returns the label

Quotes only exist for an allocation, so requests without allocation_id
return no rates.
"""
import logging
from typing import Any, Dict, Optional

from shipgate.core.exceptions import ProviderRequestError
from shipgate.modules.shipping.normalize import ProviderTag
from shipgate.modules.shipping.providers import register_provider
from shipgate.modules.shipping.providers.base import (
    BaseRateProvider,
    LabelPurchase,
    ProviderQuote,
    PurchaseRequest,
    ShipmentInput,
)

logger = logging.getLogger(__name__)

QUOTES_PATH = "/shipping/quotes/amazon_shipping_v2"
SHIPMENTS_PATH = "/shipping/shipments"


def _tracking_number(data: Dict[str, Any]) -> Optional[str]:
    """Veeqo nests the tracking number object under the same key."""
    tracking = data.get("tracking_number")
    if isinstance(tracking, dict):
        return tracking.get("tracking_number")
    return tracking


def _carrier_name(data: Dict[str, Any]) -> Optional[str]:
    carrier = data.get("carrier")
    if isinstance(carrier, dict):
        return carrier.get("name")
    return data.get("carrier_name") or carrier


@register_provider(ProviderTag.VEEQO)
class VeeqoProvider(BaseRateProvider):
    """Veeqo delivery quote and shipment provider."""

    @property
    def provider_tag(self) -> ProviderTag:
        return ProviderTag.VEEQO

    @property
    def base_url(self) -> str:
        return self._settings.VEEQO_API_BASE.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self._settings.VEEQO_API_KEY)

    def _auth(self) -> Dict[str, Any]:
        return {"headers": {"x-api-key": self._settings.VEEQO_API_KEY}}

    async def get_rates(self, shipment: ShipmentInput) -> ProviderQuote:
        if shipment.allocation_id is None:
            logger.debug("Veeqo quotes skipped: no allocation_id on request")
            return ProviderQuote(provider=self.provider_tag)

        data = await self._make_request(
            "GET",
            QUOTES_PATH,
            params={"allocation_id": shipment.allocation_id},
        )

        quotes = data if isinstance(data, list) else (data.get("quotes") or [])
        logger.info(f"Veeqo returned {len(quotes)} quotes for allocation {shipment.allocation_id}")
        return ProviderQuote(
            provider=self.provider_tag,
            rates=quotes,
            context={"allocation_id": shipment.allocation_id},
        )

    async def buy_label(self, purchase: PurchaseRequest) -> LabelPurchase:
        if purchase.allocation_id is None:
            raise ProviderRequestError(
                "Veeqo purchase requires allocation_id",
                provider=self.provider_tag.value,
                code="MISSING_ALLOCATION_ID",
            )

        payload = {
            "allocation_id": purchase.allocation_id,
            "carrier_id": purchase.carrier_id,
            "remote_shipment_id": purchase.remote_shipment_id or purchase.rate_id,
            "service_type": purchase.service_code,
            "notify_customer": False,
        }
        data = await self._make_request("POST", SHIPMENTS_PATH, data={"shipment": payload})

        logger.info(f"Veeqo shipment booked for allocation {purchase.allocation_id}")
        return LabelPurchase(
            provider=self.provider_tag,
            rate_id=purchase.rate_id,
            tracking_code=_tracking_number(data),
            label_url=data.get("label_url"),
            carrier=_carrier_name(data),
            service=data.get("service_type"),
            raw_response=data,
        )
