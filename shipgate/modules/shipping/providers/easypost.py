"""
EasyPost Provider v1.0.0

Multi-carrier rate API:
- POST /shipments creates a shipment and returns its rates
- POST /shipments/{id}/buy purchases the label for one of those rates

Auth is HTTP basic with the API key as username and an empty password.
"""
import logging
from typing import Any, Dict

from shipgate.core.exceptions import ProviderRequestError
from shipgate.modules.shipping.addresses import normalize_address
from shipgate.modules.shipping.normalize import ProviderTag, parse_price
from shipgate.modules.shipping.providers import register_provider
from shipgate.modules.shipping.providers.base import (
    BaseRateProvider,
    LabelPurchase,
    ProviderQuote,
    PurchaseRequest,
    ShipmentInput,
)
from shipgate.modules.shipping.units import convert_dimension, convert_weight

logger = logging.getLogger(__name__)

# EasyPost parcels are ounces and inches
EASYPOST_WEIGHT_UNIT = "oz"
EASYPOST_DIMENSION_UNIT = "in"


def to_easypost_address(address: Dict[str, Any]) -> Dict[str, Any]:
    """Address payload in EasyPost field names, empty fields dropped."""
    normalized = normalize_address(address) or {}
    return {k: v for k, v in normalized.items() if v not in (None, "")}


def to_easypost_parcel(parcel: Dict[str, Any]) -> Dict[str, Any]:
    """Parcel payload in ounces/inches, converting from weight_unit/dimension_unit."""
    weight_unit = parcel.get("weight_unit") or EASYPOST_WEIGHT_UNIT
    dimension_unit = parcel.get("dimension_unit") or EASYPOST_DIMENSION_UNIT

    payload: Dict[str, Any] = {
        "weight": round(convert_weight(float(parcel.get("weight") or 0), weight_unit, EASYPOST_WEIGHT_UNIT), 2),
    }
    for dim in ("length", "width", "height"):
        if parcel.get(dim):
            payload[dim] = round(convert_dimension(float(parcel[dim]), dimension_unit, EASYPOST_DIMENSION_UNIT), 2)
    return payload


@register_provider(ProviderTag.EASYPOST)
class EasyPostProvider(BaseRateProvider):
    """EasyPost rate and label provider."""

    @property
    def provider_tag(self) -> ProviderTag:
        return ProviderTag.EASYPOST

    @property
    def base_url(self) -> str:
        return self._settings.EASYPOST_API_BASE.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self._settings.EASYPOST_API_KEY)

    def _auth(self) -> Dict[str, Any]:
        return {"auth": (self._settings.EASYPOST_API_KEY, "")}

    async def get_rates(self, shipment: ShipmentInput) -> ProviderQuote:
        """Create an EasyPost shipment and return its rates."""
        payload = {
            "shipment": {
                "from_address": to_easypost_address(shipment.from_address),
                "to_address": to_easypost_address(shipment.to_address),
                "parcel": to_easypost_parcel(shipment.parcel),
            }
        }
        if shipment.order_id:
            payload["shipment"]["reference"] = shipment.order_id

        data = await self._make_request("POST", "/shipments", data=payload)

        rates = data.get("rates") or []
        for message in data.get("messages") or []:
            logger.warning(f"EasyPost rate message: {message}")

        logger.info(f"EasyPost returned {len(rates)} rates for shipment {data.get('id')}")
        return ProviderQuote(
            provider=self.provider_tag,
            rates=rates,
            context={"shipment_id": data.get("id")},
        )

    async def buy_label(self, purchase: PurchaseRequest) -> LabelPurchase:
        """Buy the label for a rate on an existing EasyPost shipment."""
        if not purchase.shipment_id:
            raise ProviderRequestError(
                "EasyPost purchase requires shipment_id",
                provider=self.provider_tag.value,
                code="MISSING_SHIPMENT_ID",
            )

        data = await self._make_request(
            "POST",
            f"/shipments/{purchase.shipment_id}/buy",
            data={"rate": {"id": purchase.rate_id}},
        )

        selected = data.get("selected_rate") or {}
        label = data.get("postage_label") or {}

        logger.info(f"EasyPost label purchased for shipment {purchase.shipment_id}")
        return LabelPurchase(
            provider=self.provider_tag,
            rate_id=purchase.rate_id,
            tracking_code=data.get("tracking_code"),
            label_url=label.get("label_url"),
            carrier=selected.get("carrier"),
            service=selected.get("service"),
            price=parse_price(selected.get("rate")),
            currency=selected.get("currency"),
            raw_response=data,
        )
