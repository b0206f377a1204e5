"""
Pytest configuration and fixtures for ShipGate tests.
"""
import asyncio
import os
import pytest
from typing import Any, Dict, List, Optional

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["HISTORY_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["EASYPOST_API_KEY"] = "EZTK_test_key"
os.environ["VEEQO_API_KEY"] = "vqt_test_key"

from shipgate.core.config import Settings
from shipgate.core.exceptions import ProviderRequestError
from shipgate.modules.shipping.mapping import Canonicalizer
from shipgate.modules.shipping.normalize import ProviderTag, RateNormalizer
from shipgate.modules.shipping.providers.base import (
    BaseRateProvider,
    LabelPurchase,
    ProviderQuote,
    PurchaseRequest,
    ShipmentInput,
)


class FakeProvider(BaseRateProvider):
    """In-memory provider returning canned raw rates (or raising)."""

    def __init__(
        self,
        tag: ProviderTag,
        rates: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        super().__init__(Settings(ENVIRONMENT="development"))
        self._tag = tag
        self._rates = rates or []
        self._context = context or {}
        self._error = error
        self._delay = delay
        self.purchases: List[PurchaseRequest] = []
        self.closed = False

    @property
    def provider_tag(self) -> ProviderTag:
        return self._tag

    @property
    def base_url(self) -> str:
        return "https://fake.invalid"

    def is_configured(self) -> bool:
        return True

    def _auth(self) -> Dict[str, Any]:
        return {}

    async def get_rates(self, shipment: ShipmentInput) -> ProviderQuote:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error:
            raise self._error
        return ProviderQuote(provider=self._tag, rates=list(self._rates), context=dict(self._context))

    async def buy_label(self, purchase: PurchaseRequest) -> LabelPurchase:
        if self._error:
            raise self._error
        self.purchases.append(purchase)
        return LabelPurchase(
            provider=self._tag,
            rate_id=purchase.rate_id,
            tracking_code="9400111899562537099886",
            label_url="https://labels.example.com/label.pdf",
            carrier="USPS",
            service="Priority",
            price=7.33,
            currency="USD",
            raw_response={"id": "label_123"},
        )

    async def close(self):
        self.closed = True


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENVIRONMENT="development",
        EASYPOST_API_KEY="EZTK_test_key",
        VEEQO_API_KEY="vqt_test_key",
        EASYPOST_API_BASE="https://api.easypost.test/v2",
        VEEQO_API_BASE="https://api.veeqo.test",
        HISTORY_DATABASE_URL="sqlite+aiosqlite://",
    )


@pytest.fixture
def canonicalizer() -> Canonicalizer:
    return Canonicalizer.with_defaults()


@pytest.fixture
def normalizer(canonicalizer) -> RateNormalizer:
    return RateNormalizer(canonicalizer)


@pytest.fixture
def easypost_rate() -> dict:
    """Raw EasyPost rate record."""
    return {
        "id": "rate_0a1b2c",
        "object": "Rate",
        "carrier": "USPS",
        "service": "Priority",
        "rate": "7.33",
        "currency": "USD",
        "delivery_days": 2,
        "delivery_date": "2024-06-03T00:00:00Z",
        "est_delivery_days": 2,
        "carrier_account_id": "ca_123",
        "shipment_id": "shp_456",
    }


@pytest.fixture
def veeqo_quote() -> dict:
    """Raw Veeqo quote record (no id of its own)."""
    return {
        "carrier_id": 42,
        "carrier_name": "Royal Mail",
        "service_name": "Tracked24",
        "service_code": "RM_TRACKED_24",
        "price": 10.0,
        "delivery_days": 1,
        "delivery_estimate": "Tomorrow",
        "remote_shipment_id": "amzn_987",
    }


@pytest.fixture
def sample_shipment() -> ShipmentInput:
    return ShipmentInput(
        from_address={
            "name": "Warehouse",
            "street1": "417 Montgomery Street",
            "city": "San Francisco",
            "state": "CA",
            "zip": "94104",
            "country": "US",
        },
        to_address={
            "first_name": "Jane",
            "last_name": "Doe",
            "address1": "179 N Harbor Dr",
            "city": "Redondo Beach",
            "province": "CA",
            "postcode": "90277",
            "country_code": "US",
        },
        parcel={"weight": 1.5, "weight_unit": "lb", "length": 10, "width": 8, "height": 4},
        order_id="ORD-1001",
        allocation_id=555,
    )


@pytest.fixture
def fake_provider_factory():
    return FakeProvider


@pytest.fixture
def provider_request_error():
    return ProviderRequestError("upstream 500", provider="veeqo", status_code=500)
