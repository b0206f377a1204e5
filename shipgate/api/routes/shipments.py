"""
Shipment API Routes

Provides endpoints for:
- Rate comparison across providers (normalized, policy filtered)
- Label purchase for a quoted rate
- Order history of rate fetches and purchases
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shipgate.api.deps import get_history_service, get_rate_service
from shipgate.core.exceptions import ShippingError, ShippingLabelError, UnknownProviderError
from shipgate.modules.shipping.normalize import CanonicalRate, ProviderTag
from shipgate.modules.shipping.policy import PolicySpec, is_preferred
from shipgate.modules.shipping.providers.base import PurchaseRequest, ShipmentInput
from shipgate.schemas.shipping import (
    BuyLabelRequest,
    BuyLabelResponse,
    HistoryEntryResponse,
    HistoryListResponse,
    LabelResponse,
    PolicyInfo,
    ProviderErrorResponse,
    RateResponse,
    RatesRequest,
    RatesResponse,
)
from shipgate.services.history_service import HistoryService
from shipgate.services.rate_service import RateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipments", tags=["shipments"])


# ==================== Helper Functions ====================


def policy_from_request(policy: Optional[PolicyInfo]) -> Optional[PolicySpec]:
    if policy is None:
        return None
    return PolicySpec(
        preferred_carriers=tuple(policy.preferred_carriers),
        max_price=policy.max_price,
        max_days=policy.max_days,
    )


def rate_to_response(rate: CanonicalRate, policy: Optional[PolicySpec]) -> RateResponse:
    return RateResponse(**rate.to_dict(), preferred=is_preferred(rate, policy))


# ==================== Rate Endpoints ====================


@router.post("/rates", response_model=RatesResponse)
async def get_rates(
    request: RatesRequest,
    rate_service: RateService = Depends(get_rate_service),
    history: HistoryService = Depends(get_history_service),
):
    """
    Get shipping rates from every active provider.

    Providers that fail are reported in `errors`; their absence never fails
    the request.
    """
    shipment = ShipmentInput(
        from_address=request.from_address.model_dump(),
        to_address=request.to_address.model_dump(),
        parcel=request.parcel.model_dump(),
        order_id=request.order_id,
        allocation_id=request.allocation_id,
    )
    policy = policy_from_request(request.policy)

    try:
        result = await rate_service.get_rates(shipment, policy)
    except ShippingError as e:
        logger.error(f"Rate lookup failed: {e.message}")
        raise HTTPException(status_code=502, detail=e.to_dict())

    response = RatesResponse(
        rates=[rate_to_response(r, policy) for r in result.rates],
        errors=[ProviderErrorResponse(**f.to_dict()) for f in result.errors],
        timestamp=datetime.now(timezone.utc),
    )

    if request.order_id:
        await history.record_rates_fetch(
            request.order_id,
            request.model_dump(),
            response.model_dump(mode="json", exclude={"rates": {"__all__": {"metadata"}}}),
        )

    return response


# ==================== Label Endpoints ====================


@router.post("/buy", response_model=BuyLabelResponse)
async def buy_label(
    request: BuyLabelRequest,
    rate_service: RateService = Depends(get_rate_service),
    history: HistoryService = Depends(get_history_service),
):
    """Purchase a shipping label for a previously quoted rate."""
    try:
        purchase = PurchaseRequest(
            rate_id=request.rate_id,
            provider=ProviderTag.parse(request.provider),
            shipment_id=request.shipment_id,
            allocation_id=request.allocation_id,
            carrier_id=request.carrier_id,
            service_code=request.service_code,
            remote_shipment_id=request.remote_shipment_id,
            order_id=request.order_id,
        )
        label = await rate_service.buy_label(purchase)
    except UnknownProviderError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    except ShippingLabelError as e:
        raise HTTPException(status_code=502, detail=e.to_dict())

    if request.order_id:
        await history.record_label_purchase(
            order_id=request.order_id,
            provider=label.provider.value,
            carrier=label.carrier,
            service=label.service,
            price=label.price,
            currency=label.currency,
            tracking_number=label.tracking_code,
            label_url=label.label_url,
            request_data=request.model_dump(),
            response_data=label.raw_response,
        )

    return BuyLabelResponse(
        label=LabelResponse(**label.to_dict()),
        timestamp=datetime.now(timezone.utc),
    )


# ==================== History Endpoints ====================


@router.get("/history", response_model=HistoryListResponse)
async def get_history(
    order_id: Optional[str] = Query(None, description="Only this order's history"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    history: HistoryService = Depends(get_history_service),
):
    """Get rate fetch and purchase history, newest first."""
    if order_id:
        entries = await history.get_order_history(order_id)
    else:
        entries = await history.list_history(limit=limit, offset=offset)

    items = [HistoryEntryResponse(**e.to_dict()) for e in entries]
    return HistoryListResponse(history=items, total=len(items))
