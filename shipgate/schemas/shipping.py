"""
Shipping Schemas

Pydantic models for shipment rate and label API requests and responses.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


# ==================== Address / Parcel Schemas ====================


class AddressInfo(BaseModel):
    """Ship-from / ship-to address (EasyPost field names)."""
    name: Optional[str] = Field(None, max_length=100)
    company: Optional[str] = Field(None, max_length=100)
    street1: str = Field(..., min_length=1, max_length=200)
    street2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip: str = Field(..., min_length=2, max_length=20)
    country: str = Field("US", min_length=2, max_length=2)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=100)

    @field_validator("country")
    @classmethod
    def validate_country_code(cls, v):
        return v.upper()


class ParcelInfo(BaseModel):
    """Parcel dimensions and weight."""
    weight: float = Field(..., gt=0)
    weight_unit: str = Field("oz", pattern="^(oz|lb|lbs|g|kg)$")
    length: Optional[float] = Field(None, gt=0)
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    dimension_unit: str = Field("in", pattern="^(in|inch|inches|cm)$")


class PolicyInfo(BaseModel):
    """Optional rate constraints."""
    preferred_carriers: List[str] = Field(default_factory=list)
    max_price: Optional[float] = Field(None, ge=0)
    max_days: Optional[int] = Field(None, ge=0)


# ==================== Rate Schemas ====================


class RatesRequest(BaseModel):
    """Request shipping rates from all providers."""
    from_address: AddressInfo
    to_address: AddressInfo
    parcel: ParcelInfo
    order_id: Optional[str] = None
    allocation_id: Optional[int] = Field(None, description="Veeqo allocation to quote for")
    policy: Optional[PolicyInfo] = None


class RateResponse(BaseModel):
    """A single canonical rate."""
    id: str
    provider: str
    carrier: str
    carrier_normalized: str
    service: str
    service_normalized: str
    price: float
    currency: str
    delivery_days: Optional[int] = None
    est_delivery_days: Optional[int] = None
    delivery_date: Optional[str] = None
    delivery_estimate: Optional[str] = None
    preferred: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ProviderErrorResponse(BaseModel):
    provider: str
    message: str
    code: str


class RatesResponse(BaseModel):
    """Merged rates from all providers."""
    success: bool = True
    rates: List[RateResponse]
    errors: List[ProviderErrorResponse] = Field(default_factory=list)
    timestamp: datetime


# ==================== Label Schemas ====================


class BuyLabelRequest(BaseModel):
    """Purchase a label for a quoted rate."""
    rate_id: str = Field(..., min_length=1)
    provider: str = Field(..., min_length=1)
    shipment_id: Optional[str] = Field(None, description="EasyPost shipment id")
    allocation_id: Optional[int] = Field(None, description="Veeqo allocation id")
    carrier_id: Optional[Any] = None
    service_code: Optional[str] = None
    remote_shipment_id: Optional[str] = None
    order_id: Optional[str] = None


class LabelResponse(BaseModel):
    provider: str
    rate_id: str
    tracking_code: Optional[str] = None
    label_url: Optional[str] = None
    carrier: Optional[str] = None
    service: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None


class BuyLabelResponse(BaseModel):
    success: bool = True
    label: LabelResponse
    timestamp: datetime


# ==================== History Schemas ====================


class HistoryEntryResponse(BaseModel):
    id: int
    order_id: str
    action_type: str
    provider: Optional[str] = None
    carrier: Optional[str] = None
    service: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    tracking_number: Optional[str] = None
    label_url: Optional[str] = None
    request_data: str
    response_data: str
    created_at: Optional[str] = None


class HistoryListResponse(BaseModel):
    history: List[HistoryEntryResponse]
    total: int


# ==================== Mapping Schemas ====================


class CarrierMappingCreate(BaseModel):
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)


class ServiceMappingCreate(BaseModel):
    carrier: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)


class MappingsResponse(BaseModel):
    carriers: Dict[str, str]
    services: Dict[str, str]
