"""
Rate Normalizer v1.0.0

Converts provider-native rate records into one canonical rate shape.

Each provider declares an extraction table: for every canonical field, the
ordered source field names to try, the parse rule, and the default. Malformed
fields degrade to their defaults; a single bad record never aborts a batch.

Usage:
    normalizer = RateNormalizer(Canonicalizer.with_defaults())
    rate = normalizer.normalize(raw, "easypost", {"shipment_id": "shp_123"})
"""
import enum
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from shipgate.core.exceptions import UnknownProviderError
from shipgate.modules.shipping.mapping import Canonicalizer

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


class ProviderTag(str, enum.Enum):
    """Upstream rate sources."""
    EASYPOST = "easypost"
    VEEQO = "veeqo"

    @classmethod
    def parse(cls, value: Union["ProviderTag", str]) -> "ProviderTag":
        """Resolve a tag or raise UnknownProviderError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownProviderError(value)


# =============================================================================
# Canonical Rate
# =============================================================================

@dataclass(frozen=True)
class CanonicalRate:
    """Provider-agnostic shipping rate."""
    id: str
    provider: ProviderTag
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
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "provider": self.provider.value,
            "carrier": self.carrier,
            "carrier_normalized": self.carrier_normalized,
            "service": self.service,
            "service_normalized": self.service_normalized,
            "price": self.price,
            "currency": self.currency,
            "delivery_days": self.delivery_days,
            "est_delivery_days": self.est_delivery_days,
            "delivery_date": self.delivery_date,
            "delivery_estimate": self.delivery_estimate,
            "metadata": dict(self.metadata),
        }


# =============================================================================
# Parse rules
# =============================================================================

def parse_text(value: Any) -> Optional[str]:
    """Non-empty stripped string, or None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def parse_price(value: Any) -> Optional[float]:
    """
    Decimal amount from a number or numeric string.

    Returns None for anything that is not a finite, non-negative amount.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    price = float(amount)
    return price if math.isfinite(price) else None


def parse_days(value: Any) -> Optional[int]:
    """Non-negative whole day count, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        days = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(days) or days < 0 or days != int(days):
        return None
    return int(days)


def parse_raw(value: Any) -> Any:
    """Keep the provider value as-is (cross-reference ids)."""
    if value is None or value == "":
        return None
    return value


@dataclass(frozen=True)
class FieldRule:
    """Ordered source fields, parse rule, and default for one canonical field."""
    sources: Tuple[str, ...]
    parse: Callable[[Any], Any] = parse_text
    default: Any = None

    def extract(self, raw: Mapping[str, Any]) -> Any:
        for source in self.sources:
            value = self.parse(raw.get(source))
            if value is not None:
                return value
        return self.default


@dataclass(frozen=True)
class ProviderSchema:
    """
    Declarative extraction table for one provider.

    fields: canonical field -> FieldRule
    metadata_fields: metadata key -> FieldRule over the raw record
    context_fields: metadata key -> key in the caller-supplied context
    id_parts: raw fields joined into a synthesized id when the record has none
    """
    tag: ProviderTag
    default_currency: str
    fields: Dict[str, FieldRule]
    metadata_fields: Dict[str, FieldRule] = field(default_factory=dict)
    context_fields: Dict[str, str] = field(default_factory=dict)
    id_parts: Tuple[str, ...] = ()

    def synthesize_id(self, raw: Mapping[str, Any]) -> str:
        parts = []
        for name in self.id_parts:
            value = parse_text(raw.get(name))
            parts.append(value if value is not None else "unknown")
        return "_".join([self.tag.value] + parts)


EASYPOST_SCHEMA = ProviderSchema(
    tag=ProviderTag.EASYPOST,
    default_currency="USD",
    fields={
        "id": FieldRule(("id",)),
        "carrier": FieldRule(("carrier",), default=UNKNOWN),
        "service": FieldRule(("service",), default=UNKNOWN),
        "price": FieldRule(("rate",), parse_price, default=0.0),
        "currency": FieldRule(("currency",)),
        "delivery_days": FieldRule(("delivery_days",), parse_days),
        "est_delivery_days": FieldRule(("est_delivery_days", "delivery_days"), parse_days),
        "delivery_date": FieldRule(("delivery_date",)),
        "delivery_estimate": FieldRule(("delivery_date",)),
    },
    metadata_fields={
        "rate_id": FieldRule(("id",), parse_raw),
        "carrier_account_id": FieldRule(("carrier_account_id",), parse_raw),
    },
    context_fields={"shipment_id": "shipment_id"},
    id_parts=("carrier", "service"),
)

VEEQO_SCHEMA = ProviderSchema(
    tag=ProviderTag.VEEQO,
    default_currency="GBP",
    fields={
        "id": FieldRule(("id",)),
        "carrier": FieldRule(("carrier", "carrier_name"), default=UNKNOWN),
        "service": FieldRule(("service", "service_name"), default=UNKNOWN),
        "price": FieldRule(("price", "total_net_charge"), parse_price, default=0.0),
        "currency": FieldRule(("currency",)),
        "delivery_days": FieldRule(("delivery_days",), parse_days),
        "est_delivery_days": FieldRule(("delivery_days",), parse_days),
        "delivery_date": FieldRule(("delivery_estimate",)),
        "delivery_estimate": FieldRule(("delivery_estimate",)),
    },
    metadata_fields={
        "carrier_id": FieldRule(("carrier_id",), parse_raw),
        "service_code": FieldRule(("service_code", "code"), parse_raw),
        "remote_shipment_id": FieldRule(("remote_shipment_id",), parse_raw),
    },
    context_fields={"allocation_id": "allocation_id"},
    id_parts=("carrier_id", "service_code"),
)

PROVIDER_SCHEMAS: Dict[ProviderTag, ProviderSchema] = {
    ProviderTag.EASYPOST: EASYPOST_SCHEMA,
    ProviderTag.VEEQO: VEEQO_SCHEMA,
}


# =============================================================================
# Normalizer
# =============================================================================

class RateNormalizer:
    """Builds CanonicalRate records using a shared Canonicalizer."""

    def __init__(
        self,
        canonicalizer: Canonicalizer,
        schemas: Optional[Mapping[ProviderTag, ProviderSchema]] = None,
    ):
        self.canonicalizer = canonicalizer
        self._schemas = dict(schemas or PROVIDER_SCHEMAS)

    def schema_for(self, provider: Union[ProviderTag, str]) -> ProviderSchema:
        tag = ProviderTag.parse(provider)
        schema = self._schemas.get(tag)
        if schema is None:
            raise UnknownProviderError(tag.value)
        return schema

    def normalize(
        self,
        raw_rate: Mapping[str, Any],
        provider: Union[ProviderTag, str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> CanonicalRate:
        """
        Normalize a rate from any provider to the canonical format.

        Args:
            raw_rate: Raw rate object from the provider
            provider: Provider tag
            context: Cross-reference ids (shipment_id, allocation_id)

        Returns:
            CanonicalRate

        Raises:
            UnknownProviderError: provider tag has no extraction table
        """
        schema = self.schema_for(provider)
        record: Mapping[str, Any] = raw_rate if isinstance(raw_rate, Mapping) else {}
        if record is not raw_rate:
            logger.warning(f"Non-mapping {schema.tag.value} rate record: {type(raw_rate).__name__}")

        values = {name: rule.extract(record) for name, rule in schema.fields.items()}

        rate_id = values["id"] or schema.synthesize_id(record)
        carrier = values["carrier"]
        service = values["service"]

        metadata: Dict[str, Any] = {}
        for key, context_key in schema.context_fields.items():
            metadata[key] = (context or {}).get(context_key)
        for key, rule in schema.metadata_fields.items():
            metadata[key] = rule.extract(record)
        metadata["original"] = raw_rate

        return CanonicalRate(
            id=rate_id,
            provider=schema.tag,
            carrier=carrier,
            carrier_normalized=self.canonicalizer.canonicalize_carrier(carrier) or carrier,
            service=service,
            service_normalized=self.canonicalizer.canonicalize_service(carrier, service) or service,
            price=values["price"],
            currency=values["currency"] or schema.default_currency,
            delivery_days=values["delivery_days"],
            est_delivery_days=values["est_delivery_days"],
            delivery_date=values["delivery_date"],
            delivery_estimate=values["delivery_estimate"],
            metadata=metadata,
        )

    def normalize_many(
        self,
        raw_rates: Iterable[Mapping[str, Any]],
        provider: Union[ProviderTag, str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> List[CanonicalRate]:
        """Normalize a provider's whole rate list, preserving order."""
        schema = self.schema_for(provider)
        return [self.normalize(raw, schema.tag, context) for raw in raw_rates or []]
