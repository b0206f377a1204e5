"""
Carrier and Service Canonicalizer v1.0.0

Maps provider-specific carrier and service names to standard display names.

- Carrier lookup is an exact match on the raw string.
- Service lookup uses a composite "CARRIER:SERVICE" key: exact match first,
  then a case-insensitive scan over every entry.
- Lookups return None when unmapped; callers fall back to the raw value.

The tables are owned by a Canonicalizer instance rather than module globals.
Build one with Canonicalizer.with_defaults() and pass it to whatever needs
lookups (the RateNormalizer, the mappings admin routes).
"""
import logging
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# Carrier name mapping - various spellings/formats to standard names
DEFAULT_CARRIER_MAPPINGS: Dict[str, str] = {
    # USPS
    "USPS": "USPS",
    "usps": "USPS",
    "United States Postal Service": "USPS",
    "US Postal Service": "USPS",
    # UPS
    "UPS": "UPS",
    "ups": "UPS",
    "United Parcel Service": "UPS",
    # FedEx
    "FedEx": "FedEx",
    "fedex": "FedEx",
    "FEDEX": "FedEx",
    "Federal Express": "FedEx",
    # DHL
    "DHL": "DHL",
    "dhl": "DHL",
    "DHL Express": "DHL",
    # Royal Mail (UK)
    "Royal Mail": "Royal Mail",
    "RoyalMail": "Royal Mail",
    "royal-mail": "Royal Mail",
    # DPD (UK/Europe)
    "DPD": "DPD",
    "dpd": "DPD",
    "DPD UK": "DPD",
    # Hermes rebranded to Evri (UK)
    "Hermes": "Evri",
    "Evri": "Evri",
    "hermes": "Evri",
    # Canada Post
    "Canada Post": "Canada Post",
    "CanadaPost": "Canada Post",
    "canada-post": "Canada Post",
}

# Service name mapping by carrier
# Format: 'CARRIER:SERVICE' -> 'Normalized Service Name'
DEFAULT_SERVICE_MAPPINGS: Dict[str, str] = {
    # USPS
    "USPS:Priority": "Priority Mail",
    "USPS:PriorityMailExpress": "Priority Mail Express",
    "USPS:Express": "Priority Mail Express",
    "USPS:FirstClassMail": "First-Class Mail",
    "USPS:FirstClass": "First-Class Mail",
    "USPS:ParcelSelect": "Parcel Select",
    "USPS:Ground": "Parcel Select Ground",
    "USPS:MediaMail": "Media Mail",
    # UPS
    "UPS:Ground": "UPS Ground",
    "UPS:3DaySelect": "UPS 3 Day Select",
    "UPS:2ndDayAir": "UPS 2nd Day Air",
    "UPS:NextDayAir": "UPS Next Day Air",
    "UPS:NextDayAirSaver": "UPS Next Day Air Saver",
    "UPS:Standard": "UPS Standard",
    # FedEx
    "FedEx:Ground": "FedEx Ground",
    "FedEx:HomeDelivery": "FedEx Home Delivery",
    "FedEx:2Day": "FedEx 2Day",
    "FedEx:Express": "FedEx Express Saver",
    "FedEx:StandardOvernight": "FedEx Standard Overnight",
    "FedEx:PriorityOvernight": "FedEx Priority Overnight",
    "FedEx:FirstOvernight": "FedEx First Overnight",
    # DHL
    "DHL:Express": "DHL Express Worldwide",
    "DHL:ExpressEnvelope": "DHL Express Envelope",
    "DHL:ExpressEasy": "DHL Express Easy",
    # Royal Mail (UK)
    "Royal Mail:1stClass": "Royal Mail 1st Class",
    "Royal Mail:2ndClass": "Royal Mail 2nd Class",
    "Royal Mail:Tracked24": "Royal Mail Tracked 24",
    "Royal Mail:Tracked48": "Royal Mail Tracked 48",
    "Royal Mail:SpecialDelivery": "Royal Mail Special Delivery",
    # DPD (UK/Europe)
    "DPD:NextDay": "DPD Next Day",
    "DPD:TwoDay": "DPD Two Day Service",
    "DPD:Classic": "DPD Classic",
    "DPD:Express": "DPD Express",
}


def service_key(carrier: str, service: str) -> str:
    """Composite lookup key for the service table."""
    return f"{carrier}:{service}"


class Canonicalizer:
    """
    Carrier/service name lookup tables with a runtime registration API.

    Registrations are single dict assignments, so concurrent readers see
    either the old or the new value for a key; no lock is taken.
    """

    def __init__(
        self,
        carrier_mappings: Optional[Mapping[str, str]] = None,
        service_mappings: Optional[Mapping[str, str]] = None,
    ):
        self._carriers: Dict[str, str] = dict(carrier_mappings or {})
        self._services: Dict[str, str] = dict(service_mappings or {})

    @classmethod
    def with_defaults(cls) -> "Canonicalizer":
        """Create a canonicalizer seeded with the built-in carrier/service tables."""
        return cls(DEFAULT_CARRIER_MAPPINGS, DEFAULT_SERVICE_MAPPINGS)

    # ==================== Lookups ====================

    def canonicalize_carrier(self, raw: Optional[str]) -> Optional[str]:
        """
        Get normalized carrier name.

        Args:
            raw: Raw carrier name

        Returns:
            Mapped carrier name, or None if no mapping exists
        """
        if not raw:
            return None
        return self._carriers.get(raw) or None

    def canonicalize_service(self, carrier: Optional[str], raw_service: Optional[str]) -> Optional[str]:
        """
        Get normalized service name.

        Args:
            carrier: Carrier name (raw, as the provider sent it)
            raw_service: Raw service name

        Returns:
            Mapped service name, or None if no mapping exists
        """
        if not carrier or not raw_service:
            return None

        key = service_key(carrier, raw_service)
        if self._services.get(key):
            return self._services[key]

        # Providers are inconsistent about casing
        lower_key = key.lower()
        for mapping_key, mapping_value in list(self._services.items()):
            if mapping_key.lower() == lower_key:
                return mapping_value

        return None

    # ==================== Registration ====================

    def register_carrier_mapping(self, source: str, target: str) -> None:
        """Add or replace a carrier mapping (last write wins)."""
        self._carriers[source] = target
        logger.debug(f"Carrier mapping registered: {source!r} -> {target!r}")

    def register_service_mapping(self, carrier: str, source: str, target: str) -> None:
        """Add or replace a service mapping for a carrier (last write wins)."""
        self._services[service_key(carrier, source)] = target
        logger.debug(f"Service mapping registered: {carrier!r}:{source!r} -> {target!r}")

    def register_many(
        self,
        carrier_mappings: Optional[Mapping[str, str]] = None,
        service_mappings: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Seed extra entries, e.g. from settings at startup.

        Service keys use the composite "CARRIER:SERVICE" form.
        """
        for source, target in (carrier_mappings or {}).items():
            self.register_carrier_mapping(source, target)
        for key, target in (service_mappings or {}).items():
            carrier, sep, source = key.partition(":")
            if not sep:
                logger.warning(f"Ignoring service mapping without carrier prefix: {key!r}")
                continue
            self.register_service_mapping(carrier, source, target)

    # ==================== Introspection ====================

    def carrier_mappings(self) -> Dict[str, str]:
        """Snapshot of the carrier table."""
        return dict(self._carriers)

    def service_mappings(self) -> Dict[str, str]:
        """Snapshot of the service table."""
        return dict(self._services)
