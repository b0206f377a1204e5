"""
ShipGate Exception Hierarchy

Structured exception classes for provider integrations and the rate pipeline.
All exceptions include code, message, and details for logging and API errors.

Exception Hierarchy:
    ShipGateError
    └── ShippingError
        ├── UnknownProviderError
        ├── ProviderError
        │   ├── ProviderNotConfiguredError
        │   └── ProviderRequestError
        ├── ShippingQuoteError
        └── ShippingLabelError
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ShipGateError(Exception):
    """
    Base exception for all ShipGate custom errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "SHIPGATE_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# SHIPPING ERRORS
# =============================================================================

class ShippingError(ShipGateError):
    """Base exception for shipping-related errors."""
    default_code = "SHIPPING_ERROR"
    default_severity = "P1"


class UnknownProviderError(ShippingError):
    """A provider tag no adapter or extraction table knows about (caller bug)."""
    default_code = "UNKNOWN_PROVIDER"
    default_severity = "P1"

    def __init__(self, provider: Any, **kwargs):
        details = kwargs.pop("details", {})
        details["provider"] = str(provider)
        super().__init__(f"Unknown provider: {provider}", details=details, **kwargs)


class ProviderError(ShippingError):
    """Base exception for upstream provider failures."""
    default_code = "PROVIDER_ERROR"

    def __init__(self, message: str, provider: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["provider"] = provider
        self.provider = provider
        super().__init__(message, details=details, **kwargs)


class ProviderNotConfiguredError(ProviderError):
    """Provider has no credentials configured."""
    default_code = "PROVIDER_NOT_CONFIGURED"
    default_severity = "P2"


class ProviderRequestError(ProviderError):
    """Upstream API call failed (network error or non-2xx response)."""
    default_code = "PROVIDER_REQUEST_FAILED"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, provider=provider, details=details, **kwargs)


class ShippingQuoteError(ShippingError):
    """Failed to get shipping quote."""
    default_code = "SHIPPING_QUOTE_FAILED"


class ShippingLabelError(ShippingError):
    """Failed to purchase shipping label."""
    default_code = "SHIPPING_LABEL_FAILED"

    def __init__(
        self,
        message: str,
        rate_id: Optional[str] = None,
        provider: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "rate_id": rate_id,
            "provider": provider,
        })
        super().__init__(message, details=details, **kwargs)
