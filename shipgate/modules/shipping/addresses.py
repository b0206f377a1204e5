"""
Address normalization across provider shapes.

EasyPost uses street1/street2/zip; Veeqo delivery addresses use
address1/address2, first_name/last_name and province/postcode variants.
"""
from typing import Any, Dict, Mapping, Optional


def _first(raw: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if value:
            return str(value)
    return None


def normalize_address(address: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Normalize an address from any provider format.

    Args:
        address: Address object from any provider

    Returns:
        Dict with name, company, street1, street2, city, state, zip,
        country, phone, email; None when no address was given
    """
    if not address:
        return None

    name = _first(address, "name")
    if not name:
        full = f"{address.get('first_name') or ''} {address.get('last_name') or ''}".strip()
        name = full or None

    return {
        "name": name,
        "company": _first(address, "company"),
        "street1": _first(address, "street1", "address1") or "",
        "street2": _first(address, "street2", "address2"),
        "city": _first(address, "city") or "",
        "state": _first(address, "state", "province"),
        "zip": _first(address, "zip", "postal_code", "postcode") or "",
        "country": _first(address, "country", "country_code") or "US",
        "phone": _first(address, "phone"),
        "email": _first(address, "email"),
    }
