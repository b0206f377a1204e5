"""
Rate policy filter/ranker.

Applies caller constraints to canonical rates and returns them cheapest
first. The sort is stable, so equal prices keep their merged input order.

Rates with an unknown delivery_days survive a max_days filter.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from shipgate.modules.shipping.normalize import CanonicalRate


@dataclass(frozen=True)
class PolicySpec:
    """Optional caller constraints; every field may be omitted."""
    preferred_carriers: Sequence[str] = ()
    max_price: Optional[float] = None
    max_days: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.preferred_carriers and self.max_price is None and self.max_days is None


def _within_price(rate: CanonicalRate, max_price: Optional[float]) -> bool:
    return max_price is None or rate.price <= max_price


def _within_days(rate: CanonicalRate, max_days: Optional[int]) -> bool:
    if max_days is None or rate.delivery_days is None:
        return True
    return rate.delivery_days <= max_days


def apply_policy(
    rates: Iterable[CanonicalRate],
    policy: Optional[PolicySpec] = None,
) -> List[CanonicalRate]:
    """
    Filter and order rates.

    Args:
        rates: Canonical rates, in merged provider order
        policy: Constraints, or None for a pass-through

    Returns:
        New list; unchanged order when policy is None, otherwise filtered
        and sorted by price ascending (stable)
    """
    if policy is None:
        return list(rates)

    kept = [
        rate for rate in rates
        if _within_price(rate, policy.max_price) and _within_days(rate, policy.max_days)
    ]
    # preferred_carriers never removes a rate; see is_preferred()
    kept.sort(key=lambda r: r.price)
    return kept


def is_preferred(rate: CanonicalRate, policy: Optional[PolicySpec]) -> bool:
    """True when the rate's canonical carrier is one the caller prefers."""
    if policy is None or not policy.preferred_carriers:
        return False
    wanted = {c.lower() for c in policy.preferred_carriers}
    return rate.carrier_normalized.lower() in wanted


def rank_rates(
    rates: Iterable[CanonicalRate],
    policy: Optional[PolicySpec] = None,
) -> List[CanonicalRate]:
    """
    apply_policy, but always price-ordered.

    Used for merged multi-provider output where the caller sent no policy;
    the dashboard still wants the cheapest option first.
    """
    return apply_policy(rates, policy or PolicySpec())
