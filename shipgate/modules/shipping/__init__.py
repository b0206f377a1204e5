"""
Shipping Module v1.0.0

- Canonicalizer: carrier/service name tables with runtime registration
- RateNormalizer: provider-native rate records -> CanonicalRate
- apply_policy: price/day filtering and stable price ordering
- Provider adapters (EasyPost, Veeqo) behind BaseRateProvider
"""
from shipgate.modules.shipping.mapping import Canonicalizer
from shipgate.modules.shipping.normalize import CanonicalRate, ProviderTag, RateNormalizer
from shipgate.modules.shipping.policy import PolicySpec, apply_policy, is_preferred, rank_rates

__all__ = [
    "Canonicalizer",
    "CanonicalRate",
    "ProviderTag",
    "RateNormalizer",
    "PolicySpec",
    "apply_policy",
    "is_preferred",
    "rank_rates",
]
