import copy
import dataclasses
import json
import math

import pytest

from shipgate.core.exceptions import UnknownProviderError
from shipgate.modules.shipping.normalize import (
    CanonicalRate,
    ProviderTag,
    parse_days,
    parse_price,
)


class TestEasyPostNormalization:
    """EasyPost rate records."""

    def test_full_record(self, normalizer, easypost_rate):
        rate = normalizer.normalize(easypost_rate, "easypost", {"shipment_id": "shp_456"})

        assert isinstance(rate, CanonicalRate)
        assert rate.id == "rate_0a1b2c"
        assert rate.provider == ProviderTag.EASYPOST
        assert rate.carrier == "USPS"
        assert rate.carrier_normalized == "USPS"
        assert rate.service == "Priority"
        assert rate.service_normalized == "Priority Mail"
        assert rate.price == 7.33
        assert rate.currency == "USD"
        assert rate.delivery_days == 2
        assert rate.est_delivery_days == 2
        assert rate.delivery_date == "2024-06-03T00:00:00Z"
        assert rate.delivery_estimate == "2024-06-03T00:00:00Z"
        assert rate.metadata["shipment_id"] == "shp_456"
        assert rate.metadata["rate_id"] == "rate_0a1b2c"

    def test_fedex_ground_scenario(self, normalizer):
        rate = normalizer.normalize({"id": "r1", "carrier": "fedex", "service": "Ground", "rate": "9.10"}, "easypost")
        assert rate.carrier_normalized == "FedEx"
        assert rate.service_normalized == "FedEx Ground"

    def test_string_price_is_parsed(self, normalizer):
        rate = normalizer.normalize({"id": "r1", "rate": "12.50"}, "easypost")
        assert rate.price == 12.5
        assert isinstance(rate.price, float)

    def test_missing_price_defaults_to_zero(self, normalizer):
        rate = normalizer.normalize({"id": "r1", "carrier": "UPS"}, "easypost")
        assert rate.price == 0

    @pytest.mark.parametrize("bad", ["abc", "", "-4.00", "NaN", "Infinity", None, [], {"amount": 1}])
    def test_malformed_price_degrades_to_zero(self, normalizer, bad):
        rate = normalizer.normalize({"id": "r1", "rate": bad}, "easypost")
        assert rate.price == 0
        assert math.isfinite(rate.price)

    def test_currency_default(self, normalizer):
        rate = normalizer.normalize({"id": "r1", "rate": "1"}, "easypost")
        assert rate.currency == "USD"

    def test_est_delivery_days_falls_back_to_delivery_days(self, normalizer):
        rate = normalizer.normalize({"id": "r1", "delivery_days": 4}, "easypost")
        assert rate.est_delivery_days == 4

    def test_missing_id_is_synthesized_deterministically(self, normalizer):
        raw = {"carrier": "UPS", "service": "Ground", "rate": "8.00"}
        first = normalizer.normalize(raw, "easypost")
        second = normalizer.normalize(dict(raw), "easypost")
        assert first.id == "easypost_UPS_Ground"
        assert first.id == second.id


class TestVeeqoNormalization:
    """Veeqo quote records."""

    def test_full_record(self, normalizer, veeqo_quote):
        rate = normalizer.normalize(veeqo_quote, ProviderTag.VEEQO, {"allocation_id": 555})

        assert rate.id == "veeqo_42_RM_TRACKED_24"
        assert rate.provider == ProviderTag.VEEQO
        assert rate.carrier == "Royal Mail"
        assert rate.carrier_normalized == "Royal Mail"
        assert rate.service == "Tracked24"
        assert rate.service_normalized == "Royal Mail Tracked 24"
        assert rate.price == 10.0
        assert rate.currency == "GBP"
        assert rate.delivery_days == 1
        assert rate.est_delivery_days == 1
        assert rate.delivery_date == "Tomorrow"
        assert rate.delivery_estimate == "Tomorrow"
        assert rate.metadata["allocation_id"] == 555
        assert rate.metadata["carrier_id"] == 42
        assert rate.metadata["service_code"] == "RM_TRACKED_24"
        assert rate.metadata["remote_shipment_id"] == "amzn_987"

    def test_provider_id_is_kept(self, normalizer, veeqo_quote):
        veeqo_quote["id"] = 9001
        rate = normalizer.normalize(veeqo_quote, "veeqo")
        assert rate.id == "9001"

    def test_service_code_falls_back_to_code(self, normalizer):
        rate = normalizer.normalize({"carrier_id": 7, "code": "DPD_NEXT"}, "veeqo")
        assert rate.metadata["service_code"] == "DPD_NEXT"
        # synthesized ids only use the service_code field
        assert rate.id == "veeqo_7_unknown"

    def test_numeric_string_price(self, normalizer):
        rate = normalizer.normalize({"price": "7.33"}, "veeqo")
        assert rate.price == 7.33

    def test_explicit_currency_overrides_default(self, normalizer):
        rate = normalizer.normalize({"price": 3, "currency": "EUR"}, "veeqo")
        assert rate.currency == "EUR"


class TestDegradedRecords:
    """Records with little or no usable data."""

    def test_empty_record_gets_placeholders(self, normalizer):
        rate = normalizer.normalize({}, "veeqo")
        assert rate.id == "veeqo_unknown_unknown"
        assert rate.carrier == "Unknown"
        assert rate.carrier_normalized == "Unknown"
        assert rate.service == "Unknown"
        assert rate.service_normalized == "Unknown"
        assert rate.price == 0
        assert rate.delivery_days is None
        assert json.dumps(rate.to_dict())

    def test_unmapped_carrier_falls_back_to_raw(self, normalizer):
        rate = normalizer.normalize({"id": "r1", "carrier": "Pony Express", "service": "Saddle"}, "easypost")
        assert rate.carrier_normalized == "Pony Express"
        assert rate.service_normalized == "Saddle"

    def test_original_record_is_kept_verbatim(self, normalizer, easypost_rate):
        snapshot = copy.deepcopy(easypost_rate)
        rate = normalizer.normalize(easypost_rate, "easypost")
        assert rate.metadata["original"] is easypost_rate
        assert easypost_rate == snapshot

    def test_negative_days_become_unknown(self, normalizer):
        rate = normalizer.normalize({"id": "r1", "delivery_days": -1}, "easypost")
        assert rate.delivery_days is None

    def test_canonical_rate_is_immutable(self, normalizer, easypost_rate):
        rate = normalizer.normalize(easypost_rate, "easypost")
        with pytest.raises(dataclasses.FrozenInstanceError):
            rate.price = 1.0


class TestProviderTags:
    def test_unknown_provider_is_a_hard_failure(self, normalizer, easypost_rate):
        with pytest.raises(UnknownProviderError) as exc_info:
            normalizer.normalize(easypost_rate, "shippo")
        assert exc_info.value.code == "UNKNOWN_PROVIDER"

    def test_tag_parsing_is_case_insensitive(self):
        assert ProviderTag.parse(" EasyPost ") == ProviderTag.EASYPOST

    def test_normalize_many_preserves_order(self, normalizer):
        raws = [{"id": "a", "rate": "3"}, {"id": "b", "rate": "1"}, {"id": "c", "rate": "2"}]
        rates = normalizer.normalize_many(raws, "easypost", {"shipment_id": "shp_1"})
        assert [r.id for r in rates] == ["a", "b", "c"]
        assert all(r.metadata["shipment_id"] == "shp_1" for r in rates)


@pytest.mark.parametrize(
    "value, expected",
    [("12.50", 12.5), (7, 7.0), (0, 0.0), (" 3.10 ", 3.1), (True, None), ("1e999", None)],
)
def test_parse_price(value, expected):
    assert parse_price(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(3, 3), ("5", 5), (2.0, 2), (2.5, None), ("soon", None), (None, None), (-2, None)],
)
def test_parse_days(value, expected):
    assert parse_days(value) == expected
