import pytest

from shipgate.modules.shipping.mapping import (
    DEFAULT_CARRIER_MAPPINGS,
    DEFAULT_SERVICE_MAPPINGS,
    Canonicalizer,
)


class TestCarrierLookup:
    """Carrier name canonicalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("fedex", "FedEx"),
            ("Federal Express", "FedEx"),
            ("usps", "USPS"),
            ("Hermes", "Evri"),
            ("canada-post", "Canada Post"),
        ],
    )
    def test_known_carriers(self, canonicalizer, raw, expected):
        assert canonicalizer.canonicalize_carrier(raw) == expected

    def test_carrier_lookup_is_exact_match(self, canonicalizer):
        """Carrier keys are matched as authored; no case folding."""
        assert canonicalizer.canonicalize_carrier("FeDeX") is None

    @pytest.mark.parametrize("raw", ["", None, "Pony Express"])
    def test_unmapped_is_absent(self, canonicalizer, raw):
        assert canonicalizer.canonicalize_carrier(raw) is None

    def test_lookup_is_idempotent(self, canonicalizer):
        first = canonicalizer.canonicalize_carrier("fedex")
        assert canonicalizer.canonicalize_carrier("fedex") == first


class TestServiceLookup:
    """Composite carrier:service canonicalization."""

    def test_exact_match(self, canonicalizer):
        assert canonicalizer.canonicalize_service("UPS", "NextDayAir") == "UPS Next Day Air"

    def test_case_insensitive_fallback(self, canonicalizer):
        assert canonicalizer.canonicalize_service("fedex", "Ground") == "FedEx Ground"
        assert canonicalizer.canonicalize_service("royal mail", "TRACKED24") == "Royal Mail Tracked 24"

    def test_exact_match_wins_over_case_insensitive(self, canonicalizer):
        canonicalizer.register_service_mapping("ups", "ground", "lowercase entry")
        assert canonicalizer.canonicalize_service("ups", "ground") == "lowercase entry"
        assert canonicalizer.canonicalize_service("UPS", "Ground") == "UPS Ground"

    @pytest.mark.parametrize("carrier, service", [("", "Ground"), ("UPS", ""), (None, "Ground"), ("UPS", None)])
    def test_empty_parts_short_circuit(self, canonicalizer, carrier, service):
        assert canonicalizer.canonicalize_service(carrier, service) is None

    def test_unmapped_service(self, canonicalizer):
        assert canonicalizer.canonicalize_service("USPS", "Carrier Pigeon") is None


class TestRegistration:
    """Runtime mapping registration."""

    def test_register_carrier_mapping(self, canonicalizer):
        canonicalizer.register_carrier_mapping("Parcelforce", "Parcelforce Worldwide")
        assert canonicalizer.canonicalize_carrier("Parcelforce") == "Parcelforce Worldwide"

    def test_last_write_wins(self, canonicalizer):
        canonicalizer.register_carrier_mapping("Hermes", "Hermes UK")
        canonicalizer.register_carrier_mapping("Hermes", "Evri")
        assert canonicalizer.canonicalize_carrier("Hermes") == "Evri"

    def test_registering_twice_is_a_no_op(self, canonicalizer):
        canonicalizer.register_service_mapping("DPD", "Saturday", "DPD Saturday")
        before = canonicalizer.service_mappings()
        canonicalizer.register_service_mapping("DPD", "Saturday", "DPD Saturday")
        assert canonicalizer.service_mappings() == before

    def test_register_many_parses_composite_keys(self, canonicalizer):
        canonicalizer.register_many(
            {"Yodel": "Yodel"},
            {"Yodel:Xpress": "Yodel Xpress", "no-carrier-prefix": "ignored"},
        )
        assert canonicalizer.canonicalize_carrier("Yodel") == "Yodel"
        assert canonicalizer.canonicalize_service("Yodel", "Xpress") == "Yodel Xpress"
        assert "no-carrier-prefix" not in canonicalizer.service_mappings()

    def test_instances_do_not_share_tables(self):
        a = Canonicalizer.with_defaults()
        b = Canonicalizer.with_defaults()
        a.register_carrier_mapping("OnTrac", "OnTrac")
        assert b.canonicalize_carrier("OnTrac") is None
        assert "OnTrac" not in DEFAULT_CARRIER_MAPPINGS

    def test_defaults_are_seeded(self, canonicalizer):
        assert canonicalizer.carrier_mappings() == DEFAULT_CARRIER_MAPPINGS
        assert canonicalizer.service_mappings() == DEFAULT_SERVICE_MAPPINGS
