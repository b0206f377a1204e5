import pytest
from pydantic import ValidationError

from shipgate.api.deps import build_canonicalizer
from shipgate.core.config import DEFAULT_PROVIDERS, Settings


def test_enabled_providers_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("ENABLED_PROVIDERS", "Veeqo, EASYPOST")
    assert Settings().ENABLED_PROVIDERS == ["veeqo", "easypost"]


def test_enabled_providers_from_json_env(monkeypatch):
    monkeypatch.setenv("ENABLED_PROVIDERS", '["easypost"]')
    assert Settings().ENABLED_PROVIDERS == ["easypost"]


def test_blank_enabled_providers_uses_defaults(monkeypatch):
    monkeypatch.setenv("ENABLED_PROVIDERS", "")
    assert Settings().ENABLED_PROVIDERS == DEFAULT_PROVIDERS


def test_extra_mappings_seed_the_canonicalizer(monkeypatch):
    monkeypatch.setenv("EXTRA_CARRIER_MAPPINGS", '{"Parcelforce": "Parcelforce Worldwide"}')
    monkeypatch.setenv("EXTRA_SERVICE_MAPPINGS", '{"UPS:Saver": "UPS Worldwide Saver"}')

    canonicalizer = build_canonicalizer(Settings())

    assert canonicalizer.canonicalize_carrier("Parcelforce") == "Parcelforce Worldwide"
    assert canonicalizer.canonicalize_service("UPS", "Saver") == "UPS Worldwide Saver"
    assert canonicalizer.canonicalize_carrier("fedex") == "FedEx"


def test_production_rejects_debug(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    with pytest.raises(ValidationError):
        Settings(DEBUG=True)


def test_production_rejects_wildcard_cors(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    with pytest.raises(ValidationError):
        Settings(CORS_ORIGINS="*")


def test_production_defaults_are_valid(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    config = Settings()
    assert config.DEBUG is False
    assert config.HISTORY_ENABLED is True
