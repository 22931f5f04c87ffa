"""
Tests for settings parsing and production validation.
"""
import logging

import pytest

from config import Settings
from domain.constants import SNAP_PRODUCTION_BASE_URL, SNAP_SANDBOX_BASE_URL


def _settings(**overrides) -> Settings:
    values = {
        "midtrans_server_key": "SB-Mid-server-x",
        "midtrans_client_key": "SB-Mid-client-x",
        "cors_origins": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestParsing:

    @pytest.mark.unit
    def test_cors_list_skips_blanks(self):
        s = _settings(cors_origins="https://a.com, https://b.com,,")
        assert s.cors_origins_list == ["https://a.com", "https://b.com"]

    @pytest.mark.unit
    def test_empty_cors_disables(self):
        assert _settings(cors_origins="").cors_origins_list == []

    @pytest.mark.unit
    def test_gateway_mode_selects_host(self):
        assert _settings(midtrans_is_production=False).snap_base_url == SNAP_SANDBOX_BASE_URL
        assert _settings(midtrans_is_production=True).snap_base_url == SNAP_PRODUCTION_BASE_URL

    @pytest.mark.unit
    def test_package_prices_from_env(self, monkeypatch):
        monkeypatch.setenv("PACKAGE_PRICES", '{"Kelas Intensif": 250000}')
        assert Settings(_env_file=None).package_prices == {"Kelas Intensif": 250000}

    @pytest.mark.unit
    def test_default_catalog(self):
        assert _settings().package_prices["Muqarrar Termin 1"] == 90000


class TestProductionValidation:

    @pytest.mark.unit
    def test_valid_production(self):
        _settings(environment="production", midtrans_is_production=True,
                  cors_origins="https://nuqthah.id").validate_production_settings()

    @pytest.mark.unit
    @pytest.mark.parametrize("overrides,match", [
        ({"midtrans_server_key": ""}, "MIDTRANS_SERVER_KEY"),
        ({"midtrans_client_key": ""}, "MIDTRANS_CLIENT_KEY"),
        ({"midtrans_is_production": False}, "MIDTRANS_IS_PRODUCTION"),
        ({"cors_origins": "*"}, "CORS_ORIGINS"),
    ])
    def test_production_rejects(self, overrides, match):
        values = {"environment": "production", "midtrans_is_production": True}
        values.update(overrides)
        with pytest.raises(ValueError, match=match):
            _settings(**values).validate_production_settings()

    @pytest.mark.unit
    def test_development_only_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="config"):
            _settings(midtrans_server_key="", cors_origins="*").validate_production_settings()
        assert "MIDTRANS_SERVER_KEY" in caplog.text
        assert "CORS_ORIGINS" in caplog.text
