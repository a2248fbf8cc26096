"""Tests for Settings -> per-collaborator config."""

import pytest

from config.settings import Settings
from src.mb_common.errors import ConfigurationError


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "BACKEND_WALLET_ADDRESS": None,
        "ENGINE_URL": None,
        "THIRDWEB_SECRET_KEY": None,
        "MERCADOPAGO_ACCESS_TOKEN": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


class TestEngineConfig:
    def test_all_missing(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            _settings().engine_config()
        assert exc_info.value.missing == [
            "BACKEND_WALLET_ADDRESS", "ENGINE_URL", "THIRDWEB_SECRET_KEY",
        ]
        assert exc_info.value.http_status == 500

    def test_builds(self) -> None:
        config = _settings(
            BACKEND_WALLET_ADDRESS="0xBACKEND",
            ENGINE_URL="https://engine.test/",
            THIRDWEB_SECRET_KEY="sk",
        ).engine_config()
        assert config.base_url == "https://engine.test"
        assert config.chain_id == 84532
        assert config.poll_max_attempts == 15


class TestPaymentConfig:
    def test_missing_token(self) -> None:
        s = _settings()
        assert s.missing_payment_settings() == ["MERCADOPAGO_ACCESS_TOKEN"]
        with pytest.raises(ConfigurationError):
            s.payment_config()

    def test_builds(self) -> None:
        config = _settings(MERCADOPAGO_ACCESS_TOKEN="APP_USR-1").payment_config()
        assert config.access_token == "APP_USR-1"
        assert config.base_url == "https://api.mercadopago.com"
