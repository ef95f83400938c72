from pathlib import Path

import pytest

from checkout_api.config import ConfigError, Settings


def test_defaults():
    s = Settings.from_env({})
    assert s.paypal_environment == "sandbox"
    assert s.paypal_timeout_seconds == 30.0
    assert s.catalog_path == Path("products.json")
    assert s.catalog_timeout_seconds is None
    assert s.cors_origins == ("*",)
    assert s.port == 3000
    assert s.log_json is False


def test_reads_environment():
    s = Settings.from_env(
        {
            "PAYPAL_CLIENT_ID": "id",
            "PAYPAL_CLIENT_SECRET": "secret",
            "PAYPAL_ENVIRONMENT": "LIVE",
            "CATALOG_PATH": "/srv/catalog.json",
            "CATALOG_TIMEOUT_SECONDS": "2.5",
            "CORS_ORIGINS": "https://shop.example, https://admin.example",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
            "LOG_JSON": "true",
        }
    )
    assert s.paypal_client_id == "id"
    assert s.paypal_environment == "live"
    assert s.catalog_path == Path("/srv/catalog.json")
    assert s.catalog_timeout_seconds == 2.5
    assert s.cors_origins == ("https://shop.example", "https://admin.example")
    assert s.port == 8080
    assert s.log_level == "DEBUG"
    assert s.log_json is True


@pytest.mark.parametrize(
    "env",
    [
        {"PAYPAL_ENVIRONMENT": "production"},
        {"PAYPAL_TIMEOUT_SECONDS": "soon"},
        {"PAYPAL_TIMEOUT_SECONDS": "0"},
        {"CATALOG_TIMEOUT_SECONDS": "-1"},
        {"PORT": "http"},
        {"PORT": "70000"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ConfigError):
        Settings.from_env(env)
