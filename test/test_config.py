import json
from pathlib import Path

import pytest

from bizdash import config
from bizdash.config import Settings, get_settings, init_settings, load_settings
from bizdash.domain.errors import ConfigError


def test_defaults_without_file_or_env():
    s = load_settings(None, env={})
    assert s == Settings()
    assert s.api_token == ""
    assert s.expense_rate == 0.10
    assert s.low_stock_threshold == 20


def test_file_then_env_override(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "api_base_url": "https://shop.example.com/api/",
        "low_stock_threshold": 15,
        "expense_rate": 0.12,
    }), encoding="utf-8")

    s = load_settings(path, env={"BIZDASH_LOW_STOCK_THRESHOLD": "5", "BIZDASH_API_TOKEN": "abc", "BIZDASH_USE_MIN_STOCK": "yes"})

    assert s.api_base_url == "https://shop.example.com/api"
    assert s.low_stock_threshold == 5
    assert s.expense_rate == pytest.approx(0.12)
    assert s.api_token == "abc"
    assert s.use_product_min_stock is True


def test_missing_file_falls_back_to_defaults(tmp_path: Path):
    assert load_settings(tmp_path / "nope.json", env={}) == Settings()


@pytest.mark.parametrize(
    "env, message",
    [
        ({"BIZDASH_EXPENSE_RATE": "1.5"}, "expense_rate"),
        ({"BIZDASH_REQUEST_TIMEOUT": "0"}, "request_timeout"),
        ({"BIZDASH_LOW_STOCK_THRESHOLD": "many"}, "Invalid value"),
        ({"BIZDASH_USE_MIN_STOCK": "maybe"}, "Invalid value"),
        ({"BIZDASH_API_BASE_URL": "ftp://x"}, "http"),
        ({"BIZDASH_SALE_DATE_FIELD": "when"}, "sale_date_field"),
    ],
)
def test_invalid_values_raise_config_error(env, message):
    with pytest.raises(ConfigError, match=message):
        load_settings(None, env=env)


def test_unknown_key_in_file(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
    with pytest.raises(ConfigError, match="Unknown setting"):
        load_settings(path, env={})


def test_broken_json_file(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Cannot read settings file"):
        load_settings(path, env={})


def test_get_settings_requires_init(monkeypatch):
    monkeypatch.setattr(config, "_current", None)
    with pytest.raises(ConfigError, match="not initialized"):
        get_settings()

    s = init_settings(Settings(low_stock_threshold=7))
    assert get_settings() is s
