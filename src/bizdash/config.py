from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional
import json
import os
import sys

from bizdash.domain.errors import ConfigError


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    settings_path: Path
    logs_dir: Path


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "BusinessDashboard") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, settings_path=base / "settings.json", logs_dir=logs)


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:8000/api"
    api_token: str = ""
    request_timeout: float = 10.0
    expense_rate: float = 0.10
    low_stock_threshold: int = 20
    use_product_min_stock: bool = False
    sale_date_field: str = "sale_date"
    purchase_date_field: str = "purchase_date"
    top_products_limit: int = 10
    monthly_trend_limit: int = 4


ENV_VARS = {
    "BIZDASH_API_BASE_URL": "api_base_url",
    "BIZDASH_API_TOKEN": "api_token",
    "BIZDASH_REQUEST_TIMEOUT": "request_timeout",
    "BIZDASH_EXPENSE_RATE": "expense_rate",
    "BIZDASH_LOW_STOCK_THRESHOLD": "low_stock_threshold",
    "BIZDASH_USE_MIN_STOCK": "use_product_min_stock",
    "BIZDASH_SALE_DATE_FIELD": "sale_date_field",
    "BIZDASH_PURCHASE_DATE_FIELD": "purchase_date_field",
}

SALE_DATE_FIELDS = ("sale_date", "invoice_date", "date", "created_at")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _coerce(name: str, kind: type, value: object) -> object:
    try:
        if kind is bool:
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(value)
        if kind is int:
            return int(str(value).strip())
        if kind is float:
            return float(str(value).strip())
        return str(value).strip()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e


def _validate(settings: Settings) -> Settings:
    if not settings.api_base_url.startswith(("http://", "https://")):
        raise ConfigError("api_base_url must be an http(s) URL.")
    if settings.request_timeout <= 0:
        raise ConfigError("request_timeout must be > 0.")
    if not 0 <= settings.expense_rate < 1:
        raise ConfigError("expense_rate must be in [0, 1).")
    if settings.low_stock_threshold < 0:
        raise ConfigError("low_stock_threshold must be >= 0.")
    if settings.sale_date_field not in SALE_DATE_FIELDS:
        raise ConfigError(f"sale_date_field must be one of {', '.join(SALE_DATE_FIELDS)}.")
    if settings.top_products_limit <= 0 or settings.monthly_trend_limit <= 0:
        raise ConfigError("Report limits must be >= 1.")
    return replace(settings, api_base_url=settings.api_base_url.rstrip("/"))


def load_settings(path: Path | str | None = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Defaults, then the JSON settings file (if present), then BIZDASH_* env vars.
    """
    env = os.environ if env is None else env
    kinds = {f.name: type(getattr(Settings(), f.name)) for f in fields(Settings)}
    values: dict[str, object] = {}

    if path is not None and Path(path).exists():
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read settings file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Settings file must contain a JSON object.")
        for key, raw in data.items():
            if key not in kinds:
                raise ConfigError(f"Unknown setting: {key}")
            values[key] = _coerce(key, kinds[key], raw)

    for var, key in ENV_VARS.items():
        if var in env:
            values[key] = _coerce(var, kinds[key], env[var])

    return _validate(Settings(**values))


_current: Settings | None = None


def init_settings(settings: Settings) -> Settings:
    global _current
    _current = settings
    return settings


def get_settings() -> Settings:
    if _current is None:
        raise ConfigError("Settings not initialized. Call init_settings() at startup.")
    return _current
