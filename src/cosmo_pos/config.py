"""
Utilities to centralize configuration handling for the POS terminal.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    # Supabase
    supabase_url: str
    supabase_anon_key: str
    realtime_enabled: bool
    # Local settings storage (printer/store blobs)
    local_db_url: str
    # App settings
    secret_key: str
    log_level: str
    restaurant_name: str
    tax_rate: float
    currency_symbol: str
    debug_mode: bool
    # Inventory / kitchen thresholds
    low_stock_threshold: int
    expiry_warning_days: int
    kitchen_long_wait_minutes: int
    # Receipt notifications
    notifications_simulate_success: bool
    notifications_simulated_delay: float

    @property
    def has_remote(self) -> bool:
        """True when enough Supabase credentials exist to build a client."""
        return bool(self.supabase_url and self.supabase_anon_key)


def _read_env(name: str, default: str | None = None) -> str:
    """
    Internal helper to fetch environment variables with support for defaults.
    """
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required environment variable '{name}'")
        value = default
    return value


def read_bool(name: str, default: str = "false") -> bool:
    value = _read_env(name, default)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_config(app_name: str = "cosmo-pos") -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    Supabase credentials are optional: without them the terminal runs in
    degraded mode on the built-in seed data.
    """
    return AppConfig(
        app_name=app_name,
        supabase_url=_read_env("SUPABASE_URL", ""),
        supabase_anon_key=_read_env("SUPABASE_ANON_KEY", ""),
        realtime_enabled=read_bool("REALTIME_ENABLED", "true"),
        local_db_url=_read_env("LOCAL_DB_URL", "sqlite:///cosmo_pos.db"),
        secret_key=_read_env("SECRET_KEY", "super-secret-change-me"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        restaurant_name=_read_env("RESTAURANT_NAME", "Cosmo Dumplings"),
        tax_rate=float(_read_env("TAX_RATE", "0.15")),
        currency_symbol=_read_env("CURRENCY_SYMBOL", "R"),
        debug_mode=read_bool("DEBUG_MODE", "false"),
        low_stock_threshold=int(_read_env("LOW_STOCK_THRESHOLD", "10")),
        expiry_warning_days=int(_read_env("EXPIRY_WARNING_DAYS", "7")),
        kitchen_long_wait_minutes=int(_read_env("KITCHEN_LONG_WAIT_MINUTES", "15")),
        notifications_simulate_success=read_bool("NOTIFICATIONS_SIMULATE_SUCCESS", "true"),
        notifications_simulated_delay=float(_read_env("NOTIFICATIONS_SIMULATED_DELAY", "1.5")),
    )
