"""
Centralized configuration with environment variable overrides.

Broadcast timings, booking defaults and backend client settings are
configurable here. Nothing is hardcoded in router or screen logic.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _optional_int(env_var: str) -> Optional[int]:
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return None
    return _safe_int(env_var, raw)


@dataclass(frozen=True)
class BroadcastConfig:
    """Timings for the simulated center broadcast."""

    resolution_delay_sec: float = _safe_float("BROADCAST_RESOLUTION_DELAY_SEC", "7.0")
    tick_interval_sec: float = _safe_float("BROADCAST_TICK_INTERVAL_SEC", "1.0")
    random_seed: Optional[int] = _optional_int("BROADCAST_RANDOM_SEED")


@dataclass(frozen=True)
class BookingConfig:
    """Booking defaults shown on summaries and used for payment amounts."""

    default_service_name: str = os.getenv("DEFAULT_SERVICE_NAME", "Car Wash")
    currency: str = os.getenv("CURRENCY", "GBP")
    default_wash_price: float = _safe_float("DEFAULT_WASH_PRICE", "15.0")
    fallback_location_label: str = os.getenv("FALLBACK_LOCATION_LABEL", "Current location")


@dataclass(frozen=True)
class BackendConfig:
    """Settings for the in-memory backend used by the demo and tests."""

    center_cache_sec: int = _safe_int("CENTER_CACHE_SEC", "300")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "washflow")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.broadcast.resolution_delay_sec <= 0:
        raise ValueError(
            "BROADCAST_RESOLUTION_DELAY_SEC must be > 0, "
            f"got {config.broadcast.resolution_delay_sec}"
        )
    if config.broadcast.tick_interval_sec <= 0:
        raise ValueError(
            "BROADCAST_TICK_INTERVAL_SEC must be > 0, "
            f"got {config.broadcast.tick_interval_sec}"
        )
    if config.booking.default_wash_price < 0:
        raise ValueError(
            f"DEFAULT_WASH_PRICE must be >= 0, got {config.booking.default_wash_price}"
        )
    if not config.booking.currency.strip():
        raise ValueError("CURRENCY must not be empty")
    if config.backend.center_cache_sec < 0:
        raise ValueError(
            f"CENTER_CACHE_SEC must be >= 0, got {config.backend.center_cache_sec}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
