"""
Centralized configuration with environment variable overrides.

The slot template, reward amounts, retry policy, and API binding are
configurable here. Nothing is hardcoded in scheduling or ledger logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from pawvisit.logging_context import install_request_id_filter

load_dotenv()

logger = logging.getLogger(__name__)

MISSING_HOURS_POLICIES = ("open", "closed")

LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"


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


@dataclass(frozen=True)
class SchedulingConfig:
    """Daily slot template bounds and the missing-hours fallback."""

    slot_first_hour: int = _safe_int("SLOT_FIRST_HOUR", "9")
    slot_last_hour: int = _safe_int("SLOT_LAST_HOUR", "18")
    missing_hours_policy: str = os.getenv("MISSING_HOURS_POLICY", "open").strip().lower()


@dataclass(frozen=True)
class RewardsConfig:
    """Points awarded per action and the level divisor."""

    feedback_points: int = _safe_int("REWARDS_FEEDBACK_POINTS", "50")
    points_per_level: int = _safe_int("POINTS_PER_LEVEL", "100")


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy for read-only queries against the persistence boundary."""

    read_attempts: int = _safe_int("READ_RETRY_ATTEMPTS", "2")
    read_backoff_sec: float = _safe_float("READ_RETRY_BACKOFF_SEC", "0.2")


@dataclass(frozen=True)
class ApiConfig:
    """HTTP server binding."""

    host: str = os.getenv("API_HOST", "127.0.0.1")
    port: int = _safe_int("API_PORT", "8000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    rewards: RewardsConfig = field(default_factory=RewardsConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "pawvisit")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    scheduling = config.scheduling
    if not 0 <= scheduling.slot_first_hour <= 23:
        raise ValueError(
            f"SLOT_FIRST_HOUR must be between 0 and 23, got {scheduling.slot_first_hour}"
        )
    if not scheduling.slot_first_hour <= scheduling.slot_last_hour <= 23:
        raise ValueError(
            "SLOT_LAST_HOUR must be between SLOT_FIRST_HOUR and 23, "
            f"got {scheduling.slot_last_hour}"
        )
    if scheduling.missing_hours_policy not in MISSING_HOURS_POLICIES:
        raise ValueError(
            f"MISSING_HOURS_POLICY must be one of {MISSING_HOURS_POLICIES}, "
            f"got {scheduling.missing_hours_policy!r}"
        )

    if config.rewards.feedback_points < 1:
        raise ValueError(
            f"REWARDS_FEEDBACK_POINTS must be >= 1, got {config.rewards.feedback_points}"
        )
    if config.rewards.points_per_level < 1:
        raise ValueError(
            f"POINTS_PER_LEVEL must be >= 1, got {config.rewards.points_per_level}"
        )

    if config.retry.read_attempts < 1:
        raise ValueError(
            f"READ_RETRY_ATTEMPTS must be >= 1, got {config.retry.read_attempts}"
        )
    if config.retry.read_backoff_sec < 0:
        raise ValueError(
            f"READ_RETRY_BACKOFF_SEC must be >= 0, got {config.retry.read_backoff_sec}"
        )

    if not 1 <= config.api.port <= 65535:
        raise ValueError(f"API_PORT must be between 1 and 65535, got {config.api.port}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_request_id_filter(logging.getLogger())
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
