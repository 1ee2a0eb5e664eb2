"""
OC Watch Bot - Configuration Module
===================================

Environment validation, named constants and persisted config keys.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ocbot.core.logger import logger


# =============================================================================
# Configuration Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


@dataclass
class ConfigValidationResult:
    """Result of configuration validation."""
    valid: bool
    missing_required: list[str] = field(default_factory=list)
    missing_optional: list[str] = field(default_factory=list)
    invalid_format: list[tuple[str, str]] = field(default_factory=list)


# Bot refuses to start without these
REQUIRED_ENV_VARS: list[str] = [
    "DISCORD_TOKEN",
]

OPTIONAL_ENV_VARS: dict[str, str] = {
    "TORN_API_KEY": "Default Torn API key (otherwise set with !setapikey)",
    "OC_DB_PATH": "SQLite database location",
}


def validate_config() -> ConfigValidationResult:
    """Check required and optional environment variables."""
    result = ConfigValidationResult(valid=True)

    for var in REQUIRED_ENV_VARS:
        if not os.getenv(var):
            result.missing_required.append(var)
            result.valid = False

    for var in OPTIONAL_ENV_VARS:
        if not os.getenv(var):
            result.missing_optional.append(var)

    # A malformed default key is not fatal; its fetches fail and get logged
    api_key = os.getenv("TORN_API_KEY")
    if api_key and not api_key.isalnum():
        result.invalid_format.append(("TORN_API_KEY", "Must be alphanumeric"))

    return result


def validate_and_log_config() -> None:
    """
    Validate configuration and log results.

    Raises:
        ConfigValidationError: If required configuration is missing.
            Malformed optional values are only warned about.
    """
    result = validate_config()

    for var in result.missing_required:
        logger.error("Missing Required Configuration", [
            ("Variable", var),
            ("Action", f"Add {var}=<value> to your .env file"),
        ])

    for var, reason in result.invalid_format:
        logger.warning("Invalid Configuration Format", [
            ("Variable", var),
            ("Reason", reason),
            ("Effect", "Torn fetches with this key will fail"),
        ])

    if "TORN_API_KEY" in result.missing_optional:
        logger.info("No Default Torn API Key", [
            ("Fallback", "Stored key from !setapikey"),
        ])

    if not result.valid:
        raise ConfigValidationError(
            f"Missing required config: {', '.join(result.missing_required)}"
        )

    logger.info("Configuration Validated Successfully", [
        ("Required", f"{len(REQUIRED_ENV_VARS)} OK"),
        ("Optional", f"{len(OPTIONAL_ENV_VARS) - len(result.missing_optional)}/{len(OPTIONAL_ENV_VARS)} configured"),
    ])


def load_default_api_key() -> Optional[str]:
    """Torn API key from the environment, or None to fall back to the store."""
    return os.getenv("TORN_API_KEY") or None


def load_db_path() -> Path:
    """Database file location, overridable with OC_DB_PATH."""
    override = os.getenv("OC_DB_PATH")
    if override:
        return Path(override)
    return Path(__file__).parent.parent.parent / "data" / "ocwatch.db"


# =============================================================================
# Time Constants
# =============================================================================

SECONDS_PER_MINUTE: int = 60
SECONDS_PER_HOUR: int = 3600
SECONDS_PER_DAY: int = 86400


# =============================================================================
# OC Tracking
# =============================================================================

UPDATE_INTERVAL_SECONDS: int = SECONDS_PER_MINUTE
ALERT_THRESHOLD_SECONDS: int = SECONDS_PER_DAY  # Out of OC this long triggers an alert
ALERT_COOLDOWN_SECONDS: int = SECONDS_PER_DAY  # Minimum spacing between alerts per member
ALERT_REACTION_WINDOW_SECONDS: float = 300.0


# =============================================================================
# Persisted Config Keys
# =============================================================================

CONFIG_KEY_API_KEY: str = "torn_api_key"
CONFIG_KEY_UPDATE_CHANNEL: str = "update_channel"
CONFIG_KEY_UPDATE_MESSAGE: str = "update_message"


# =============================================================================
# Network Constants
# =============================================================================

TORN_API_BASE_URL: str = "https://api.torn.com/v2"
NETWORK_TIMEOUT: int = 10  # seconds
DATABASE_TIMEOUT: float = 10.0  # seconds


# =============================================================================
# Discord Limits & Timing
# =============================================================================

DISCORD_MESSAGE_LIMIT: int = 2000
REACTION_DELAY: float = 0.3
SERVICE_INIT_TIMEOUT: float = 30.0
COMMAND_SYNC_TIMEOUT: float = 30.0


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "ConfigValidationError",
    "ConfigValidationResult",
    "validate_config",
    "validate_and_log_config",
    "load_default_api_key",
    "load_db_path",
    "SECONDS_PER_MINUTE",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_DAY",
    "UPDATE_INTERVAL_SECONDS",
    "ALERT_THRESHOLD_SECONDS",
    "ALERT_COOLDOWN_SECONDS",
    "ALERT_REACTION_WINDOW_SECONDS",
    "CONFIG_KEY_API_KEY",
    "CONFIG_KEY_UPDATE_CHANNEL",
    "CONFIG_KEY_UPDATE_MESSAGE",
    "TORN_API_BASE_URL",
    "NETWORK_TIMEOUT",
    "DATABASE_TIMEOUT",
    "DISCORD_MESSAGE_LIMIT",
    "REACTION_DELAY",
    "SERVICE_INIT_TIMEOUT",
    "COMMAND_SYNC_TIMEOUT",
]
