"""
Centralized configuration module for application-wide settings.

Values are read from environment variables once, at import time, so every
module sees the same timezone, tax rate and package policy. Invalid values
are logged and replaced by the documented default.
"""

import logging
import os
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Environment Variables:
        TZ: Timezone identifier (e.g., 'Europe/London', 'UTC')
            Default: 'UTC'
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


APP_TZ = get_app_timezone()


def local_now() -> datetime:
    """Current wall-clock time in APP_TZ, naive like the stored datetimes."""
    return datetime.now(APP_TZ).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()


# ===========================
# Pricing Configuration
# ===========================

DEFAULT_WELLNESS_TAX_RATE = Decimal("0.08")


def get_wellness_tax_rate() -> Decimal:
    """
    Get the wellness tax rate applied after all discounts.

    Environment Variables:
        WELLNESS_TAX_RATE: decimal fraction in [0, 1), e.g. "0.08"
            Default: 0.08
    """
    raw = os.getenv("WELLNESS_TAX_RATE")
    if raw is None or raw.strip() == "":
        return DEFAULT_WELLNESS_TAX_RATE

    try:
        rate = Decimal(raw.strip())
    except InvalidOperation:
        logger.warning(
            "Invalid WELLNESS_TAX_RATE, using default",
            extra={"context": {"value": raw, "default": str(DEFAULT_WELLNESS_TAX_RATE)}},
        )
        return DEFAULT_WELLNESS_TAX_RATE

    if not rate.is_finite() or not (Decimal("0") <= rate < Decimal("1")):
        logger.warning(
            "WELLNESS_TAX_RATE out of range [0, 1), using default",
            extra={"context": {"value": raw, "default": str(DEFAULT_WELLNESS_TAX_RATE)}},
        )
        return DEFAULT_WELLNESS_TAX_RATE

    return rate


WELLNESS_TAX_RATE = get_wellness_tax_rate()


# ===========================
# Package Purchase Policy
# ===========================

SESSION_POLICY_REJECT = "reject"
SESSION_POLICY_CAP = "cap"
SESSION_POLICIES = (SESSION_POLICY_REJECT, SESSION_POLICY_CAP)


def get_package_session_policy() -> str:
    """
    What to do when a purchase asks for more sessions than the package includes.

    Environment Variables:
        PACKAGE_SESSION_POLICY: "reject" (raise SessionLimitExceeded) or
            "cap" (bill sessions_included instead)
            Default: "reject"
    """
    policy = os.getenv("PACKAGE_SESSION_POLICY", SESSION_POLICY_REJECT).strip().lower()
    if policy not in SESSION_POLICIES:
        logger.warning(
            f"Unknown PACKAGE_SESSION_POLICY '{policy}', falling back to "
            f"'{SESSION_POLICY_REJECT}'"
        )
        return SESSION_POLICY_REJECT
    return policy


PACKAGE_SESSION_POLICY = get_package_session_policy()


# ===========================
# Database / Logging
# ===========================


def get_database_url() -> str:
    """Database URL for the SQLAlchemy-backed repositories."""
    return os.getenv("DATABASE_URL", "sqlite:///./clinic.db")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def use_json_logs() -> bool:
    return os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes")


def use_file_logs() -> bool:
    """LOG_TO_FILE=true also writes JSON lines to backend/logs/clinic.log."""
    return os.getenv("LOG_TO_FILE", "false").lower() in ("true", "1", "yes")


def get_repository_backend() -> str:
    """
    Which repository implementation the Flask app wires in.

    Environment Variables:
        REPOSITORY_BACKEND: "memory" (seeded demo collections) or "sql"
            Default: "memory"
    """
    backend = os.getenv("REPOSITORY_BACKEND", "memory").strip().lower()
    if backend not in ("memory", "sql"):
        logger.warning(f"Unknown REPOSITORY_BACKEND '{backend}', using 'memory'")
        return "memory"
    return backend


def log_config():
    """Log the active configuration during application startup."""
    logger.info(
        "Clinic configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "wellness_tax_rate": str(WELLNESS_TAX_RATE),
                "package_session_policy": PACKAGE_SESSION_POLICY,
                "repository_backend": get_repository_backend(),
            }
        },
    )
