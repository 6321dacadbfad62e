# =============================================================================
# File: cms/config.py
# Purpose: Read runtime settings from the environment (.env supported).
# =============================================================================
from __future__ import annotations

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}


def env_bool(name: str, default: bool) -> bool:
    """Parse a boolean env var ("1", "true", "yes", "on" are truthy)."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


def load_config() -> dict:
    """Return the base config mapping, before create_app overrides."""
    from .theme import ThemeConfig

    return {
        "DATABASE_URL": os.getenv("DATABASE_URL", "sqlite:///cms.db"),
        "APP_ENV": os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "development",
        "SENTRY_DSN": os.getenv("SENTRY_DSN") or None,
        "ADMIN_ENABLED": env_bool("ADMIN_ENABLED", True),
        "SCHEDULER_INIT_URL": os.getenv(
            "SCHEDULER_INIT_URL", "/api/admin/scheduler/init"
        ),
        "SEED_DEFAULTS": env_bool("SEED_DEFAULTS", True),
        "THEME": ThemeConfig.from_env(),
    }
