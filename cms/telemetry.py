# =============================================================================
# File: cms/telemetry.py
# Purpose: Sentry wiring (errors + performance), driven by SENTRY_DSN/APP_ENV.
# =============================================================================
from __future__ import annotations

import logging
import re

import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

log = logging.getLogger(__name__)

# Harmless noise we never want to report
IGNORED_MESSAGES = (
    "ResizeObserver loop limit exceeded",
    "Non-Error promise rejection captured",
    "Network request failed",
    "Failed to fetch",
)
IGNORED_PATTERNS = (
    re.compile(r"chrome-extension"),
    re.compile(r"moz-extension"),
    re.compile(r"safari-extension"),
    re.compile(r"webkit-extension"),
)


def sample_rate_for(environment: str) -> float:
    """10% of traces in production, everything elsewhere."""
    return 0.1 if environment == "production" else 1.0


def _event_text(event: dict) -> str:
    parts = [event.get("message") or ""]
    for exc in (event.get("exception") or {}).get("values") or []:
        parts.append(exc.get("value") or "")
    return " ".join(parts)


def before_send(event: dict, hint: dict) -> dict | None:
    """Drop known-noise events, pass everything else through."""
    text = _event_text(event)
    if any(msg in text for msg in IGNORED_MESSAGES):
        return None
    if any(p.search(text) for p in IGNORED_PATTERNS):
        return None
    return event


def init_telemetry(dsn: str | None, environment: str) -> bool:
    """Initialize Sentry if a DSN is configured. Returns True when enabled."""
    if not dsn:
        log.info("SENTRY_DSN not set, telemetry disabled")
        return False

    rate = sample_rate_for(environment)
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=rate,
        integrations=[FlaskIntegration()],
        before_send=before_send,
    )
    log.info("Sentry enabled (env=%s, traces_sample_rate=%s)", environment, rate)
    return True


def set_user_context(user) -> None:
    sentry_sdk.set_user({"id": str(user.id), "email": user.email, "username": user.name})

