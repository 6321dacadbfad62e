# =============================================================================
# File: cms/services/parameters.py
# Purpose: Read/update system parameters (centralized logic).
# =============================================================================
from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any, Iterable

from sqlalchemy.orm import Session

from cms.models import SystemParameter
from cms.projections import parameters_to_map

log = logging.getLogger(__name__)


class ParameterValueError(ValueError):
    """Raised when a parameter definition or value breaks its type rules."""


def _utcnow() -> dt.datetime:
    # naive UTC, like every DateTime column
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def list_parameters(session: Session) -> list[SystemParameter]:
    """All parameters, ordered by category then key."""
    return (
        session.query(SystemParameter)
        .order_by(SystemParameter.category.asc(), SystemParameter.key.asc())
        .all()
    )


def get_parameters_map(session: Session) -> dict[str, Any]:
    return parameters_to_map(list_parameters(session))


def get_by_category(session: Session, category: str) -> list[SystemParameter]:
    return (
        session.query(SystemParameter)
        .filter_by(category=category)
        .order_by(SystemParameter.key.asc())
        .all()
    )


def get_all_grouped(session: Session) -> dict[str, list[SystemParameter]]:
    """Parameters grouped by category, categories in sorted order."""
    grouped: dict[str, list[SystemParameter]] = {}
    for p in list_parameters(session):
        grouped.setdefault(p.category, []).append(p)
    return grouped


def _is_number(value: Any) -> bool:
    # bool is an int subclass, but True is not a valid "number" value
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    # NaN/Infinity have no JSON encoding
    return math.isfinite(value)


def _json_safe(value: Any) -> bool:
    """False if a NaN/Infinity float hides anywhere inside value."""
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, list):
        return all(_json_safe(v) for v in value)
    if isinstance(value, dict):
        return all(_json_safe(v) for v in value.values())
    return True


def validate_value(param: SystemParameter, value: Any) -> bool:
    """Check a candidate value against the parameter's type rules."""
    kind = param.type
    if kind == "string":
        return isinstance(value, str)
    if kind == "number":
        if not _is_number(value):
            return False
        if param.min is not None and value < param.min:
            return False
        if param.max is not None and value > param.max:
            return False
        return True
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "array":
        return isinstance(value, list) and _json_safe(value)
    if kind == "select":
        return bool(param.options) and value in param.options
    return False


def validate_definition(param: SystemParameter) -> None:
    """
    Raise ParameterValueError if the definition itself is inconsistent.

    - number: when both bounds are set, min must be < max
    - select: options must not be empty
    """
    if param.type == "number" and param.min is not None and param.max is not None:
        if param.min >= param.max:
            raise ParameterValueError(
                f"{param.key}: min ({param.min}) must be lower than max ({param.max})"
            )
    if param.type == "select" and not param.options:
        raise ParameterValueError(f"{param.key}: select parameters need options")


def batch_update(session: Session, updates: Iterable[dict]) -> int:
    """
    Apply [{"key": ..., "value": ...}, ...] in one go.

    Every update is validated before anything is written; an unknown key
    or an invalid value aborts the whole batch. No commit here: let the
    caller decide when to commit.
    """
    updates = list(updates)
    for u in updates:
        if not isinstance(u, dict) or not isinstance(u.get("key"), str):
            raise ParameterValueError(f"malformed update: {u!r}")

    keys = [u["key"] for u in updates]
    rows = session.query(SystemParameter).filter(SystemParameter.key.in_(keys)).all()
    by_key = {p.key: p for p in rows}

    for u in updates:
        param = by_key.get(u.get("key"))
        if param is None:
            raise ParameterValueError(f"unknown parameter: {u.get('key')!r}")
        if not validate_value(param, u.get("value")):
            raise ParameterValueError(
                f"{param.key}: invalid value {u.get('value')!r} for type {param.type}"
            )

    now = _utcnow()
    for u in updates:
        param = by_key[u["key"]]
        param.value = u["value"]
        param.updated_at = now

    log.info("batch_update: %s parameters updated", len(updates))
    return len(updates)


def reset_to_defaults(session: Session) -> int:
    """Put every parameter that has a default_value back to it."""
    rows = (
        session.query(SystemParameter)
        .filter(SystemParameter.default_value.isnot(None))
        .all()
    )
    now = _utcnow()
    changed = 0
    for p in rows:
        # JSON null can still sneak in as a Python None
        if p.default_value is None:
            continue
        p.value = p.default_value
        p.updated_at = now
        changed += 1
    return changed
