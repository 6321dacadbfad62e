# =============================================================================
# File: cms/projections.py
# Purpose: Turn ORM rows into the JSON shapes returned by the API.
# =============================================================================
from __future__ import annotations

from typing import Any, Iterable

from .models import SystemParameter, Tag

# ORM attribute -> public JSON key, for /api/tags
TAG_PUBLIC_FIELDS = (
    ("id", "_id"),
    ("name", "name"),
    ("description", "description"),
    ("color", "color"),
    ("post_count", "usageCount"),
)


def parameters_to_map(rows: Iterable[SystemParameter]) -> dict[str, Any]:
    """Fold parameters into {key: value}.

    Rows are consumed in the order given, so on a duplicate key the last
    row wins. Callers pass them sorted by (category, key).
    """
    mapping: dict[str, Any] = {}
    for p in rows:
        mapping[p.key] = p.value
    return mapping


def tag_to_public(tag: Tag) -> dict:
    return {public: getattr(tag, attr) for attr, public in TAG_PUBLIC_FIELDS}


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def parameter_to_dict(p: SystemParameter) -> dict:
    # Full record, for the admin settings screen
    return {
        "_id": p.id,
        "key": p.key,
        "name": p.name,
        "description": p.description,
        "value": p.value,
        "type": p.type,
        "category": p.category,
        "options": p.options or [],
        "min": p.min,
        "max": p.max,
        "unit": p.unit,
        "isRequired": p.is_required,
        "isEditable": p.is_editable,
        "defaultValue": p.default_value,
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }
