# =============================================================================
# File: cms/services/tags.py
# Purpose: Public tag listing.
# =============================================================================
from __future__ import annotations

from sqlalchemy.orm import Session

from cms.models import Tag
from cms.projections import tag_to_public

# Highest-usage tags are kept, the rest is dropped (no pagination)
PUBLIC_TAG_LIMIT = 100


def list_public_tags(session: Session, limit: int = PUBLIC_TAG_LIMIT) -> list[dict]:
    """Active tags, most used first, then by name."""
    rows = (
        session.query(Tag)
        .filter(Tag.is_active.is_(True))
        .order_by(Tag.post_count.desc(), Tag.name.asc())
        .limit(limit)
        .all()
    )
    return [tag_to_public(t) for t in rows]

