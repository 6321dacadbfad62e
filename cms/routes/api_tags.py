# cms/routes/api_tags.py
import logging

from flask import Blueprint, jsonify

from cms.db import get_store
from cms.services.tags import list_public_tags

log = logging.getLogger(__name__)

bp = Blueprint("tags", __name__)


# -----------------------------------------------------------------
# Tags (public, no auth)
# -----------------------------------------------------------------
@bp.get("/tags")
def list_tags():
    """Active tags sorted by usage, capped at 100."""
    try:
        with get_store().session() as s:
            tags = list_public_tags(s)
    except Exception:
        log.exception("获取标签列表失败")
        return jsonify({"error": "获取标签列表失败"}), 500

    return jsonify({"tags": tags})
