# cms/routes/api_system_parameters.py
import logging

from flask import Blueprint, jsonify

from cms.db import get_store
from cms.services.parameters import get_parameters_map

log = logging.getLogger(__name__)

bp = Blueprint("system_parameters", __name__)


# -----------------------------------------------------------------
# System parameters (public, no auth)
# -----------------------------------------------------------------
@bp.get("/system-parameters")
def get_system_parameters():
    """Return every parameter as a flat {key: value} mapping."""
    try:
        with get_store().session() as s:
            parameters = get_parameters_map(s)
    except Exception:
        log.exception("获取系统参数失败")
        return jsonify({"error": "获取系统参数失败"}), 500

    return jsonify({"success": True, "parameters": parameters})
