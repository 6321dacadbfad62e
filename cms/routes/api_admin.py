# cms/routes/api_admin.py
from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from cms.auth import admin_required
from cms.db import get_store
from cms.projections import parameter_to_dict
from cms.scheduler import start_scheduler
from cms.services.parameters import (
    ParameterValueError,
    batch_update,
    get_all_grouped,
    get_by_category,
    reset_to_defaults,
)

log = logging.getLogger(__name__)

bp = Blueprint("admin_api", __name__)


# -----------------------------------------------------------------
# Scheduler
# -----------------------------------------------------------------
@bp.post("/admin/scheduler/init")
@admin_required
def scheduler_init():
    """Start the task scheduler (safe to call on every admin page load)."""
    try:
        with get_store().session() as s:
            result = start_scheduler(s)
    except Exception:
        log.exception("初始化调度器失败")
        return jsonify({"error": "初始化调度器失败"}), 500

    return jsonify({
        "message": "调度器初始化成功",
        "started": result["started"],
        "already_running": result["already_running"],
    })


# -----------------------------------------------------------------
# System parameters (admin view)
# -----------------------------------------------------------------
@bp.get("/admin/system-parameters")
@admin_required
def admin_list_parameters():
    """Full parameter records grouped by category (?category= keeps just one)."""
    category = (request.args.get("category") or "").strip()
    try:
        with get_store().session() as s:
            if category:
                grouped = {category: get_by_category(s, category)}
            else:
                grouped = get_all_grouped(s)
            payload = {
                name: [parameter_to_dict(p) for p in rows]
                for name, rows in grouped.items()
            }
    except Exception:
        log.exception("获取系统参数失败")
        return jsonify({"error": "获取系统参数失败"}), 500

    return jsonify({"success": True, "parameters": payload})


@bp.put("/admin/system-parameters")
@admin_required
def admin_update_parameters():
    """
    Body: {"parameters": [{"key": "...", "value": ...}, ...]}
    All-or-nothing: one invalid value rejects the whole batch (400).
    """
    data = request.get_json(silent=True)
    updates = data.get("parameters") if isinstance(data, dict) else None
    if not isinstance(updates, list) or not updates:
        return jsonify({"error": "parameters_required"}), 400

    try:
        with get_store().session() as s:
            n = batch_update(s, updates)
            s.commit()
    except ParameterValueError as e:
        return jsonify({"error": "invalid_parameter", "detail": str(e)}), 400
    except Exception:
        log.exception("更新系统参数失败")
        return jsonify({"error": "更新系统参数失败"}), 500

    return jsonify({"success": True, "updated": n})


@bp.post("/admin/system-parameters/reset")
@admin_required
def admin_reset_parameters():
    try:
        with get_store().session() as s:
            n = reset_to_defaults(s)
            s.commit()
    except Exception:
        log.exception("重置系统参数失败")
        return jsonify({"error": "重置系统参数失败"}), 500

    return jsonify({"success": True, "reset": n})
