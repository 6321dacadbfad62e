# cms/routes/api_misc.py
from flask import Blueprint, jsonify

bp = Blueprint("misc", __name__)


@bp.get("/health")
def health():
    """Simple health endpoint used by tests."""
    return jsonify({"status": "ok"})
