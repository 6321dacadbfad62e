# cms/auth.py
from functools import wraps

from flask import request, current_app, jsonify, abort

from .db import get_store
from .models import User
from .telemetry import set_user_context


def get_current_user(session):
    """Récupère l'utilisateur courant via le cookie 'user_id'."""
    uid = request.cookies.get("user_id")
    if not uid:
        return None
    try:
        uid = int(uid)
    except ValueError:
        return None
    return session.get(User, uid)


def admin_required(view_func):
    """
    Ensure, for JSON endpoints:
    - ADMIN_ENABLED config flag is True (else 404)
    - a user is logged in (else 401)
    - that user is admin or moderator (else 403)
    """
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if not current_app.config.get("ADMIN_ENABLED", False):
            abort(404)

        with get_store().session() as s:
            user = get_current_user(s)
            if not user:
                return jsonify({"error": "not_authenticated"}), 401
            if not user.is_staff:
                return jsonify({"error": "forbidden"}), 403
            set_user_context(user)

        return view_func(*args, **kwargs)

    return wrapper
