# =============================================================================
# File: cms/routes/__init__.py
# Purpose: Regrouper et enregistrer tous les blueprints API.
# =============================================================================
from __future__ import annotations

from flask import Flask

from .api_system_parameters import bp as system_parameters_bp
from .api_tags import bp as tags_bp
from .api_admin import bp as admin_api_bp
from .api_misc import bp as misc_bp

def register_routes(app: Flask) -> None:
    """Enregistre tous les blueprints API sur l'app Flask."""
    app.register_blueprint(system_parameters_bp, url_prefix="/api")
    app.register_blueprint(tags_bp,              url_prefix="/api")
    app.register_blueprint(admin_api_bp,         url_prefix="/api")
    app.register_blueprint(misc_bp,              url_prefix="/api")
