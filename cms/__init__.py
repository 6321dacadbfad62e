# cms/__init__.py
from flask import Flask

from .config import load_config
from .db import init_db
from .frontend import frontend_bp
from .routes import register_routes
from .seed import ensure_parameters_seeded
from .telemetry import init_telemetry
from .theme import register_theme


def create_app(config: dict | None = None) -> Flask:
    app = Flask(__name__)

    app.config.update(load_config())
    if config:
        app.config.update(config)

    init_telemetry(app.config.get("SENTRY_DSN"), app.config["APP_ENV"])

    store = init_db(app)
    if app.config.get("SEED_DEFAULTS", True):
        ensure_parameters_seeded(store)

    register_theme(app)
    register_routes(app)
    app.register_blueprint(frontend_bp)

    return app
