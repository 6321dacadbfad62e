# =============================================================================
# File: tests/conftest.py
# Purpose: Shared fixtures (temp SQLite app, session helper, users).
# =============================================================================
import os
import tempfile

import pytest

from cms import create_app
from cms.models import User
from cms.scheduler import scheduler


@pytest.fixture
def app():
    """Fresh app on a temporary SQLite file, no default seed."""
    fd, path = tempfile.mkstemp(prefix="test_db_", suffix=".sqlite")
    os.close(fd)
    app = create_app({
        "TESTING": True,
        "DATABASE_URL": f"sqlite:///{path}",
        "SEED_DEFAULTS": False,
        "SENTRY_DSN": None,
    })
    yield app
    app.extensions["store"].dispose()
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    with app.extensions["store"].session() as s:
        yield s


@pytest.fixture(autouse=True)
def _reset_scheduler():
    scheduler.stop()
    yield
    scheduler.stop()


def make_user(session, email, role="user"):
    u = User(email=email, name=email.split("@")[0], role=role)
    session.add(u)
    session.commit()
    return u
