"""
Shared pytest fixtures for the ScopeFlow test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test app context + table recreate (autouse)
    - client: Flask test client (function-scoped)
    - owner / other_owner: Pre-created freelancer accounts inside their trial
    - make_user: Builder for accounts with a chosen plan or trial end
    - auth_headers: Bearer JWT headers for ``owner``
    - bearer_for: Header builder for arbitrary user ids
    - project: Pre-created Project owned by ``owner``
"""

from datetime import datetime, timedelta, timezone

import pytest

from scopeflow import create_app
from scopeflow.models import db as _db
from scopeflow.models.auth import User
from scopeflow.services import jwt_service, project_service


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


def _make_user(email: str, **fields) -> User:
    # Unusable password hash; tests that log in register through the API
    fields.setdefault("trial_ends_at", datetime.now(timezone.utc) + timedelta(days=14))
    user = User(email=email, password_hash="!", full_name="Test Owner", **fields)
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture()
def owner():
    return _make_user("owner@agency.test")


@pytest.fixture()
def other_owner():
    return _make_user("someone-else@agency.test")


@pytest.fixture()
def make_user():
    """Create a user with explicit plan fields (trial defaults to active)."""
    return _make_user


def _bearer(user_id: str) -> dict:
    return {"Authorization": f"Bearer {jwt_service.generate_access_token(user_id)}"}


@pytest.fixture()
def bearer_for():
    """Build Authorization headers for any user id."""
    return _bearer


@pytest.fixture()
def auth_headers(owner):
    return _bearer(owner.id)


@pytest.fixture()
def project(owner):
    """Create and return a Project owned by ``owner`` via the service layer."""
    return project_service.create_project(
        owner.id, {"name": "Website Redesign", "client_email": "client@example.com"},
    )
