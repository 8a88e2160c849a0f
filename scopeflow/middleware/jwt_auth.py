"""
JWT Auth Middleware — parses the JWT from the Authorization header, sets g.jwt_user_id.

The middleware never rejects a request itself: owner endpoints are guarded by
``@login_required``; client portal and health endpoints need no principal.
"""

import functools
import logging

import jwt as pyjwt
from flask import g, request

from scopeflow.core.exceptions import UnauthorizedError
from scopeflow.models import db
from scopeflow.models.auth import User
from scopeflow.services.jwt_service import decode_access_token

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/client/",
    "/api/v1/health",
)


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.jwt_user_id = None

        path = request.path
        if not path.startswith("/api/v1/"):
            return
        if path.startswith(JWT_SKIP_PREFIXES):
            return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return

        token = auth_header[7:]  # Strip "Bearer "
        try:
            payload = decode_access_token(token)
            g.jwt_user_id = payload.get("sub")
        except pyjwt.ExpiredSignatureError:
            logger.info("Expired access token on %s", path)
        except pyjwt.InvalidTokenError:
            logger.info("Invalid access token on %s", path)


def current_user_id() -> str:
    """Authenticated owner id. Raises UnauthorizedError when absent."""
    user_id = getattr(g, "jwt_user_id", None)
    if not user_id:
        raise UnauthorizedError("Authentication required")
    return user_id


def login_required(f):
    """
    Decorator: require a valid bearer JWT whose subject is an existing user.

    Usage:
        @bp.route("/projects", methods=["GET"])
        @login_required
        def list_projects():
            ...
    """

    @functools.wraps(f)
    def decorated(*args, **kwargs):
        user_id = current_user_id()
        # Token may outlive its account
        if db.session.get(User, user_id) is None:
            logger.info("Access token for unknown user on %s", request.path)
            raise UnauthorizedError("Authentication required")
        return f(*args, **kwargs)

    return decorated
