"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter. The Limiter instance
is created in scopeflow/__init__.py with no default limits; this module
applies limits to the unauthenticated surfaces:

    - client portal: the project access token is the only credential, so
      guessing must be slow (CLIENT_PORTAL_RATE_LIMIT, default 30/minute)
    - auth:          password guessing (AUTH_RATE_LIMIT, default 10/minute)
    - health:        exempt

Usage:
    from scopeflow.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)


def init_rate_limits(app, limiter):
    """Apply rate limits to blueprints. Disabled in testing mode."""

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    portal_limit = app.config.get("CLIENT_PORTAL_RATE_LIMIT", "30/minute")
    auth_limit = app.config.get("AUTH_RATE_LIMIT", "10/minute")

    bp = app.blueprints.get("client")
    if bp:
        limiter.limit(portal_limit)(bp)

    bp = app.blueprints.get("auth")
    if bp:
        limiter.limit(auth_limit)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured — client portal: %s, auth: %s", portal_limit, auth_limit
    )
