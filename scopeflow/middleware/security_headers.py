"""
Security headers middleware.

Applies X-Content-Type-Options, X-Frame-Options, Strict-Transport-Security,
Referrer-Policy and Permissions-Policy headers to every response. Client
portal responses carry project data behind a bearer token and are marked
``Cache-Control: no-store``.

Usage:
    from scopeflow.middleware.security_headers import init_security_headers
    init_security_headers(app)
"""

from flask import request

CLIENT_PORTAL_PREFIX = "/api/v1/client/"


def init_security_headers(app):
    """Register after_request handler that injects security headers."""

    @app.after_request
    def _add_security_headers(response):
        # JSON API only; nothing is ever framed or scripted
        response.headers.setdefault(
            "Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'"
        )

        # Prevent MIME-type sniffing
        response.headers.setdefault("X-Content-Type-Options", "nosniff")

        # Clickjacking protection
        response.headers.setdefault("X-Frame-Options", "DENY")

        # HTTPS enforcement (ignored over HTTP, but ready for production)
        response.headers.setdefault(
            "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
        )

        # Access tokens appear in portal URLs; never leak them via Referer
        response.headers.setdefault("Referrer-Policy", "no-referrer")

        response.headers.setdefault(
            "Permissions-Policy",
            "camera=(), microphone=(), geolocation=(), payment=()"
        )

        if request.path.startswith(CLIENT_PORTAL_PREFIX):
            response.headers["Cache-Control"] = "no-store"

        # Remove server identification
        response.headers.pop("Server", None)

        return response
