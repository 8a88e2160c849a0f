"""Standardised API error responses.

Usage
-----
    from scopeflow.utils.errors import api_error, E, register_error_handlers

    return api_error(E.NOT_FOUND, "Project not found")
    register_error_handlers(app)   # maps ScopeflowError subclasses
"""

from __future__ import annotations

import logging

from flask import jsonify, request

from scopeflow.core.exceptions import ScopeflowError

logger = logging.getLogger(__name__)


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error kinds. Stable across releases."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL = "INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION: 400,
    E.UNAUTHORIZED: 401,
    E.FORBIDDEN: 403,
    E.NOT_FOUND: 404,
    E.CONFLICT: 409,
    E.RATE_LIMITED: 429,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload (field-level validation messages, etc.).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """
    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def register_error_handlers(blueprint) -> None:
    """Attach the domain error handlers to a blueprint (or the app)."""

    @blueprint.errorhandler(ScopeflowError)
    def _handle_domain_error(error: ScopeflowError):
        if error.status >= 500:
            logger.error("Domain error on %s: %s", request.endpoint, error)
            return api_error(error.code, "Internal server error", status=error.status)
        return api_error(error.code, error.message, status=error.status, details=error.details)
