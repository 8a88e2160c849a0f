"""Request helpers shared by blueprints."""

from flask import request

from scopeflow.services.read_models import RequestMeta


def get_client_ip() -> str | None:
    """Return real client IP, honouring X-Forwarded-For from load balancers.

    request.remote_addr alone is wrong behind a proxy — it returns the LB
    address. The first X-Forwarded-For entry is the originating client.
    """
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.remote_addr


def get_request_meta() -> RequestMeta:
    """Capture caller network metadata for the approval audit trail."""
    return RequestMeta(
        ip_address=get_client_ip(),
        user_agent=request.headers.get("User-Agent") or "Unknown",
    )


def get_json_body() -> dict:
    """Return the JSON body as a dict; anything else is treated as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
