"""
Client portal blueprint — unauthenticated access by project access token.

Endpoints:
    GET  /api/v1/client/access/<token>
         Returns: 200 with {"project", "scopes", "deliverables"}; 404 for any
         unknown token.

    POST /api/v1/client/deliverables/<deliverable_id>/approve
         Header: X-Client-Token: <project access token>
         Body:   {"action": "APPROVE|REQUEST_CHANGES", "comments": "..."}
         Returns: 201 with the audit entry and the drafted invoice (or null).
                  401 without a token, 403 for a wrong token or unknown
                  deliverable, 400 for an invalid action.

Layer contract:
    - Token checks, validation and persistence live in the services.
    - Rate limited per remote address (see middleware/rate_limiter.py).
"""

from flask import Blueprint, jsonify, request

from scopeflow.services import approval_service, client_access_service
from scopeflow.utils.helpers import get_json_body, get_request_meta

client_bp = Blueprint("client", __name__, url_prefix="/api/v1/client")

CLIENT_TOKEN_HEADER = "X-Client-Token"


@client_bp.route("/access/<token>", methods=["GET"])
def access(token):
    view = client_access_service.resolve_project_by_token(token)
    return jsonify(view.to_dict()), 200


@client_bp.route("/deliverables/<deliverable_id>/approve", methods=["POST"])
def submit_decision(deliverable_id):
    result = approval_service.submit_decision(
        deliverable_id,
        request.headers.get(CLIENT_TOKEN_HEADER),
        get_json_body(),
        meta=get_request_meta(),
    )
    return jsonify(result.to_dict()), 201
