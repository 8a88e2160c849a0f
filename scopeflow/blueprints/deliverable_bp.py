"""
Deliverable blueprint — versioned work uploads of a project.

Endpoints (bearer JWT required, project must belong to the caller):
    POST /api/v1/projects/<pid>/deliverables    Body: {"file_url", "notes"?}
    GET  /api/v1/projects/<pid>/deliverables
    POST /api/v1/deliverables                   Body: {"project_id", "file_url", "notes"?}
"""

from flask import Blueprint, jsonify

from scopeflow.core.exceptions import ValidationError
from scopeflow.middleware.jwt_auth import current_user_id, login_required
from scopeflow.services import deliverable_service, project_service
from scopeflow.utils.helpers import get_json_body

deliverable_bp = Blueprint("deliverable", __name__, url_prefix="/api/v1")


@deliverable_bp.route("/projects/<project_id>/deliverables", methods=["POST"])
@login_required
def create_deliverable(project_id):
    project_service.get_owned_project(project_id, current_user_id())
    deliverable = deliverable_service.create_deliverable(project_id, get_json_body())
    return jsonify(deliverable.to_dict()), 201


@deliverable_bp.route("/deliverables", methods=["POST"])
@login_required
def create_deliverable_legacy():
    """Upload route with the project id in the body instead of the path."""
    data = get_json_body()
    project_id = data.get("project_id")
    if not isinstance(project_id, str) or not project_id.strip():
        raise ValidationError(
            "Invalid input: project_id", details={"project_id": "Field required"},
        )
    project_service.get_owned_project(project_id, current_user_id())
    deliverable = deliverable_service.create_deliverable(project_id, data)
    return jsonify(deliverable.to_dict()), 201


@deliverable_bp.route("/projects/<project_id>/deliverables", methods=["GET"])
@login_required
def list_deliverables(project_id):
    project_service.get_owned_project(project_id, current_user_id())
    items = deliverable_service.list_deliverables(project_id)
    return jsonify({"items": [d.to_dict() for d in items], "total": len(items)}), 200
