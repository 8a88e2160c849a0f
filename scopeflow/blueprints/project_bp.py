"""
Project blueprint — owner-side project management and billing view.

Endpoints (bearer JWT required):
    POST  /api/v1/projects                       Body: {"name", "client_email"?}
    GET   /api/v1/projects
    GET   /api/v1/projects/<project_id>
    PATCH /api/v1/projects/<project_id>          Body: {"status"}
    GET   /api/v1/projects/<project_id>/invoices

Layer contract:
    - Blueprint: read JSON, call service, return JSON.
    - NO db.session calls here; errors propagate to the app error handlers.
"""

from flask import Blueprint, jsonify

from scopeflow.middleware.jwt_auth import current_user_id, login_required
from scopeflow.services import approval_service, project_service
from scopeflow.utils.helpers import get_json_body

project_bp = Blueprint("project", __name__, url_prefix="/api/v1")


@project_bp.route("/projects", methods=["POST"])
@login_required
def create_project():
    project = project_service.create_project(current_user_id(), get_json_body())
    return jsonify(project.to_dict(include_token=True)), 201


@project_bp.route("/projects", methods=["GET"])
@login_required
def list_projects():
    items = project_service.list_projects(current_user_id())
    return jsonify({"items": [p.to_dict() for p in items], "total": len(items)}), 200


@project_bp.route("/projects/<project_id>", methods=["GET"])
@login_required
def get_project(project_id):
    view = project_service.get_project_detail(project_id, current_user_id())
    return jsonify(view.to_dict()), 200


@project_bp.route("/projects/<project_id>", methods=["PATCH"])
@login_required
def update_project(project_id):
    project = project_service.update_status(project_id, current_user_id(), get_json_body())
    return jsonify(project.to_dict(include_token=True)), 200


@project_bp.route("/projects/<project_id>/invoices", methods=["GET"])
@login_required
def list_invoices(project_id):
    project = project_service.get_owned_project(project_id, current_user_id())
    invoices = approval_service.list_invoices(project.id)
    return jsonify({"items": [i.to_dict() for i in invoices], "total": len(invoices)}), 200
