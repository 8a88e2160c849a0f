"""
Scope blueprint — versioned scope-of-work records of a project.

Endpoints (bearer JWT required, project must belong to the caller):
    POST  /api/v1/projects/<pid>/scopes                 Body: {"content", "price"?}
    GET   /api/v1/projects/<pid>/scopes
    GET   /api/v1/projects/<pid>/scopes/latest
    PATCH /api/v1/projects/<pid>/scopes/<sid>           Body: {"content"?, "price"?}
    PATCH /api/v1/projects/<pid>/scopes/<sid>/lock
"""

from flask import Blueprint, jsonify

from scopeflow.middleware.jwt_auth import current_user_id, login_required
from scopeflow.services import project_service, scope_service
from scopeflow.utils.helpers import get_json_body

scope_bp = Blueprint("scope", __name__, url_prefix="/api/v1")


def _owned(project_id):
    return project_service.get_owned_project(project_id, current_user_id())


@scope_bp.route("/projects/<project_id>/scopes", methods=["POST"])
@login_required
def create_scope(project_id):
    _owned(project_id)
    scope = scope_service.create_scope(project_id, get_json_body())
    return jsonify(scope.to_dict()), 201


@scope_bp.route("/projects/<project_id>/scopes", methods=["GET"])
@login_required
def list_scopes(project_id):
    _owned(project_id)
    scopes = scope_service.list_scopes(project_id)
    return jsonify({"items": [s.to_dict() for s in scopes], "total": len(scopes)}), 200


@scope_bp.route("/projects/<project_id>/scopes/latest", methods=["GET"])
@login_required
def latest_scope(project_id):
    _owned(project_id)
    scope = scope_service.get_latest_scope(project_id)
    return jsonify({"scope": scope.to_dict() if scope else None}), 200


@scope_bp.route("/projects/<project_id>/scopes/<scope_id>", methods=["PATCH"])
@login_required
def update_scope(project_id, scope_id):
    _owned(project_id)
    scope = scope_service.update_scope(project_id, scope_id, get_json_body())
    return jsonify(scope.to_dict()), 200


@scope_bp.route("/projects/<project_id>/scopes/<scope_id>/lock", methods=["PATCH"])
@login_required
def lock_scope(project_id, scope_id):
    _owned(project_id)
    scope = scope_service.lock_scope(project_id, scope_id)
    return jsonify(scope.to_dict()), 200
