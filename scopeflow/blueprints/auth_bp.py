"""
Auth blueprint — freelancer registration and login.

Endpoints:
    POST /api/v1/auth/register   Body: {"email", "password", "full_name"?}
    POST /api/v1/auth/login      Body: {"email", "password"}
    GET  /api/v1/auth/me         Bearer JWT required
"""

from flask import Blueprint, jsonify

from scopeflow.middleware.jwt_auth import current_user_id, login_required
from scopeflow.services import jwt_service, user_service
from scopeflow.utils.helpers import get_json_body

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


@auth_bp.route("/register", methods=["POST"])
def register():
    user = user_service.register_user(get_json_body())
    body = jwt_service.token_response(user.id)
    body["user"] = user.to_dict()
    return jsonify(body), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    user = user_service.authenticate_user(get_json_body())
    body = jwt_service.token_response(user.id)
    body["user"] = user.to_dict()
    return jsonify(body), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    user = user_service.get_user(current_user_id())
    return jsonify(user.to_dict()), 200
