"""Administrative user routes."""
from __future__ import annotations

from typing import Any

from flask_login import current_user, login_required

from spendflow.models import User, UserRole
from spendflow.services import user_service
from spendflow.utils.helpers import json_response, request_payload, role_required

from . import users_bp


@users_bp.route("", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN)
def list_users() -> Any:
    """Return all users in the admin's company."""
    users = User.query.filter_by(company_id=current_user.company_id).order_by(User.id).all()
    return json_response({"data": [user.to_dict() for user in users], "total": len(users)})


@users_bp.route("", methods=["POST"])
@login_required
@role_required(UserRole.ADMIN)
def create_user() -> Any:
    """Create a new employee, manager or admin."""
    user = user_service.create_user(current_user.company_id, request_payload())
    return json_response({"message": "User created.", "user": user.to_dict()}, status=201)


@users_bp.route("/<int:user_id>", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN)
def get_user(user_id: int) -> Any:
    user = user_service.get_company_user(current_user.company_id, user_id)
    return json_response({"user": user.to_dict()})


@users_bp.route("/<int:user_id>", methods=["PUT"])
@login_required
@role_required(UserRole.ADMIN)
def update_user(user_id: int) -> Any:
    """Change a user's name, role, manager or approver flag."""
    user = user_service.get_company_user(current_user.company_id, user_id)
    user = user_service.update_user(user, request_payload())
    return json_response({"message": "User updated.", "user": user.to_dict()})
