"""User administration helpers shared by signup and admin routes."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from spendflow import db
from spendflow.errors import ConflictError, NotFoundError, ValidationError
from spendflow.models import User, UserRole

logger = logging.getLogger(__name__)


def parse_role(value: Any, default: UserRole = UserRole.EMPLOYEE) -> UserRole:
    if not value:
        return default
    try:
        return UserRole[str(value).upper()]
    except KeyError:
        raise ValidationError(f"Unknown role '{value}'.") from None


def resolve_manager(company_id: int, manager_id: Any, user_id: Optional[int] = None) -> Optional[int]:
    """Validate that ``manager_id`` names another user of the same company."""
    if manager_id in (None, ""):
        return None
    try:
        manager = db.session.get(User, int(manager_id))
    except (TypeError, ValueError):
        manager = None
    if manager is None or manager.company_id != company_id:
        raise ValidationError("Manager must belong to the same company.")
    if user_id is not None and manager.id == user_id:
        raise ValidationError("A user cannot be their own manager.")
    return manager.id


def get_company_user(company_id: int, user_id: int) -> User:
    user = User.query.filter_by(id=user_id, company_id=company_id).first()
    if user is None:
        raise NotFoundError("User not found.")
    return user


def create_user(company_id: int, payload: Mapping[str, Any]) -> User:
    required_fields = {"name", "email", "password", "role"}
    if missing := required_fields - {key for key, value in payload.items() if value}:
        raise ValidationError(f"Missing fields: {', '.join(sorted(missing))}")

    email = str(payload["email"]).strip().lower()
    if User.query.filter_by(email=email).first():
        raise ConflictError("Email already exists.")

    role = parse_role(payload["role"])
    approver_flag = payload.get("is_manager_approver")
    user = User(
        name=payload["name"],
        email=email,
        role=role,
        company_id=company_id,
        manager_id=resolve_manager(company_id, payload.get("manager_id")),
        is_manager_approver=(
            bool(approver_flag) if approver_flag is not None else role in (UserRole.ADMIN, UserRole.MANAGER)
        ),
    )
    user.set_password(payload["password"])
    db.session.add(user)
    db.session.commit()
    logger.info("User %s created in company %s as %s", user.id, company_id, role.value)
    return user


def update_user(user: User, payload: Mapping[str, Any]) -> User:
    if payload.get("name"):
        user.name = payload["name"]
    if payload.get("role"):
        user.role = parse_role(payload["role"])
    if "manager_id" in payload:
        user.manager_id = resolve_manager(user.company_id, payload["manager_id"], user_id=user.id)
    if payload.get("is_manager_approver") is not None:
        user.is_manager_approver = bool(payload["is_manager_approver"])
    db.session.commit()
    return user
