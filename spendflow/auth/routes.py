"""Authentication routes."""
from __future__ import annotations

from typing import Any

from flask import current_app
from flask_login import current_user, login_required

from spendflow import db
from spendflow.errors import AuthenticationError, NotFoundError, ValidationError
from spendflow.models import Company, User, UserRole
from spendflow.services import currency_service, token_service
from spendflow.services.user_service import parse_role, resolve_manager
from spendflow.utils.helpers import json_response, request_payload

from . import auth_bp


def _bootstrap_company(payload: dict) -> Company:
    country = payload.get("country")
    if not country:
        raise ValidationError("Country is required when creating a company.")
    if Company.query.filter_by(name=payload["company_name"]).first():
        raise ValidationError("Company name already taken.")

    currency_code = payload.get("currency_code")
    if not currency_code:
        currency_code = currency_service.get_default_currency_for_country(country)["currency_code"]
    company = Company(
        name=payload["company_name"],
        country=country,
        currency_code=(currency_code or current_app.config["DEFAULT_CURRENCY"]).upper(),
    )
    db.session.add(company)
    return company


@auth_bp.route("/signup", methods=["POST"])
def signup() -> Any:
    """Register a user in an existing company, or bootstrap a new company as its admin."""
    payload = request_payload()

    required_fields = {"name", "email", "password"}
    if missing := required_fields - {key for key, value in payload.items() if value}:
        raise ValidationError(f"Missing required fields: {', '.join(sorted(missing))}")

    email = payload["email"].strip().lower()
    if User.query.filter_by(email=email).first():
        return json_response({"message": "User already exists with this email"}, status=409)

    if payload.get("company_id"):
        try:
            company = db.session.get(Company, int(payload["company_id"]))
        except (TypeError, ValueError):
            raise ValidationError("Invalid company_id.") from None
        if company is None:
            raise NotFoundError("Company not found.")
        role = parse_role(payload.get("role"))
        if role == UserRole.ADMIN:
            raise ValidationError("Admins are created by signing up a new company.")
        manager_id = resolve_manager(company.id, payload.get("manager_id"))
    elif payload.get("company_name"):
        company = _bootstrap_company(payload)
        role = UserRole.ADMIN
        manager_id = None
    else:
        raise ValidationError("Either company_id or company_name is required.")

    user = User(
        name=payload["name"],
        email=email,
        role=role,
        company=company,
        manager_id=manager_id,
        is_manager_approver=role in (UserRole.ADMIN, UserRole.MANAGER),
    )
    user.set_password(payload["password"])
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("User %s signed up in company %s as %s", user.id, company.id, role.value)

    return json_response({**token_service.issue_token_pair(user), "user": user.to_dict()}, status=201)


@auth_bp.route("/login", methods=["POST"])
def login() -> Any:
    """Authenticate a user using email/password."""
    payload = request_payload()
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        raise AuthenticationError("Invalid credentials")

    return json_response({**token_service.issue_token_pair(user), "user": user.to_dict()})


@auth_bp.route("/refresh", methods=["POST"])
def refresh() -> Any:
    """Exchange a refresh token for a new token pair."""
    refresh_token = request_payload().get("refresh_token")
    if not refresh_token:
        raise AuthenticationError("Refresh token is required")

    claims = token_service.decode_token(refresh_token, token_service.REFRESH_TOKEN)
    user = db.session.get(User, int(claims["sub"])) if claims else None
    if user is None:
        raise AuthenticationError("Invalid or expired refresh token")

    return json_response(token_service.issue_token_pair(user))


@auth_bp.route("/me", methods=["GET"])
@login_required
def me() -> Any:
    return json_response({"user": current_user.to_dict()})
