"""Company settings routes, scoped to the caller's own company."""
from __future__ import annotations

from typing import Any

from flask_login import current_user, login_required

from spendflow import db
from spendflow.errors import NotFoundError, ValidationError
from spendflow.models import Company, UserRole
from spendflow.utils.helpers import json_response, request_payload, role_required

from . import companies_bp


def _own_company(company_id: int) -> Company:
    # other tenants' companies are reported as missing
    if company_id != current_user.company_id:
        raise NotFoundError("Company not found")
    company = db.session.get(Company, company_id)
    if company is None:
        raise NotFoundError("Company not found")
    return company


@companies_bp.route("", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN)
def list_companies() -> Any:
    company = _own_company(current_user.company_id)
    return json_response({"data": [company.to_dict()], "total": 1})


@companies_bp.route("/<int:company_id>", methods=["GET"])
@login_required
def get_company(company_id: int) -> Any:
    return json_response(_own_company(company_id).to_dict())


@companies_bp.route("/<int:company_id>", methods=["PUT"])
@login_required
@role_required(UserRole.ADMIN)
def update_company(company_id: int) -> Any:
    """Update company name, country and currency settings."""
    company = _own_company(company_id)
    payload = request_payload()

    if "name" in payload:
        if not payload["name"]:
            raise ValidationError("Company name cannot be empty.")
        company.name = payload["name"]
    if payload.get("country"):
        company.country = payload["country"]
    if "currency_code" in payload:
        currency_code = str(payload["currency_code"] or "").strip().upper()
        if len(currency_code) != 3:
            raise ValidationError("Currency code must be a 3-letter ISO code.")
        company.currency_code = currency_code

    db.session.commit()
    return json_response(company.to_dict())
