"""Approval-rule CRUD routes for company admins."""
from __future__ import annotations

from typing import Any

from flask_login import current_user, login_required

from spendflow.models import UserRole
from spendflow.services import rule_service
from spendflow.utils.helpers import json_response, request_payload, role_required

from . import rules_bp


@rules_bp.route("", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN)
def list_rules() -> Any:
    rules = rule_service.list_rules(current_user.company_id)
    return json_response({"data": [rule.to_dict() for rule in rules], "total": len(rules)})


@rules_bp.route("", methods=["POST"])
@login_required
@role_required(UserRole.ADMIN)
def create_rule() -> Any:
    """Create an approval rule from a name, approver list and conditions."""
    rule = rule_service.create_rule(current_user.company_id, request_payload())
    return json_response(rule.to_dict(), status=201)


@rules_bp.route("/<int:rule_id>", methods=["PUT"])
@login_required
@role_required(UserRole.ADMIN)
def update_rule(rule_id: int) -> Any:
    rule = rule_service.update_rule(current_user.company_id, rule_id, request_payload())
    return json_response(rule.to_dict())


@rules_bp.route("/<int:rule_id>", methods=["DELETE"])
@login_required
@role_required(UserRole.ADMIN)
def delete_rule(rule_id: int) -> Any:
    rule_service.delete_rule(current_user.company_id, rule_id)
    return "", 204
