"""Administration of company approval rules."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from spendflow import db
from spendflow.errors import NotFoundError, ValidationError
from spendflow.models import ApprovalRule, User
from spendflow.services.approval_policy import DEFAULT_MIN_APPROVAL_PERCENT

logger = logging.getLogger(__name__)


def _company_user_ids(company_id: int, raw_ids: Any, field_name: str) -> List[int]:
    if not isinstance(raw_ids, list):
        raise ValidationError(f"'{field_name}' must be a list of user ids.")
    try:
        user_ids = [int(value["id"] if isinstance(value, Mapping) else value) for value in raw_ids]
    except (KeyError, TypeError, ValueError):
        raise ValidationError(f"'{field_name}' must be a list of user ids.") from None

    known = {
        user_id
        for (user_id,) in db.session.query(User.id).filter(
            User.company_id == company_id, User.id.in_(user_ids)
        )
    }
    unknown = [user_id for user_id in user_ids if user_id not in known]
    if unknown:
        raise ValidationError(f"Unknown approvers in '{field_name}': {', '.join(map(str, unknown))}")
    return user_ids


def _min_approval_percent(value: Any) -> float:
    try:
        percent = float(value)
    except (TypeError, ValueError):
        raise ValidationError("'min_approval_percent' must be a number between 0 and 100.") from None
    if not 0 <= percent <= 100:
        raise ValidationError("'min_approval_percent' must be a number between 0 and 100.")
    return percent


def build_rule_fields(
    company_id: int,
    payload: Mapping[str, Any],
    existing: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Validate a rule body; omitted condition fields keep ``existing`` values."""
    existing = existing or {}
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValidationError("Name is required")

    approver_list = payload.get("approver_list")
    if not approver_list or not isinstance(approver_list, list):
        raise ValidationError("Approver list is required and must be an array")
    approver_ids = _company_user_ids(company_id, approver_list, "approver_list")

    def pick(key: str, default: Any) -> Any:
        if payload.get(key) is not None:
            return payload[key]
        if existing.get(key) is not None:
            return existing[key]
        return default

    specific_ids = pick("specific_approver_ids", [])
    conditions = {
        "is_sequential": bool(pick("is_sequential", False)),
        "min_approval_percent": _min_approval_percent(pick("min_approval_percent", DEFAULT_MIN_APPROVAL_PERCENT)),
        "category_filter": pick("category_filter", None) or None,
        "specific_approver_ids": _company_user_ids(company_id, specific_ids, "specific_approver_ids"),
    }
    approvers = [{"id": approver_id, "order": index + 1} for index, approver_id in enumerate(approver_ids)]
    return {"name": name, "conditions": conditions, "approvers": approvers}


def list_rules(company_id: int) -> List[ApprovalRule]:
    return (
        ApprovalRule.query.filter_by(company_id=company_id)
        .order_by(ApprovalRule.created_at.desc(), ApprovalRule.id.desc())
        .all()
    )


def get_rule(company_id: int, rule_id: int) -> ApprovalRule:
    rule = ApprovalRule.query.filter_by(id=rule_id, company_id=company_id).first()
    if rule is None:
        raise NotFoundError("Approval rule not found")
    return rule


def create_rule(company_id: int, payload: Mapping[str, Any]) -> ApprovalRule:
    rule = ApprovalRule(company_id=company_id, **build_rule_fields(company_id, payload))
    db.session.add(rule)
    db.session.commit()
    logger.info("Approval rule %s created for company %s", rule.id, company_id)
    return rule


def update_rule(company_id: int, rule_id: int, payload: Mapping[str, Any]) -> ApprovalRule:
    rule = get_rule(company_id, rule_id)
    fields = build_rule_fields(company_id, payload, existing=rule.conditions)
    rule.name = fields["name"]
    # JSON columns are replaced wholesale so SQLAlchemy sees the change
    rule.conditions = fields["conditions"]
    rule.approvers = fields["approvers"]
    db.session.commit()
    return rule


def delete_rule(company_id: int, rule_id: int) -> None:
    rule = get_rule(company_id, rule_id)
    db.session.delete(rule)
    db.session.commit()
    logger.info("Approval rule %s deleted for company %s", rule_id, company_id)
