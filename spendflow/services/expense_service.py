"""Expense lifecycle operations performed on behalf of the expense owner."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping

from sqlalchemy import or_

from spendflow import db
from spendflow.errors import AuthorizationError, NotFoundError, ValidationError
from spendflow.models import Expense, ExpenseLine, ExpenseStatus, User, UserRole
from spendflow.services import approval_engine, currency_service
from spendflow.services.expense_store import ExpenseStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"title", "date", "category", "original_amount", "original_currency"}


def _parse_amount(value: Any, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid '{field_name}'.") from None
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"Invalid '{field_name}'.")
    return amount


def _parse_date(value: Any, field_name: str = "date") -> date:
    try:
        return date.fromisoformat(str(value)[:10])
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid '{field_name}' format. Use YYYY-MM-DD.") from None


def _parse_lines(raw_lines: Any) -> List[Dict[str, Any]]:
    if raw_lines in (None, ""):
        return []
    if not isinstance(raw_lines, list):
        raise ValidationError("'lines' must be a list.")

    lines = []
    for raw in raw_lines:
        if not isinstance(raw, Mapping) or not raw.get("description"):
            raise ValidationError("Each line needs a description and an amount.")
        lines.append(
            {
                "description": str(raw["description"]),
                "amount": _parse_amount(raw.get("amount"), "lines.amount"),
            }
        )
    return lines


def parse_expense_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate an expense body and return normalized field values."""
    present = {key for key, value in payload.items() if value not in (None, "")}
    if missing := REQUIRED_FIELDS - present:
        raise ValidationError(f"Missing fields: {', '.join(sorted(missing))}")

    return {
        "title": str(payload["title"]).strip(),
        "description": payload.get("description"),
        "date": _parse_date(payload["date"]),
        "category": str(payload["category"]).strip(),
        "original_amount": _parse_amount(payload["original_amount"], "original_amount"),
        "original_currency": str(payload["original_currency"]).upper(),
        "lines": _parse_lines(payload.get("lines")),
    }


def _apply_fields(expense: Expense, fields: Dict[str, Any], company_currency: str) -> None:
    converted, rate = currency_service.convert_currency(
        fields["original_amount"], fields["original_currency"], company_currency
    )
    expense.title = fields["title"]
    expense.description = fields["description"]
    expense.date = fields["date"]
    expense.category = fields["category"]
    expense.original_amount = fields["original_amount"]
    expense.original_currency = fields["original_currency"]
    expense.converted_amount = converted
    expense.exchange_rate = rate
    expense.lines = [ExpenseLine(description=line["description"], amount=line["amount"]) for line in fields["lines"]]


def get_expense(expense_id: int) -> Expense:
    expense = db.session.get(Expense, expense_id)
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


def _ensure_owner(user: User, expense: Expense, action: str) -> None:
    if expense.user_id != user.id:
        raise AuthorizationError(f"Not authorized to {action} this expense")


def ensure_can_view(user: User, expense: Expense) -> None:
    if expense.user_id == user.id:
        return
    if user.role == UserRole.ADMIN and user.company_id == expense.company_id:
        return
    if expense.current_approver_id == user.id:
        return
    if any(entry.approver_id == user.id for entry in expense.approval_history):
        return
    raise AuthorizationError("Not authorized to view this expense")


def list_expenses(user: User, filters: Mapping[str, Any]) -> List[Expense]:
    """Return the user's expenses, newest first, narrowed by optional filters."""
    query = Expense.query.filter(Expense.user_id == user.id)

    status = filters.get("status")
    if status:
        try:
            query = query.filter(Expense.status == ExpenseStatus[str(status).upper()])
        except KeyError:
            raise ValidationError(f"Unknown status '{status}'.") from None

    if filters.get("category"):
        query = query.filter(Expense.category == filters["category"])

    if filters.get("start_date") and filters.get("end_date"):
        query = query.filter(
            Expense.date >= _parse_date(filters["start_date"], "startDate"),
            Expense.date <= _parse_date(filters["end_date"], "endDate"),
        )

    search = filters.get("search")
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Expense.title.ilike(pattern), Expense.description.ilike(pattern)))

    return query.order_by(Expense.created_at.desc(), Expense.id.desc()).all()


def create_expense(user: User, payload: Mapping[str, Any]) -> Expense:
    fields = parse_expense_payload(payload)
    expense = Expense(
        company_id=user.company_id,
        user_id=user.id,
        status=ExpenseStatus.DRAFT,
    )
    _apply_fields(expense, fields, user.company.currency_code)
    db.session.add(expense)
    db.session.commit()
    logger.info("Expense %s created by user %s", expense.id, user.id)
    return expense


def update_expense(user: User, expense: Expense, payload: Mapping[str, Any]) -> Expense:
    """Edit a draft or rejected expense; edits always return it to DRAFT."""
    _ensure_owner(user, expense, "update")
    if not expense.is_editable:
        raise ValidationError("Only expenses in DRAFT or REJECTED status can be updated")

    fields = parse_expense_payload(payload)
    _apply_fields(expense, fields, user.company.currency_code)
    expense.status = ExpenseStatus.DRAFT
    expense.current_approver_id = None
    db.session.commit()
    return expense


def delete_expense(user: User, expense: Expense) -> None:
    _ensure_owner(user, expense, "delete")
    if expense.status != ExpenseStatus.DRAFT:
        raise ValidationError("Only expenses in DRAFT status can be deleted")
    expense_id = expense.id
    db.session.delete(expense)
    db.session.commit()
    logger.info("Expense %s deleted by user %s", expense_id, user.id)


def submit_expense(store: ExpenseStore, user: User, expense_id: int) -> Expense:
    """Send an expense to the owner's direct manager for approval."""
    expense = store.load_expense_for_decision(expense_id)
    _ensure_owner(user, expense, "submit")
    state = approval_engine.submit(expense, expense.user)
    expense = store.commit_submission(expense, state)
    logger.info("Expense %s submitted; awaiting user %s", expense_id, state.current_approver_id)
    return expense


def pending_for_approver(approver: User) -> List[Expense]:
    return (
        Expense.query.filter_by(current_approver_id=approver.id, status=ExpenseStatus.PENDING)
        .order_by(Expense.updated_at.desc())
        .all()
    )
