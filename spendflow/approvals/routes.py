"""Approval queue and decision routes."""
from __future__ import annotations

from typing import Any

from flask_login import current_user, login_required

from spendflow import db
from spendflow.services import approval_engine, approval_service, expense_service
from spendflow.services.expense_store import SQLAlchemyExpenseStore
from spendflow.utils.helpers import json_response, request_payload

from . import approvals_bp


@approvals_bp.route("/pending", methods=["GET"])
@login_required
def pending_approvals() -> Any:
    """Return expenses waiting on the caller's decision."""
    expenses = expense_service.pending_for_approver(current_user)
    approvals = [
        {
            "id": expense.id,
            "expense_id": expense.id,
            "employee_name": expense.user.name,
            "title": expense.title,
            "category": expense.category,
            "amount": float(expense.original_amount),
            "currency": expense.original_currency,
            "converted_amount": float(expense.converted_amount) if expense.converted_amount is not None else None,
            "status": expense.status.value,
        }
        for expense in expenses
    ]
    return json_response({"data": approvals, "total": len(approvals)})


@approvals_bp.route("/<int:expense_id>/decision", methods=["POST"])
@login_required
def make_decision(expense_id: int) -> Any:
    """Approve or reject the expense on behalf of its current approver."""
    payload = request_payload()
    decision = approval_engine.parse_decision(payload.get("decision"))

    store = SQLAlchemyExpenseStore(db.session)
    expense = approval_service.make_decision(
        store,
        expense_id,
        current_user.id,
        decision,
        payload.get("comment"),
    )
    return json_response(expense.to_dict(include_history=True))
