"""Expense CRUD and submission routes."""
from __future__ import annotations

from typing import Any

from flask import request
from flask_login import current_user, login_required

from spendflow import db
from spendflow.services import expense_service
from spendflow.services.expense_store import SQLAlchemyExpenseStore
from spendflow.utils.helpers import json_response, request_payload, to_snake_case

from . import expenses_bp


@expenses_bp.route("", methods=["GET"])
@login_required
def list_expenses() -> Any:
    """List the caller's expenses filtered by status, category, date range or search text."""
    filters = to_snake_case(request.args.to_dict())
    expenses = expense_service.list_expenses(current_user, filters)
    return json_response({"data": [expense.to_dict() for expense in expenses], "total": len(expenses)})


@expenses_bp.route("", methods=["POST"])
@login_required
def create_expense() -> Any:
    """Create a new expense in DRAFT status."""
    expense = expense_service.create_expense(current_user, request_payload())
    return json_response(expense.to_dict(), status=201)


@expenses_bp.route("/<int:expense_id>", methods=["GET"])
@login_required
def expense_detail(expense_id: int) -> Any:
    """Return an expense with its lines, attachments and approval timeline."""
    expense = expense_service.get_expense(expense_id)
    expense_service.ensure_can_view(current_user, expense)
    return json_response(expense.to_dict(include_history=True))


@expenses_bp.route("/<int:expense_id>", methods=["PUT"])
@login_required
def update_expense(expense_id: int) -> Any:
    expense = expense_service.get_expense(expense_id)
    expense = expense_service.update_expense(current_user, expense, request_payload())
    return json_response(expense.to_dict())


@expenses_bp.route("/<int:expense_id>", methods=["DELETE"])
@login_required
def delete_expense(expense_id: int) -> Any:
    expense = expense_service.get_expense(expense_id)
    expense_service.delete_expense(current_user, expense)
    return json_response({"message": "Expense deleted successfully"})


@expenses_bp.route("/<int:expense_id>/submit", methods=["POST"])
@login_required
def submit_expense(expense_id: int) -> Any:
    """Submit a draft or rejected expense to the owner's manager."""
    store = SQLAlchemyExpenseStore(db.session)
    expense = expense_service.submit_expense(store, current_user, expense_id)
    return json_response(expense.to_dict())
