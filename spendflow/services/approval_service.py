"""Orchestrates approval decisions against an expense store."""
from __future__ import annotations

import logging
from typing import Any, Optional

from spendflow.errors import ConflictError
from spendflow.models import Expense
from spendflow.services import approval_engine
from spendflow.services.approval_policy import resolve_rule
from spendflow.services.expense_store import ExpenseStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


def make_decision(
    store: ExpenseStore,
    expense_id: int,
    approver_id: int,
    decision: Any,
    comment: Optional[str] = None,
) -> Expense:
    """Record a decision and move the expense to its next state.

    The load/decide/commit cycle is retried once when the store reports a
    concurrent modification; a second conflict is raised to the caller.
    """
    # fail fast on a malformed decision before touching the store
    decision = approval_engine.parse_decision(decision)

    for attempt in range(1, MAX_ATTEMPTS + 1):
        expense = store.load_expense_for_decision(expense_id)
        rule = resolve_rule(expense.company.approval_rules, expense.category)
        state, entry = approval_engine.decide(
            expense,
            rule,
            list(expense.approval_history),
            approver_id,
            decision,
            comment,
        )
        try:
            return store.commit_decision(expense, state, entry)
        except ConflictError:
            if attempt == MAX_ATTEMPTS:
                raise
            logger.warning("Retrying decision on expense %s after a conflict", expense_id)

    raise ConflictError("Expense was modified concurrently. Please retry.")
