"""Approval decision engine.

Given a pending expense, the rule that governs it, its approval history and an
incoming decision, :func:`decide` computes the expense's next state and the
history entry to append. The engine never touches the database; persisting the
result atomically is the job of an :class:`~spendflow.services.expense_store.ExpenseStore`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from spendflow.errors import AuthorizationError, ValidationError
from spendflow.models import ApprovalDecision, ExpenseStatus
from spendflow.services.approval_policy import (
    PercentagePolicy,
    SequentialPolicy,
    SpecificApproverPolicy,
    policy_from_rule,
)

logger = logging.getLogger(__name__)

OUTCOME_REJECTED = "rejected"
OUTCOME_ADVANCED = "advanced"
OUTCOME_APPROVED = "approved"
OUTCOME_AWAITING = "awaiting_approvals"
OUTCOME_SUBMITTED = "submitted"


@dataclass(frozen=True)
class ExpenseState:
    status: ExpenseStatus
    current_approver_id: Optional[int]
    outcome: str


@dataclass(frozen=True)
class HistoryEntry:
    approver_id: int
    decision: ApprovalDecision
    comment: Optional[str]
    created_at: datetime


def parse_decision(value: Any) -> ApprovalDecision:
    """Coerce an incoming decision into :class:`ApprovalDecision`."""
    if isinstance(value, ApprovalDecision):
        return value
    if isinstance(value, str):
        try:
            return ApprovalDecision[value]
        except KeyError:
            pass
    raise ValidationError("Invalid decision. Must be APPROVED or REJECTED")


def _approved(outcome: str = OUTCOME_APPROVED) -> ExpenseState:
    return ExpenseState(status=ExpenseStatus.APPROVED, current_approver_id=None, outcome=outcome)


def _count_approvals(history: Iterable[Any]) -> int:
    return sum(1 for entry in history or [] if parse_decision(entry.decision) is ApprovalDecision.APPROVED)


def _evaluate_percentage(policy: PercentagePolicy, expense: Any, history: Iterable[Any]) -> ExpenseState:
    approved_count = _count_approvals(history) + 1
    if policy.is_met(approved_count):
        return _approved()
    return ExpenseState(
        status=ExpenseStatus.PENDING,
        current_approver_id=expense.current_approver_id,
        outcome=OUTCOME_AWAITING,
    )


def _evaluate_approval(policy: Any, expense: Any, history: Iterable[Any], approver_id: int) -> ExpenseState:
    if isinstance(policy, SequentialPolicy):
        next_approver_id = policy.next_after(approver_id)
        if next_approver_id is None:
            return _approved()
        return ExpenseState(
            status=ExpenseStatus.PENDING,
            current_approver_id=next_approver_id,
            outcome=OUTCOME_ADVANCED,
        )

    if isinstance(policy, SpecificApproverPolicy):
        if approver_id in policy.specific_ids:
            return _approved()
        return _evaluate_percentage(policy.fallback, expense, history)

    if isinstance(policy, PercentagePolicy):
        return _evaluate_percentage(policy, expense, history)

    logger.warning("Unknown approval policy %r for expense %s; approving", policy, expense.id)
    return _approved()


def decide(
    expense: Any,
    rule: Any,
    history: Iterable[Any],
    approver_id: int,
    decision: Any,
    comment: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[ExpenseState, HistoryEntry]:
    """Apply ``decision`` by ``approver_id`` to a pending expense.

    ``rule`` is the already-resolved approval rule (a model, a mapping, a
    compiled policy, or None for the implicit default). ``history`` holds the
    expense's prior approval entries, excluding the one being made.

    Raises ValidationError for an unknown decision or an expense that is not
    pending, and AuthorizationError when ``approver_id`` is not the expense's
    current approver.
    """
    decision = parse_decision(decision)

    if expense.status is not ExpenseStatus.PENDING:
        raise ValidationError("Expense is not pending approval")
    if expense.current_approver_id is None or expense.current_approver_id != approver_id:
        raise AuthorizationError("You are not authorized to approve this expense")

    entry = HistoryEntry(
        approver_id=approver_id,
        decision=decision,
        comment=comment,
        created_at=now or datetime.utcnow(),
    )

    if decision is ApprovalDecision.REJECTED:
        state = ExpenseState(status=ExpenseStatus.REJECTED, current_approver_id=None, outcome=OUTCOME_REJECTED)
    else:
        state = _evaluate_approval(policy_from_rule(rule), expense, history, approver_id)

    logger.info(
        "Expense %s: %s by user %s -> %s (%s)",
        expense.id,
        decision.value,
        approver_id,
        state.status.value,
        state.outcome,
    )
    return state, entry


def submit(expense: Any, owner: Any) -> ExpenseState:
    """Route a draft or rejected expense to the owner's direct manager.

    Approval rules play no part here; they only govern decisions once the
    expense is pending.
    """
    if expense.status not in (ExpenseStatus.DRAFT, ExpenseStatus.REJECTED):
        raise ValidationError("Only expenses in DRAFT or REJECTED status can be submitted")
    if owner.manager_id is None:
        raise ValidationError("No manager assigned to approve this expense")
    return ExpenseState(
        status=ExpenseStatus.PENDING,
        current_approver_id=owner.manager_id,
        outcome=OUTCOME_SUBMITTED,
    )
