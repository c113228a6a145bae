from types import SimpleNamespace

import pytest

from spendflow.errors import ConflictError, NotFoundError, ValidationError
from spendflow.models import ExpenseStatus
from spendflow.services import approval_service
from spendflow.services.expense_store import ExpenseStore


class FakeStore(ExpenseStore):
    """In-memory store that reports ``conflicts`` concurrent modifications before succeeding."""

    def __init__(self, expense, conflicts=0):
        self.expense = expense
        self.conflicts = conflicts
        self.loads = 0
        self.committed = []

    def load_expense_for_decision(self, expense_id):
        self.loads += 1
        if expense_id != self.expense.id:
            raise NotFoundError("Expense not found")
        return self.expense

    def commit_decision(self, expense, state, entry):
        if self.conflicts:
            self.conflicts -= 1
            raise ConflictError("Expense was modified concurrently. Please retry.")
        expense.status = state.status
        expense.current_approver_id = state.current_approver_id
        expense.approval_history.append(entry)
        self.committed.append(entry)
        return expense

    def commit_submission(self, expense, state):
        expense.status = state.status
        expense.current_approver_id = state.current_approver_id
        return expense


def pending_expense(rules=()):
    return SimpleNamespace(
        id=7,
        status=ExpenseStatus.PENDING,
        current_approver_id=2,
        category="Office",
        company=SimpleNamespace(approval_rules=list(rules)),
        approval_history=[],
    )


def test_decision_is_committed():
    store = FakeStore(pending_expense())

    expense = approval_service.make_decision(store, 7, 2, "APPROVED", "ok")

    assert expense.status is ExpenseStatus.APPROVED
    assert len(store.committed) == 1
    assert store.committed[0].comment == "ok"


def test_single_conflict_is_retried():
    store = FakeStore(pending_expense(), conflicts=1)

    expense = approval_service.make_decision(store, 7, 2, "APPROVED")

    assert expense.status is ExpenseStatus.APPROVED
    assert store.loads == 2
    assert len(store.committed) == 1


def test_second_conflict_is_raised():
    store = FakeStore(pending_expense(), conflicts=2)

    with pytest.raises(ConflictError):
        approval_service.make_decision(store, 7, 2, "APPROVED")

    assert store.loads == approval_service.MAX_ATTEMPTS
    assert store.committed == []


def test_invalid_decision_never_reaches_store():
    store = FakeStore(pending_expense())

    with pytest.raises(ValidationError):
        approval_service.make_decision(store, 7, 2, "ESCALATE")

    assert store.loads == 0


def test_missing_expense():
    with pytest.raises(NotFoundError):
        approval_service.make_decision(FakeStore(pending_expense()), 99, 2, "APPROVED")


def test_rule_is_resolved_from_company_rules():
    chain = SimpleNamespace(
        conditions={"is_sequential": True, "category_filter": "Office"},
        approvers=[{"id": 2, "order": 1}, {"id": 5, "order": 2}],
    )
    store = FakeStore(pending_expense(rules=[chain]))

    expense = approval_service.make_decision(store, 7, 2, "APPROVED")

    assert expense.status is ExpenseStatus.PENDING
    assert expense.current_approver_id == 5


def test_store_must_implement_every_operation():
    class LoadOnlyStore(ExpenseStore):
        def load_expense_for_decision(self, expense_id):
            return None

    with pytest.raises(TypeError):
        LoadOnlyStore()
