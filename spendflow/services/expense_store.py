"""Persistence boundary used by the approval workflow."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from spendflow.errors import ConflictError, NotFoundError
from spendflow.models import ApprovalHistory, Expense
from spendflow.services.approval_engine import ExpenseState, HistoryEntry

logger = logging.getLogger(__name__)


class ExpenseStore(ABC):
    """Transactional record store for expenses and their approval history."""

    @abstractmethod
    def load_expense_for_decision(self, expense_id: int) -> Expense:
        """Return the expense with its owner, company rules and history loaded."""

    @abstractmethod
    def commit_decision(self, expense: Expense, state: ExpenseState, entry: HistoryEntry) -> Expense:
        """Append ``entry`` and apply ``state`` to ``expense`` in one transaction."""

    @abstractmethod
    def commit_submission(self, expense: Expense, state: ExpenseState) -> Expense:
        """Apply a submission ``state`` to ``expense``."""


class SQLAlchemyExpenseStore(ExpenseStore):
    """Store backed by a SQLAlchemy session.

    ``Expense`` is mapped with a version counter, so a commit that races
    another writer on the same expense raises :class:`ConflictError`.
    """

    def __init__(self, session):
        self.session = session

    def load_expense_for_decision(self, expense_id: int) -> Expense:
        expense = self.session.get(Expense, expense_id, populate_existing=True)
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    def commit_decision(self, expense: Expense, state: ExpenseState, entry: HistoryEntry) -> Expense:
        self.session.add(
            ApprovalHistory(
                expense_id=expense.id,
                approver_id=entry.approver_id,
                decision=entry.decision,
                comment=entry.comment,
                created_at=entry.created_at,
            )
        )
        self._apply(expense, state, entry.created_at)
        self._commit(expense)
        return expense

    def commit_submission(self, expense: Expense, state: ExpenseState) -> Expense:
        self._apply(expense, state, datetime.utcnow())
        self._commit(expense)
        return expense

    @staticmethod
    def _apply(expense: Expense, state: ExpenseState, when: datetime) -> None:
        expense.status = state.status
        expense.current_approver_id = state.current_approver_id
        # always touch the row so the version check runs even when nothing else changed
        expense.updated_at = when

    def _commit(self, expense: Expense) -> None:
        expense_id = expense.id
        try:
            self.session.commit()
        except StaleDataError as exc:
            self.session.rollback()
            logger.warning("Concurrent modification detected on expense %s", expense_id)
            raise ConflictError("Expense was modified concurrently. Please retry.") from exc
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to persist changes for expense %s", expense_id)
            raise
