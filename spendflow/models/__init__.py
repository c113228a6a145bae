"""Application data models exposed for easy imports."""
from spendflow import db  # noqa: F401
from .company import Company  # noqa: F401
from .user import User, UserRole  # noqa: F401
from .expense import Attachment, Expense, ExpenseLine, ExpenseStatus  # noqa: F401
from .approval import ApprovalDecision, ApprovalHistory, ApprovalRule  # noqa: F401

__all__ = [
    "db",
    "Company",
    "User",
    "UserRole",
    "Expense",
    "ExpenseLine",
    "ExpenseStatus",
    "Attachment",
    "ApprovalDecision",
    "ApprovalHistory",
    "ApprovalRule",
]
