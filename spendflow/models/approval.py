"""Approval-related models."""
from __future__ import annotations

import enum

from spendflow import db


class ApprovalDecision(enum.Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ApprovalHistory(db.Model):
    __tablename__ = "approval_history"

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(db.Integer, db.ForeignKey("expenses.id"), nullable=False, index=True)
    approver_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    decision = db.Column(db.Enum(ApprovalDecision, name="approval_decision"), nullable=False)
    comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)

    expense = db.relationship("Expense", back_populates="approval_history")
    approver = db.relationship("User", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "expense_id": self.expense_id,
            "approver_id": self.approver_id,
            "approver": self.approver.to_summary() if self.approver else None,
            "decision": self.decision.value if self.decision else None,
            "comment": self.comment,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"<ApprovalHistory expense_id={self.expense_id} "
            f"decision={self.decision.value if self.decision else None}>"
        )


class ApprovalRule(db.Model):
    """Company approval rule.

    ``conditions`` holds ``is_sequential``, ``min_approval_percent``,
    ``category_filter`` and ``specific_approver_ids``. ``approvers`` is the
    ordered list of ``{"id": user_id, "order": rank}`` entries.
    """

    __tablename__ = "approval_rules"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    conditions = db.Column(db.JSON, nullable=False, default=dict)
    approvers = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now(),
        nullable=False,
    )

    company = db.relationship("Company", back_populates="approval_rules")

    @property
    def category_filter(self):
        return (self.conditions or {}).get("category_filter") or None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "conditions": dict(self.conditions or {}),
            "approvers": list(self.approvers or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<ApprovalRule {self.name}>"
