"""Expense model definitions."""
from __future__ import annotations

import enum

from spendflow import db


class ExpenseStatus(enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


EDITABLE_STATUSES = (ExpenseStatus.DRAFT, ExpenseStatus.REJECTED)


def _decimal_to_float(value):
    return float(value) if value is not None else None


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    date = db.Column(db.Date, nullable=False)
    category = db.Column(db.String(120), nullable=False, index=True)
    original_amount = db.Column(db.Numeric(12, 2), nullable=False)
    original_currency = db.Column(db.String(10), nullable=False)
    converted_amount = db.Column(db.Numeric(12, 2), nullable=True)
    exchange_rate = db.Column(db.Numeric(12, 6), nullable=True)
    status = db.Column(
        db.Enum(ExpenseStatus, name="expense_status"),
        nullable=False,
        default=ExpenseStatus.DRAFT,
        index=True,
    )
    current_approver_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    version_id = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now(),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version_id}

    company = db.relationship("Company", back_populates="expenses", lazy="joined")
    user = db.relationship("User", foreign_keys=[user_id], back_populates="expenses", lazy="joined")
    current_approver = db.relationship("User", foreign_keys=[current_approver_id], lazy="joined")
    lines = db.relationship(
        "ExpenseLine",
        back_populates="expense",
        lazy="selectin",
        order_by="ExpenseLine.id",
        cascade="all, delete-orphan",
    )
    attachments = db.relationship(
        "Attachment",
        back_populates="expense",
        lazy="selectin",
        order_by="Attachment.id",
        cascade="all, delete-orphan",
    )
    approval_history = db.relationship(
        "ApprovalHistory",
        back_populates="expense",
        lazy="selectin",
        order_by="ApprovalHistory.id",
        cascade="all, delete-orphan",
    )

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def to_dict(self, include_history: bool = False) -> dict:
        data = {
            "id": self.id,
            "company_id": self.company_id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat() if self.date else None,
            "category": self.category,
            "original_amount": _decimal_to_float(self.original_amount),
            "original_currency": self.original_currency,
            "converted_amount": _decimal_to_float(self.converted_amount),
            "exchange_rate": _decimal_to_float(self.exchange_rate),
            "status": self.status.value if self.status else None,
            "current_approver_id": self.current_approver_id,
            "user": self.user.to_summary() if self.user else None,
            "current_approver": self.current_approver.to_summary() if self.current_approver else None,
            "lines": [line.to_dict() for line in self.lines],
            "attachments": [attachment.to_dict() for attachment in self.attachments],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_history:
            data["approval_history"] = [entry.to_dict() for entry in self.approval_history]
        return data

    def __repr__(self) -> str:
        return f"<Expense id={self.id} status={self.status.value if self.status else None}>"


class ExpenseLine(db.Model):
    __tablename__ = "expense_lines"

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(db.Integer, db.ForeignKey("expenses.id"), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)

    expense = db.relationship("Expense", back_populates="lines")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "amount": _decimal_to_float(self.amount),
        }


class Attachment(db.Model):
    __tablename__ = "attachments"

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(db.Integer, db.ForeignKey("expenses.id"), nullable=False, index=True)
    filename = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(512), nullable=False)
    content_type = db.Column(db.String(120), nullable=False)
    size = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)

    expense = db.relationship("Expense", back_populates="attachments")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "expense_id": self.expense_id,
            "filename": self.filename,
            "url": self.url,
            "content_type": self.content_type,
            "size": self.size,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Attachment {self.filename} expense_id={self.expense_id}>"
