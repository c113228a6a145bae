from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from spendflow import create_app, db
from spendflow.models import ApprovalRule, Company, Expense, ExpenseStatus, User, UserRole
from spendflow.services import token_service


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _add_user(company, name, email, role, manager=None, approver=False):
    user = User(
        name=name,
        email=email,
        role=role,
        company=company,
        manager=manager,
        is_manager_approver=approver,
    )
    user.set_password("secret123")
    db.session.add(user)
    return user


@pytest.fixture
def people(app):
    """Acme Corp with an admin, a manager, a director and an employee reporting to the manager."""
    with app.app_context():
        acme = Company(name="Acme Corp", country="United States", currency_code="USD")
        other = Company(name="Globex", country="Germany", currency_code="EUR")
        db.session.add_all([acme, other])

        admin = _add_user(acme, "Alice Admin", "alice@acme.test", UserRole.ADMIN, approver=True)
        manager = _add_user(acme, "Mona Manager", "mona@acme.test", UserRole.MANAGER, approver=True)
        director = _add_user(acme, "Dan Director", "dan@acme.test", UserRole.MANAGER, approver=True)
        employee = _add_user(acme, "Eve Employee", "eve@acme.test", UserRole.EMPLOYEE, manager=manager)
        loner = _add_user(acme, "Lou Loner", "lou@acme.test", UserRole.EMPLOYEE)
        outsider = _add_user(other, "Otto Outsider", "otto@globex.test", UserRole.ADMIN, approver=True)
        db.session.commit()

        return SimpleNamespace(
            company_id=acme.id,
            other_company_id=other.id,
            admin_id=admin.id,
            manager_id=manager.id,
            director_id=director.id,
            employee_id=employee.id,
            loner_id=loner.id,
            outsider_id=outsider.id,
        )


@pytest.fixture
def auth_headers(app):
    def make(user_id):
        with app.app_context():
            user = db.session.get(User, user_id)
            token = token_service.generate_token(user)
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture
def make_expense(app):
    """Insert an expense directly, bypassing the API."""
    def make(owner_id, status=ExpenseStatus.DRAFT, current_approver_id=None, category="Office", **fields):
        with app.app_context():
            owner = db.session.get(User, owner_id)
            expense = Expense(
                company_id=owner.company_id,
                user_id=owner.id,
                title=fields.pop("title", "Printer paper"),
                date=fields.pop("date", date(2025, 9, 15)),
                category=category,
                original_amount=fields.pop("original_amount", Decimal("42.50")),
                original_currency=fields.pop("original_currency", "USD"),
                converted_amount=Decimal("42.50"),
                exchange_rate=Decimal("1"),
                status=status,
                current_approver_id=current_approver_id,
                **fields,
            )
            db.session.add(expense)
            db.session.commit()
            return expense.id

    return make


@pytest.fixture
def make_rule(app):
    def make(company_id, name, approvers, is_sequential=False, min_approval_percent=100,
             category_filter=None, specific_approver_ids=None):
        with app.app_context():
            rule = ApprovalRule(
                company_id=company_id,
                name=name,
                conditions={
                    "is_sequential": is_sequential,
                    "min_approval_percent": min_approval_percent,
                    "category_filter": category_filter,
                    "specific_approver_ids": list(specific_approver_ids or []),
                },
                approvers=[{"id": user_id, "order": index + 1} for index, user_id in enumerate(approvers)],
            )
            db.session.add(rule)
            db.session.commit()
            return rule.id

    return make


EXPENSE_PAYLOAD = {
    "title": "Client dinner",
    "description": "Dinner with the Initech team",
    "date": "2025-09-20",
    "category": "Meals",
    "originalAmount": 120,
    "originalCurrency": "USD",
    "lines": [
        {"description": "Food", "amount": 100},
        {"description": "Tip", "amount": 20},
    ],
}


@pytest.fixture
def expense_payload():
    return {**EXPENSE_PAYLOAD, "lines": [dict(line) for line in EXPENSE_PAYLOAD["lines"]]}
