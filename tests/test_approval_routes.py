import pytest

from spendflow.models import ExpenseStatus


@pytest.fixture
def submit(client, auth_headers, expense_payload):
    def submit_as(owner_id, **overrides):
        headers = auth_headers(owner_id)
        expense_id = client.post("/api/expenses", json={**expense_payload, **overrides}, headers=headers).get_json()["id"]
        response = client.post(f"/api/expenses/{expense_id}/submit", headers=headers)
        assert response.status_code == 200
        return expense_id

    return submit_as


def decide(client, auth_headers, user_id, expense_id, decision, comment=None):
    return client.post(
        f"/api/approvals/{expense_id}/decision",
        json={"decision": decision, "comment": comment},
        headers=auth_headers(user_id),
    )


def test_pending_queue_lists_expenses_awaiting_caller(client, people, auth_headers, submit):
    expense_id = submit(people.employee_id, title="Hotel")

    body = client.get("/api/approvals/pending", headers=auth_headers(people.manager_id)).get_json()

    assert body["total"] == 1
    item = body["data"][0]
    assert item["expenseId"] == expense_id
    assert item["employeeName"] == "Eve Employee"
    assert item["title"] == "Hotel"
    assert item["status"] == "PENDING"

    body = client.get("/api/approvals/pending", headers=auth_headers(people.director_id)).get_json()
    assert body["total"] == 0


def test_only_current_approver_can_decide(client, people, auth_headers, submit):
    expense_id = submit(people.employee_id)

    body = client.get("/api/approvals/pending", headers=auth_headers(people.employee_id)).get_json()
    assert body["total"] == 0

    response = decide(client, auth_headers, people.employee_id, expense_id, "APPROVED")
    assert response.status_code == 403
    assert response.get_json()["message"] == "You are not authorized to approve this expense"


def test_employee_in_chain_can_decide_when_it_reaches_them(client, people, auth_headers, submit, make_rule):
    make_rule(people.company_id, "Peer review", [people.manager_id, people.loner_id], is_sequential=True)
    expense_id = submit(people.employee_id)

    body = decide(client, auth_headers, people.manager_id, expense_id, "APPROVED").get_json()
    assert body["currentApproverId"] == people.loner_id

    queue = client.get("/api/approvals/pending", headers=auth_headers(people.loner_id)).get_json()
    assert [item["expenseId"] for item in queue["data"]] == [expense_id]

    response = decide(client, auth_headers, people.loner_id, expense_id, "APPROVED")
    assert response.status_code == 200
    assert response.get_json()["status"] == "APPROVED"


def test_missing_expense_is_not_found_for_any_caller(client, people, auth_headers):
    response = decide(client, auth_headers, people.employee_id, 999, "APPROVED")

    assert response.status_code == 404


def test_default_rule_approves_on_first_decision(client, people, auth_headers, submit):
    expense_id = submit(people.employee_id)

    response = decide(client, auth_headers, people.manager_id, expense_id, "APPROVED", "ok")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "APPROVED"
    assert body["currentApproverId"] is None
    assert [(h["approverId"], h["decision"], h["comment"]) for h in body["approvalHistory"]] == [
        (people.manager_id, "APPROVED", "ok")
    ]


def test_sequential_chain_through_api(client, people, auth_headers, submit, make_rule):
    make_rule(people.company_id, "Chain", [people.manager_id, people.director_id, people.admin_id], is_sequential=True)
    expense_id = submit(people.employee_id)

    body = decide(client, auth_headers, people.manager_id, expense_id, "APPROVED").get_json()
    assert (body["status"], body["currentApproverId"]) == ("PENDING", people.director_id)

    body = decide(client, auth_headers, people.director_id, expense_id, "APPROVED").get_json()
    assert (body["status"], body["currentApproverId"]) == ("PENDING", people.admin_id)

    body = decide(client, auth_headers, people.admin_id, expense_id, "APPROVED").get_json()
    assert (body["status"], body["currentApproverId"]) == ("APPROVED", None)
    assert len(body["approvalHistory"]) == 3


def test_travel_rule_with_manager_outside_chain_approves_immediately(client, people, auth_headers, submit, make_rule):
    make_rule(
        people.company_id,
        "Travel",
        [people.director_id, people.admin_id],
        is_sequential=True,
        category_filter="Travel",
    )
    expense_id = submit(people.employee_id, category="Travel")

    body = decide(client, auth_headers, people.manager_id, expense_id, "APPROVED").get_json()

    assert body["status"] == "APPROVED"


def test_category_rule_beats_catch_all(client, people, auth_headers, submit, make_rule):
    make_rule(people.company_id, "General", [people.manager_id, people.director_id], is_sequential=True)
    make_rule(people.company_id, "Meals", [people.manager_id], min_approval_percent=100, category_filter="Meals")
    expense_id = submit(people.employee_id, category="Meals")

    body = decide(client, auth_headers, people.manager_id, expense_id, "APPROVED").get_json()

    assert body["status"] == "APPROVED"


def test_rejection_and_resubmission(client, people, auth_headers, submit):
    expense_id = submit(people.employee_id)

    body = decide(client, auth_headers, people.manager_id, expense_id, "REJECTED", "Missing receipt").get_json()
    assert body["status"] == "REJECTED"
    assert body["currentApproverId"] is None

    response = client.post(f"/api/expenses/{expense_id}/submit", headers=auth_headers(people.employee_id))
    assert response.get_json()["status"] == "PENDING"


def test_decision_errors(client, people, auth_headers, submit):
    expense_id = submit(people.employee_id)

    response = decide(client, auth_headers, people.manager_id, expense_id, "MAYBE")
    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid decision. Must be APPROVED or REJECTED"

    response = decide(client, auth_headers, people.director_id, expense_id, "APPROVED")
    assert response.status_code == 403

    response = decide(client, auth_headers, people.manager_id, 999, "APPROVED")
    assert response.status_code == 404


def test_replayed_decision_is_rejected(client, people, auth_headers, submit):
    expense_id = submit(people.employee_id)
    assert decide(client, auth_headers, people.manager_id, expense_id, "APPROVED").status_code == 200

    response = decide(client, auth_headers, people.manager_id, expense_id, "APPROVED")

    assert response.status_code == 400
    assert response.get_json()["message"] == "Expense is not pending approval"


def test_percentage_rule_waits_for_threshold(client, people, auth_headers, submit, make_rule):
    make_rule(people.company_id, "Board", [people.manager_id, people.director_id, people.admin_id])
    expense_id = submit(people.employee_id)

    body = decide(client, auth_headers, people.manager_id, expense_id, "APPROVED").get_json()

    assert body["status"] == ExpenseStatus.PENDING.value
    assert body["currentApproverId"] == people.manager_id
    assert len(body["approvalHistory"]) == 1
