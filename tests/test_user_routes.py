def test_admin_lists_company_users(client, people, auth_headers):
    body = client.get("/api/users", headers=auth_headers(people.admin_id)).get_json()

    assert body["total"] == 5
    assert people.outsider_id not in {user["id"] for user in body["data"]}


def test_admin_creates_user(client, people, auth_headers):
    response = client.post(
        "/api/users",
        json={
            "name": "Sam Staff",
            "email": "sam@acme.test",
            "password": "secret123",
            "role": "employee",
            "managerId": people.director_id,
        },
        headers=auth_headers(people.admin_id),
    )

    assert response.status_code == 201
    user = response.get_json()["user"]
    assert user["role"] == "EMPLOYEE"
    assert user["managerId"] == people.director_id
    assert user["isManagerApprover"] is False


def test_manager_defaults_to_approver(client, people, auth_headers):
    response = client.post(
        "/api/users",
        json={"name": "Max", "email": "max@acme.test", "password": "secret123", "role": "MANAGER"},
        headers=auth_headers(people.admin_id),
    )

    assert response.get_json()["user"]["isManagerApprover"] is True


def test_duplicate_email_conflicts(client, people, auth_headers):
    response = client.post(
        "/api/users",
        json={"name": "Eve", "email": "eve@acme.test", "password": "secret123", "role": "EMPLOYEE"},
        headers=auth_headers(people.admin_id),
    )

    assert response.status_code == 409
    assert response.get_json()["message"] == "Email already exists."


def test_manager_must_be_in_same_company(client, people, auth_headers):
    response = client.post(
        "/api/users",
        json={
            "name": "Sam",
            "email": "sam@acme.test",
            "password": "secret123",
            "role": "EMPLOYEE",
            "managerId": people.outsider_id,
        },
        headers=auth_headers(people.admin_id),
    )

    assert response.status_code == 400


def test_update_user_manager(client, people, auth_headers):
    headers = auth_headers(people.admin_id)

    response = client.put(f"/api/users/{people.loner_id}", json={"managerId": people.director_id}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()["user"]["managerId"] == people.director_id

    response = client.put(f"/api/users/{people.loner_id}", json={"managerId": people.loner_id}, headers=headers)
    assert response.status_code == 400


def test_user_from_other_company_is_hidden(client, people, auth_headers):
    response = client.get(f"/api/users/{people.outsider_id}", headers=auth_headers(people.admin_id))

    assert response.status_code == 404


def test_non_admin_cannot_manage_users(client, people, auth_headers):
    assert client.get("/api/users", headers=auth_headers(people.manager_id)).status_code == 403


def test_company_settings(client, people, auth_headers):
    headers = auth_headers(people.admin_id)

    body = client.get("/api/companies", headers=headers).get_json()
    assert [company["name"] for company in body["data"]] == ["Acme Corp"]

    response = client.put(f"/api/companies/{people.company_id}", json={"currencyCode": "gbp"}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()["currencyCode"] == "GBP"

    response = client.put(f"/api/companies/{people.company_id}", json={"currencyCode": "POUND"}, headers=headers)
    assert response.status_code == 400


def test_other_company_is_not_found(client, people, auth_headers):
    response = client.get(f"/api/companies/{people.other_company_id}", headers=auth_headers(people.employee_id))

    assert response.status_code == 404


def test_employee_cannot_update_company(client, people, auth_headers):
    response = client.put(
        f"/api/companies/{people.company_id}", json={"name": "Evil Corp"}, headers=auth_headers(people.employee_id)
    )

    assert response.status_code == 403
