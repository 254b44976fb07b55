from hrms.shared.database.models import User
from tests.helpers import ADMIN_PASSWORD, login, register_company, start_payload


def admin_headers(body):
    return {"Authorization": f"Bearer {body['token']}"}


def register_two(client, plans):
    acme = register_company(client, plans["basic"]["id"])
    beta = register_company(
        client, plans["basic"]["id"],
        email="b@beta.com", phone="1234567890", companyName="Beta"
    )
    return acme, beta


# =====================================================
# TENANT ISOLATION
# =====================================================

def test_company_admin_sees_only_own_company(client, plans):
    acme, beta = register_two(client, plans)

    own = client.get(f"/api/companies/{acme['company']['id']}", headers=admin_headers(acme))
    other = client.get(f"/api/companies/{beta['company']['id']}", headers=admin_headers(acme))

    assert own.status_code == 200
    assert own.json()["name"] == "Acme"
    assert other.status_code == 403


def test_super_admin_sees_every_company(client, plans, superadmin_headers):
    acme, beta = register_two(client, plans)

    response = client.get("/api/companies", headers=superadmin_headers)

    assert response.status_code == 200
    assert {c["name"] for c in response.json()} == {"Acme", "Beta"}
    assert client.get(
        f"/api/companies/{beta['company']['id']}", headers=superadmin_headers
    ).status_code == 200


def test_company_listing_is_super_admin_only(client, plans):
    acme = register_company(client, plans["basic"]["id"])
    assert client.get("/api/companies", headers=admin_headers(acme)).status_code == 403


def test_users_of_another_company_are_hidden(client, plans):
    acme, beta = register_two(client, plans)

    response = client.get(
        f"/api/companies/{beta['company']['id']}/users", headers=admin_headers(acme)
    )
    assert response.status_code == 403

    response = client.get(
        f"/api/companies/{acme['company']['id']}/users", headers=admin_headers(acme)
    )
    assert response.status_code == 200
    assert [u["email"] for u in response.json()] == ["a@acme.com"]


def test_employees_cannot_read_the_user_list(client, plans):
    acme = register_company(
        client, plans["basic"]["id"],
        employees=[{"name": "Bob", "email": "bob@acme.com"}],
    )
    employee = login(client, "bob@acme.com", "changeme123")

    response = client.get(f"/api/companies/{acme['company']['id']}/users", headers=employee)
    assert response.status_code == 403


# =====================================================
# SUPER-ADMIN EDITS
# =====================================================

def test_suspended_company_is_locked_out(client, plans, superadmin_headers):
    acme = register_company(client, plans["basic"]["id"])

    response = client.patch(
        f"/api/companies/{acme['company']['id']}",
        json={"status": "suspended"},
        headers=superadmin_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "suspended"

    assert client.get("/api/auth/me", headers=admin_headers(acme)).status_code == 403
    response = client.post(
        "/api/auth/login", json={"email": "a@acme.com", "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 403


def test_plan_change_recaptures_entitlements(client, plans, superadmin_headers):
    acme = register_company(client, plans["basic"]["id"])

    response = client.patch(
        f"/api/companies/{acme['company']['id']}",
        json={"plan": "professional"},
        headers=superadmin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["plan"] == "professional"
    assert body["maxEmployees"] == plans["professional"]["maxEmployees"]
    assert body["planSnapshot"]["price"] == plans["professional"]["price"]


def test_unknown_plan_name_is_rejected(client, plans, superadmin_headers):
    acme = register_company(client, plans["basic"]["id"])

    response = client.patch(
        f"/api/companies/{acme['company']['id']}",
        json={"plan": "platinum"},
        headers=superadmin_headers,
    )
    assert response.status_code == 400


def test_company_admin_cannot_change_status(client, plans):
    acme = register_company(client, plans["basic"]["id"])

    response = client.patch(
        f"/api/companies/{acme['company']['id']}",
        json={"status": "active"},
        headers=admin_headers(acme),
    )
    assert response.status_code == 403


# =====================================================
# SETTINGS
# =====================================================

def test_company_admin_updates_settings(client, plans):
    acme = register_company(client, plans["basic"]["id"])

    response = client.patch(
        f"/api/companies/{acme['company']['id']}/settings",
        json={"name": "Acme Corp", "primaryColor": "#112233", "website": "https://acme.example"},
        headers=admin_headers(acme),
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Acme Corp"
    assert response.json()["primaryColor"] == "#112233"


def test_settings_reject_a_phone_used_by_another_company(client, plans):
    acme, beta = register_two(client, plans)

    response = client.patch(
        f"/api/companies/{acme['company']['id']}/settings",
        json={"phone": "1234567890"},
        headers=admin_headers(acme),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "phone"


def test_settings_reject_a_phone_reserved_by_a_live_signup(client, plans):
    acme = register_company(client, plans["basic"]["id"])
    response = client.post(
        "/api/registration/start",
        json=start_payload(email="b@beta.com", phone="1234567890"),
    )
    assert response.status_code == 201

    response = client.patch(
        f"/api/companies/{acme['company']['id']}/settings",
        json={"phone": "1234567890"},
        headers=admin_headers(acme),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "phone"


def test_settings_of_another_company_are_forbidden(client, plans):
    acme, beta = register_two(client, plans)

    response = client.patch(
        f"/api/companies/{beta['company']['id']}/settings",
        json={"name": "Hijacked"},
        headers=admin_headers(acme),
    )
    assert response.status_code == 403


# =====================================================
# USERS
# =====================================================

def test_company_admin_adds_employee_to_own_company(client, db, plans):
    acme, beta = register_two(client, plans)

    response = client.post(
        "/api/users",
        json={
            "email": "New@Acme.com",
            "password": "secret123",
            "name": "New Hire",
            "role": "EMPLOYEE",
            "companyId": beta["company"]["id"],
        },
        headers=admin_headers(acme),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "new@acme.com"
    assert body["role"] == "EMPLOYEE"
    # Company is forced to the caller's own
    assert body["companyId"] == acme["company"]["id"]

    login(client, "new@acme.com", "secret123")


def test_company_admin_cannot_create_admins(client, plans):
    acme = register_company(client, plans["basic"]["id"])

    response = client.post(
        "/api/users",
        json={
            "email": "boss@acme.com",
            "password": "secret123",
            "name": "Boss",
            "role": "COMPANY_ADMIN",
        },
        headers=admin_headers(acme),
    )
    assert response.status_code == 403


def test_duplicate_user_email_is_rejected(client, plans):
    acme = register_company(client, plans["basic"]["id"])

    response = client.post(
        "/api/users",
        json={"email": "a@acme.com", "password": "secret123", "name": "Clone"},
        headers=admin_headers(acme),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "email"


def test_user_email_reserved_by_a_live_signup_is_rejected(client, plans):
    acme = register_company(client, plans["basic"]["id"])
    client.post(
        "/api/registration/start",
        json=start_payload(email="b@beta.com", phone="1234567890"),
    )

    response = client.post(
        "/api/users",
        json={"email": "b@beta.com", "password": "secret123", "name": "Bea"},
        headers=admin_headers(acme),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "email"


def test_user_creation_is_bounded_by_max_employees(client, db, plans, superadmin_headers):
    acme = register_company(client, plans["basic"]["id"], employee_count=2)
    client.patch(
        f"/api/companies/{acme['company']['id']}",
        json={"maxEmployees": 1},
        headers=superadmin_headers,
    )

    first = client.post(
        "/api/users",
        json={"email": "one@acme.com", "password": "secret123", "name": "One"},
        headers=admin_headers(acme),
    )
    second = client.post(
        "/api/users",
        json={"email": "two@acme.com", "password": "secret123", "name": "Two"},
        headers=admin_headers(acme),
    )

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["maxEmployees"] == 1
    assert second.json()["requested"] == 2
    assert db.query(User).filter(User.email == "two@acme.com").count() == 0


def test_super_admin_creates_company_admin(client, plans, superadmin_headers):
    acme = register_company(client, plans["basic"]["id"])

    response = client.post(
        "/api/users",
        json={
            "email": "second-admin@acme.com",
            "password": "secret123",
            "name": "Second Admin",
            "role": "COMPANY_ADMIN",
            "companyId": acme["company"]["id"],
        },
        headers=superadmin_headers,
    )

    assert response.status_code == 201
    assert response.json()["role"] == "COMPANY_ADMIN"


def test_non_super_admin_user_needs_a_company(client, superadmin_headers):
    response = client.post(
        "/api/users",
        json={"email": "lost@hrmsworld.com", "password": "secret123", "name": "Lost"},
        headers=superadmin_headers,
    )
    assert response.status_code == 400


def test_employees_cannot_create_users(client, plans):
    register_company(
        client, plans["basic"]["id"],
        employees=[{"name": "Bob", "email": "bob@acme.com"}],
    )
    employee = login(client, "bob@acme.com", "changeme123")

    response = client.post(
        "/api/users",
        json={"email": "x@acme.com", "password": "secret123", "name": "X"},
        headers=employee,
    )
    assert response.status_code == 403
