from datetime import datetime, timedelta

from hrms.shared.database.models import (
    Company, OfflinePaymentRequest, Order, RegistrationSession, User
)
from tests.helpers import (
    ADMIN_PASSWORD, SUPERADMIN_EMAIL, login, register_company, start_payload
)


def start(client, **overrides):
    response = client.post("/api/registration/start", json=start_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["sessionId"]


# =====================================================
# STEP 1
# =====================================================

def test_start_opens_a_session_at_plan_selection(client):
    session_id = start(client)

    response = client.get(f"/api/registration/{session_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["step"] == "plan_selection"
    assert body["companyName"] == "Acme"
    assert body["email"] == "a@acme.com"
    assert body["planId"] is None


def test_start_rejects_mismatched_passwords(client):
    response = client.post(
        "/api/registration/start",
        json=start_payload(confirmPassword="different1"),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request data"


def test_start_requires_accepted_terms(client):
    response = client.post("/api/registration/start", json=start_payload(acceptTerms=False))
    assert response.status_code == 400


def test_start_rejects_short_phone_and_bad_email(client):
    assert client.post(
        "/api/registration/start", json=start_payload(phone="123")
    ).status_code == 400
    assert client.post(
        "/api/registration/start", json=start_payload(email="not-an-email")
    ).status_code == 400


def test_start_rejects_email_of_an_existing_user(client):
    response = client.post(
        "/api/registration/start",
        json=start_payload(email=SUPERADMIN_EMAIL),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "email"


def test_start_rejects_email_held_by_a_live_session(client):
    start(client)

    response = client.post(
        "/api/registration/start",
        json=start_payload(phone="1111111111", email="A@Acme.com"),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "email"


def test_start_rejects_phone_of_a_registered_company(client, plans):
    register_company(client, plans["basic"]["id"])

    response = client.post(
        "/api/registration/start",
        json=start_payload(email="other@acme.com"),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "phone"


# =====================================================
# STEP ORDERING
# =====================================================

def test_select_plan_before_start_is_invalid_state(client, plans):
    response = client.post(
        "/api/registration/no-such-session/select-plan",
        json={"planId": plans["basic"]["id"]},
    )
    assert response.status_code == 409


def test_unknown_session_lookup_is_404(client):
    assert client.get("/api/registration/no-such-session").status_code == 404


def test_pay_before_plan_selection_is_invalid_state(client, db):
    session_id = start(client)

    response = client.post(
        f"/api/registration/{session_id}/pay-offline", json={"notes": "early"}
    )

    assert response.status_code == 409
    assert response.json()["currentStatus"] == "plan_selection"
    assert db.query(Company).count() == 0
    assert db.query(RegistrationSession).one().step == "plan_selection"


def test_add_employees_before_plan_selection_is_invalid_state(client):
    session_id = start(client)

    response = client.post(
        f"/api/registration/{session_id}/add-employees", json={"employeeCount": 3}
    )
    assert response.status_code == 409


def test_select_plan_rejects_unknown_or_inactive_plan(client, plans, superadmin_headers):
    session_id = start(client)

    response = client.post(
        f"/api/registration/{session_id}/select-plan", json={"planId": "missing"}
    )
    assert response.status_code == 400

    client.delete(f"/api/plans/{plans['basic']['id']}", headers=superadmin_headers)
    response = client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )
    assert response.status_code == 400


def test_reselecting_a_plan_rewinds_to_employee_count(client, plans):
    session_id = start(client)
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )
    client.post(
        f"/api/registration/{session_id}/add-employees", json={"employeeCount": 5}
    )

    response = client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["professional"]["id"]},
    )
    assert response.status_code == 200
    assert response.json()["session"]["step"] == "employee_count"
    assert response.json()["session"]["employeeCount"] is None

    response = client.post(f"/api/registration/{session_id}/pay-offline", json={})
    assert response.status_code == 409
    assert response.json()["currentStatus"] == "employee_count"


# =====================================================
# STEP 3
# =====================================================

def test_add_employees_returns_quote(client, plans):
    session_id = start(client)
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["professional"]["id"]},
    )

    response = client.post(
        f"/api/registration/{session_id}/add-employees", json={"employeeCount": 110}
    )

    assert response.status_code == 200
    session = response.json()["session"]
    assert session["step"] == "payment"
    professional = plans["professional"]
    expected = professional["price"] + (
        110 - professional["employeesIncluded"]
    ) * professional["pricePerAdditionalEmployee"]
    assert session["quote"]["totalCost"] == expected


def test_employee_count_above_plan_maximum_is_rejected(client, plans):
    session_id = start(client)
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )
    limit = plans["basic"]["maxEmployees"]

    response = client.post(
        f"/api/registration/{session_id}/add-employees",
        json={"employeeCount": limit + 1},
    )

    assert response.status_code == 400
    assert response.json()["maxEmployees"] == limit
    assert response.json()["requested"] == limit + 1

    # Exactly at the limit is fine
    response = client.post(
        f"/api/registration/{session_id}/add-employees",
        json={"employeeCount": limit},
    )
    assert response.status_code == 200


def test_employee_count_defaults_to_listed_employees(client, plans):
    session_id = start(client)
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )

    response = client.post(
        f"/api/registration/{session_id}/add-employees",
        json={"employees": [
            {"name": "Bob", "email": "bob@acme.com"},
            {"name": "Eve", "email": "eve@acme.com"},
        ]},
    )

    assert response.status_code == 200
    assert response.json()["session"]["employeeCount"] == 2


def test_duplicate_employee_emails_are_rejected(client, plans):
    session_id = start(client)
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )

    response = client.post(
        f"/api/registration/{session_id}/add-employees",
        json={"employees": [
            {"name": "Bob", "email": "bob@acme.com"},
            {"name": "Bobby", "email": "BOB@acme.com"},
        ]},
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "employees.1.email"


def test_employee_email_held_by_another_live_signup_is_rejected(client, plans):
    beta_session = start(client, email="b@beta.com", phone="1234567890", companyName="Beta")
    acme_session = start(client)
    client.post(
        f"/api/registration/{acme_session}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )

    response = client.post(
        f"/api/registration/{acme_session}/add-employees",
        json={"employees": [{"name": "Bea", "email": "b@beta.com"}]},
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "employees.0.email"

    # The other signup can still finish
    client.post(
        f"/api/registration/{beta_session}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )
    client.post(
        f"/api/registration/{beta_session}/add-employees", json={"employeeCount": 3}
    )
    response = client.post(f"/api/registration/{beta_session}/pay-offline", json={})
    assert response.status_code == 200


def test_start_rejects_email_listed_as_employee_in_a_live_signup(client, plans):
    session_id = start(client)
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )
    client.post(
        f"/api/registration/{session_id}/add-employees",
        json={"employees": [{"name": "Bob", "email": "bob@beta.com"}]},
    )

    response = client.post(
        "/api/registration/start",
        json=start_payload(email="bob@beta.com", phone="1234567890"),
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "email"


def test_employee_email_of_a_registered_company_is_rejected(client, db, plans):
    register_company(client, plans["basic"]["id"])
    session_id = start(client, email="b@beta.com", phone="1234567890")
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )

    response = client.post(
        f"/api/registration/{session_id}/add-employees",
        json={"employees": [{"name": "Ada", "email": "A@acme.com"}]},
    )

    assert response.status_code == 400
    assert response.json()["duplicateField"] == "employees.0.email"


# =====================================================
# STEP 4
# =====================================================

def test_online_payment_creates_pending_company_and_order(client, db, plans):
    body = register_company(client, plans["basic"]["id"], employee_count=5, method="online")

    assert body["success"] is True
    assert body["orderId"]
    assert body["offlineRequestId"] is None
    assert body["amount"] == plans["basic"]["price"]
    assert body["company"]["status"] == "pending"
    assert body["user"]["role"] == "COMPANY_ADMIN"

    order = db.query(Order).one()
    assert order.status == "pending"
    assert order.payment_provider == "dummy"
    assert order.payment_metadata == {"cardLast4": "4242"}

    company = db.query(Company).one()
    assert company.plan_snapshot["price"] == plans["basic"]["price"]
    assert company.plan_snapshot["employeeCount"] == 5


def test_online_payment_requires_every_card_field(client, db, plans):
    session_id = start(client)
    client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )
    client.post(f"/api/registration/{session_id}/add-employees", json={"employeeCount": 3})

    response = client.post(
        f"/api/registration/{session_id}/pay-online",
        json={"cardNumber": "4242424242424242", "expiryMonth": "12", "expiryYear": "2030"},
    )

    assert response.status_code == 400
    assert db.query(Company).count() == 0


def test_payment_creates_listed_employees(client, db, plans):
    register_company(
        client,
        plans["basic"]["id"],
        employee_count=3,
        employees=[{"name": "Bob", "email": "bob@acme.com", "department": "Ops"}],
    )

    employee = db.query(User).filter(User.email == "bob@acme.com").one()
    assert employee.role == "EMPLOYEE"
    assert employee.department == "Ops"
    assert employee.company_id == db.query(Company).one().id


def test_payment_token_logs_the_admin_in(client, plans):
    body = register_company(client, plans["basic"]["id"])

    response = client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"}
    )

    assert response.status_code == 200
    assert response.json()["email"] == "a@acme.com"


def test_admin_can_log_in_while_company_is_pending(client, plans):
    register_company(client, plans["basic"]["id"])

    response = client.post(
        "/api/auth/login", json={"email": "a@acme.com", "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200
    assert response.json()["companyStatus"] == "pending"


def test_completed_session_rejects_further_steps(client, db, plans):
    register_company(client, plans["basic"]["id"])
    session_id = db.query(RegistrationSession).one().id

    response = client.post(
        f"/api/registration/{session_id}/pay-offline", json={"notes": "again"}
    )

    assert response.status_code == 409
    assert response.json()["currentStatus"] == "complete"
    assert db.query(OfflinePaymentRequest).count() == 1


def test_completed_signup_keeps_the_email_taken(client, plans):
    register_company(client, plans["basic"]["id"])

    response = client.post(
        "/api/registration/start", json=start_payload(phone="5555555555")
    )

    # Now held by the company and its admin rather than the session
    assert response.status_code == 400
    assert response.json()["duplicateField"] == "email"


# =====================================================
# EXPIRY
# =====================================================

def expire(db, session_id):
    session = db.query(RegistrationSession).filter(RegistrationSession.id == session_id).one()
    session.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()


def test_expired_session_is_gone(client, db, plans):
    session_id = start(client)
    expire(db, session_id)

    response = client.post(
        f"/api/registration/{session_id}/select-plan",
        json={"planId": plans["basic"]["id"]},
    )

    assert response.status_code == 410


def test_expired_session_releases_its_email(client, db):
    session_id = start(client)
    expire(db, session_id)

    # Starting again purges the stale session first
    new_session_id = start(client)

    assert new_session_id != session_id
    assert db.query(RegistrationSession).count() == 1
