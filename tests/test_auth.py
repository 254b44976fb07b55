from hrms.core.enums import UserStatus
from hrms.shared.database.models import AuditLog, User
from tests.helpers import SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD, login


def test_login_returns_token_and_profile(client):
    response = client.post(
        "/api/auth/login",
        json={"email": SUPERADMIN_EMAIL, "password": SUPERADMIN_PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["user"]["email"] == SUPERADMIN_EMAIL
    assert body["user"]["role"] == "SUPER_ADMIN"
    assert body["user"]["companyId"] is None
    assert "password" not in body["user"]


def test_login_email_is_case_insensitive(client):
    response = client.post(
        "/api/auth/login",
        json={"email": SUPERADMIN_EMAIL.upper(), "password": SUPERADMIN_PASSWORD},
    )
    assert response.status_code == 200


def test_login_with_wrong_password_is_401_without_token(client):
    response = client.post(
        "/api/auth/login",
        json={"email": SUPERADMIN_EMAIL, "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert "token" not in response.json()
    assert response.json()["error"]


def test_login_for_unknown_user_is_401(client):
    response = client.post(
        "/api/auth/login",
        json={"email": "nobody@hrmsworld.com", "password": "whatever1"},
    )
    assert response.status_code == 401


def test_login_missing_fields_is_400(client):
    response = client.post("/api/auth/login", json={"email": SUPERADMIN_EMAIL})
    assert response.status_code == 400

    response = client.post("/api/auth/login", json={})
    assert response.status_code == 400


def test_login_inactive_account_is_403(client, db):
    user = db.query(User).filter(User.email == SUPERADMIN_EMAIL).one()
    user.status = UserStatus.INACTIVE.value
    db.commit()

    response = client.post(
        "/api/auth/login",
        json={"email": SUPERADMIN_EMAIL, "password": SUPERADMIN_PASSWORD},
    )

    assert response.status_code == 403
    assert "token" not in response.json()


def test_login_is_audited(client, db):
    login(client, SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD)

    assert db.query(AuditLog).filter(AuditLog.action == "LOGIN").count() == 1


def test_me_requires_a_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_me_rejects_a_malformed_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_me_returns_the_caller(client, superadmin_headers):
    response = client.get("/api/auth/me", headers=superadmin_headers)

    assert response.status_code == 200
    assert response.json()["email"] == SUPERADMIN_EMAIL


def test_logout_invalidates_the_token(client, superadmin_headers):
    response = client.post("/api/auth/logout", headers=superadmin_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.get("/api/auth/me", headers=superadmin_headers)
    assert response.status_code == 401


def test_other_sessions_survive_logout(client):
    first = login(client, SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD)
    second = login(client, SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD)

    client.post("/api/auth/logout", headers=first)

    assert client.get("/api/auth/me", headers=first).status_code == 401
    assert client.get("/api/auth/me", headers=second).status_code == 200


def test_me_rejects_a_non_bearer_scheme(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Basic cm9vdDpwYXNz"})
    assert response.status_code == 401


def test_openapi_declares_the_bearer_scheme(client):
    schema = client.get("/openapi.json").json()

    schemes = schema["components"]["securitySchemes"]
    assert schemes["HTTPBearer"] == {"type": "http", "scheme": "bearer"}
    assert {"HTTPBearer": []} in schema["paths"]["/api/auth/me"]["get"]["security"]
