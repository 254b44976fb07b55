from datetime import datetime, timedelta

import pytest
from starlette.requests import Request

from hrms.core.auth.service import AuthService
from hrms.core.auth.session_store import DatabaseSessionStore, InMemorySessionStore
from hrms.core.enums import UserRole
from hrms.shared.database.models import AuthSession


@pytest.fixture(params=["memory", "database"])
def store(request, db):
    if request.param == "memory":
        return InMemorySessionStore()
    return DatabaseSessionStore(db)


def test_created_token_resolves_to_its_session(store):
    token = store.create_session("user-1", UserRole.COMPANY_ADMIN, "company-1")

    context = store.resolve(token)

    assert context.user_id == "user-1"
    assert context.role == UserRole.COMPANY_ADMIN
    assert context.company_id == "company-1"
    assert context.expires_at > context.issued_at


def test_destroyed_token_no_longer_resolves(store):
    token = store.create_session("user-1", UserRole.EMPLOYEE, "company-1")

    store.destroy_session(token)

    assert store.resolve(token) is None


def test_destroy_is_idempotent_and_ignores_garbage(store):
    token = store.create_session("user-1", UserRole.EMPLOYEE, "company-1")

    store.destroy_session(token)
    store.destroy_session(token)
    store.destroy_session("not-a-jwt")

    assert store.resolve(token) is None


def test_forged_or_foreign_tokens_are_rejected(store):
    assert store.resolve("not-a-jwt") is None

    # Validly signed but never stored
    orphan = AuthService.create_access_token(
        data={"user_id": "user-1", "role": UserRole.EMPLOYEE.value},
        token_id=AuthService.new_token_id(),
        issued_at=datetime.utcnow(),
    )
    assert store.resolve(orphan) is None


def test_purge_expired_drops_sessions_past_their_expiry(store):
    first = store.create_session("user-1", UserRole.EMPLOYEE, "company-1")
    second = store.create_session("user-2", UserRole.EMPLOYEE, "company-1")

    assert store.purge_expired(datetime.utcnow()) == 0
    assert store.resolve(first) is not None

    removed = store.purge_expired(datetime.utcnow() + store.ttl + timedelta(seconds=1))

    assert removed == 2
    assert store.resolve(first) is None
    assert store.resolve(second) is None


def test_short_ttl_expires_session(db):
    store = DatabaseSessionStore(db, ttl=timedelta(minutes=5))
    token = store.create_session("user-1", UserRole.EMPLOYEE, None)
    record = db.query(AuthSession).one()
    record.expires_at = datetime.utcnow() - timedelta(seconds=1)
    db.commit()

    assert store.resolve(token) is None
    assert db.query(AuthSession).count() == 0


def make_request(authorization=None):
    headers = [(b"authorization", authorization.encode())] if authorization else []
    return Request({"type": "http", "headers": headers})


def test_get_session_reads_only_bearer_headers(store):
    token = store.create_session("user-1", UserRole.EMPLOYEE, "company-1")

    assert store.get_session(make_request(f"Bearer {token}")).user_id == "user-1"
    assert store.get_session(make_request(f"bearer {token}")).user_id == "user-1"
    assert store.get_session(make_request(f"Basic {token}")) is None
    assert store.get_session(make_request("Bearer")) is None
    assert store.get_session(make_request()) is None
