import os

# Must be set before hrms.config.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_BACKEND"] = "database"
os.environ["SUPERADMIN_EMAIL"] = "root@hrmsworld.com"
os.environ["SUPERADMIN_PASSWORD"] = "rootpass123"

import pytest
from fastapi.testclient import TestClient

from hrms.config.database import Base, SessionLocal, engine
from hrms.core.auth.session_store import InMemorySessionStore
from hrms.main import app
from hrms.shared.database.maintenance import seed_database
from tests.helpers import SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD, login


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    seed_database(session)
    InMemorySessionStore.clear()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def superadmin_headers(client):
    return login(client, SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD)


@pytest.fixture
def plans(client):
    """Active plans by name"""
    response = client.get("/api/plans")
    assert response.status_code == 200
    return {plan["name"]: plan for plan in response.json()}
