"""
Shared fixtures: an in-memory database and authenticated API clients.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine, init_db
from app.main import app
from app.models.database_models import Organization, User


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


def create_user(email, organization_name):
    db = SessionLocal()
    try:
        organization = Organization(name=organization_name)
        db.add(organization)
        db.flush()
        user = User(email=email, full_name="Operador Test", organization_id=organization.id)
        db.add(user)
        db.commit()
        db.refresh(user)
        db.expunge(user)
        return user
    finally:
        db.close()


@pytest.fixture
def user():
    return create_user("operador@agro.test", "Aero Servicios")


@pytest.fixture
def other_user():
    return create_user("otro@agro.test", "Otra Empresa")


@pytest.fixture
def api(user):
    with TestClient(app) as test_client:
        test_client.headers.update({"X-User-Id": user.id})
        yield test_client


@pytest.fixture
def other_api(other_user):
    with TestClient(app) as test_client:
        test_client.headers.update({"X-User-Id": other_user.id})
        yield test_client


@pytest.fixture
def job_factory(api):
    """Create client, farm and job through the API; returns the job JSON."""
    def make_job(**fields):
        client = api.post("/api/clients", json={"name": "Estancia La Aurora"}).json()
        farm = api.post(f"/api/clients/{client['id']}/farms", json={"name": "Lote 4"}).json()
        payload = {"client_id": client["id"], "farm_id": farm["id"], "title": "Fumigación soja"}
        payload.update(fields)
        response = api.post("/api/jobs", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return make_job
