"""
Shared test fixtures: SQLite test database, test client, wizard helpers.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Point settings at test values before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["FORM_ENDPOINT_URL"] = "http://forms.test/"

from budget_calculator.database import Base, get_db
from budget_calculator.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def contact_values():
    return {
        "name": "Maria Souza",
        "email": "maria@example.com",
        "whatsapp": "61912345678",
        "accept_terms": True,
    }


@pytest.fixture
def property_values():
    return {
        "has_land": "Sim",
        "land_size": "300 a 400 m²",
        "neighborhood": "Lago Sul",
        "has_project": "Não",
    }


@pytest.fixture
def room_values():
    # 35 + 2*16 + 20 + 20 = 107 m²
    return {
        "master_suite": 1,
        "bedroom": 2,
        "living_room": 1,
        "kitchen": 1,
    }


@pytest.fixture
def option_values():
    return {
        "finish_tier": "ouro",
        "start_time": "ate 6 meses",
        "available_budget": "500 mil a 1 milhao",
        "payment_method": "financiamento",
    }


@pytest.fixture
def session_at_options(client, contact_values, property_values, room_values):
    """Start a session and walk it to the final (options) step. Returns session_id."""
    session_id = client.post("/api/wizard/start").json()["session_id"]
    for values in ({}, contact_values, property_values, room_values):
        resp = client.post(f"/api/wizard/{session_id}/next", json={"values": values})
        assert resp.status_code == 200, resp.json()
    assert resp.json()["step"] == 4
    return session_id
