"""
Shared fixtures: in-memory database and API client.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import wanderlust.models  # noqa: F401
from wanderlust.db.base import Base
from wanderlust.db.session import get_db
from wanderlust.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """API client sharing the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def trip(client):
    """Trip with travelers Alice, Bob and Charlie."""
    response = client.post(
        "/api/trips",
        json={
            "name": "Lisbon weekend",
            "destination": "Lisbon",
            "duration": 3,
            "traveler_names": ["Alice", "Bob", "Charlie"]
        }
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def travelers(trip):
    """Traveler ids by name."""
    return {t["name"]: t["id"] for t in trip["travelers"]}
