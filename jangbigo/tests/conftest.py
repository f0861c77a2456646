import os
import tempfile
import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

# Ensure tests always use SQLite to avoid requiring Postgres drivers
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_jangbigo.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-bytes")

from jangbigo import models
from jangbigo.database import Base, get_db, make_engine
from jangbigo.main import app
from jangbigo.token import create_access_token


@pytest.fixture(scope="session")
def test_db_url():
    # Use a temporary SQLite file to persist across tests within a session
    db_fd, db_path = tempfile.mkstemp(prefix="test_jangbigo_", suffix=".db")
    os.close(db_fd)
    url = f"sqlite:///{db_path}"
    yield url
    try:
        os.remove(db_path)
    except FileNotFoundError:
        pass


@pytest.fixture()
def db_session(test_db_url):
    engine = make_engine(test_db_url)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    # Create all tables
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
    # Ensure file handles are released on Windows
    engine.dispose()


@pytest.fixture()
def client(db_session):
    # Override the dependency to use the test session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session):
    """Create a user row directly; returns ``(user, auth_headers)``."""
    counter = {"n": 0}

    def _make(name=None, role=models.UserRole.USER):
        counter["n"] += 1
        n = counter["n"]
        user = models.User(
            kakao_id=4000000000 + n,
            email=f"user{n}@example.com",
            name=name or f"user{n}",
            nickname=f"nick{n}",
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user, {"Authorization": f"Bearer {create_access_token(user)}"}

    return _make


@pytest.fixture()
def make_community(client):
    """Create a community through the API as the given caller; returns its id."""

    def _make(headers, **fields):
        body = {"title": "Seoul Crane Crew", **fields}
        r = client.post("/api/v1/communities", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["data"]["id"]

    return _make


def sky_post(**overrides):
    body = {
        "type": "GLOBAL",
        "category": "SKY",
        "equipmentType": "1 ton",
        "equipmentLengths": [18],
        "workContents": "Window installation, 7th floor",
        "workCost": 350000,
        "withFee": False,
        "paymentMethod": "CASH",
        "expectedPaymentDate": "Same day",
        "siteAddress": "123 Teheran-ro, Gangnam-gu",
        "contactNumber": "010-1234-5678",
        "deliveryInfo": "Gate code 1234",
        "arrivalTime": "06:30",
        "workDateType": "TOMORROW",
    }
    body.update(overrides)
    return body


def ladder_post(**overrides):
    body = {
        "type": "GLOBAL",
        "category": "LADDER",
        "ladderType": "MOVING_GOODS",
        "luggageVolume": "2.5 ton",
        "workFloor": 7,
        "overallHeight": 21,
        "workCost": 200000,
        "withFee": True,
        "paymentMethod": "SIGNATURE",
        "expectedPaymentDate": "End of month",
        "siteAddress": "45 Banpo-daero, Seocho-gu",
        "contactNumber": "010-9876-5432",
        "deliveryInfo": "Call on arrival",
        "options": {"loadingUnloadingService": "BOTH", "travelDistance": "WITHIN_JURISDICTION", "dumpService": True},
    }
    body.update(overrides)
    return body


@pytest.fixture()
def sky_body():
    return sky_post


@pytest.fixture()
def ladder_body():
    return ladder_post
