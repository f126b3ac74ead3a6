import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SELLER_APPROVAL_MODE"] = "auto"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from app.db.db import _json_serializer, create_db_and_tables, get_session
from app.main import app
from app.models.hostel import Hostel


def _hostel(name, university, is_active=True):
    return Hostel(
        name=name,
        university=university,
        address={"street": "1 Campus Road", "city": "Mumbai", "state": "Maharashtra", "zip_code": "400001", "country": "India"},
        contact_info={"phone": "+91-22-00000000", "email": "office@hostel.in"},
        total_rooms=50,
        facilities=["WiFi"],
        is_active=is_active,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        json_serializer=_json_serializer,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fetch(engine):
    """Read a row with a fresh session so request-side writes are visible."""
    def _fetch(model, pk):
        with Session(engine) as session:
            record = session.get(model, pk)
            if record is not None:
                session.expunge(record)
            return record
    return _fetch


@pytest.fixture
def hostels(engine):
    """H1 and H2 share university U1, H3 is in U2, H4 is an inactive U1 hostel."""
    with Session(engine) as session:
        records = {
            "H1": _hostel("Sunrise Hostel", "U1"),
            "H2": _hostel("Moonlight Hostel", "U1"),
            "H3": _hostel("Tech Hub Hostel", "U2"),
            "H4": _hostel("Closed Hostel", "U1", is_active=False),
        }
        session.add_all(records.values())
        session.commit()
        return {key: hostel.id for key, hostel in records.items()}


@pytest.fixture
def register(client):
    counter = {"n": 0}

    def _register(hostel_id, name="Student", password="secret123"):
        counter["n"] += 1
        response = client.post("/auth/register", json={
            "name": f"{name} {counter['n']}",
            "email": f"student{counter['n']}@fretio.in",
            "password": password,
            "phone_number": "+91 98765 43210",
            "hostel": hostel_id,
            "room_number": f"A-{100 + counter['n']}",
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "id": body["user"]["id"],
            "email": body["user"]["email"],
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }

    return _register


@pytest.fixture
def make_seller(client, register):
    def _make_seller(hostel_id, name="Seller"):
        user = register(hostel_id, name=name)
        response = client.post("/seller/apply", json={"availability_hours": "6pm - 10pm"}, headers=user["headers"])
        assert response.status_code == 200, response.text
        response = client.post("/seller/mock-approve", headers=user["headers"])
        assert response.status_code == 200, response.text
        return user

    return _make_seller


@pytest.fixture
def create_item(client):
    def _create_item(headers, **overrides):
        payload = {
            "title": "Study Lamp",
            "description": "Barely used LED study lamp with three brightness levels",
            "category": "Electronics",
            "condition": "Like New",
            "listing_type": "sell",
            "price": 500,
            "images": ["https://cdn.fretio.in/lamp.jpg"],
            "tags": ["lamp", "study"],
        }
        payload.update(overrides)
        response = client.post("/items", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["item"]

    return _create_item
