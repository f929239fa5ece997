import itertools

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from config import Settings
from main import create_app
from models import Account, Donation, Request as RequestModel
from security import hash_password

PASSWORD = "secret123"

_counter = itertools.count(1)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # entering the client runs the lifespan, which creates the tables
    with TestClient(app) as client:
        yield client


@pytest.fixture
def engine(app, client):
    return app.state.engine


@pytest.fixture
def make_account(engine):
    def _make(role="donor", status="verified", email=None, password=PASSWORD, **fields):
        n = next(_counter)
        with Session(engine) as session:
            account = Account(
                name=fields.pop("name", f"{role.title()} {n}"),
                email=email or f"{role}{n}@example.com",
                password_hash=hash_password(password),
                role=role,
                status=status,
                **fields,
            )
            session.add(account)
            session.commit()
            session.refresh(account)
        return account

    return _make


@pytest.fixture
def make_donation(engine):
    def _make(donor, status="pending", **fields):
        values = {
            "organization_name": "Helping Hands",
            "contact_person": "Ann Perera",
            "email": "ann@example.com",
            "phone": "0771234567",
            "donation_type": "books",
            "purpose": "Library",
            "description": "200 story books",
            "estimated_amount": "200 books",
        }
        values.update(fields)
        with Session(engine) as session:
            donation = Donation(donor_id=donor.id, status=status, **values)
            session.add(donation)
            session.commit()
            session.refresh(donation)
        return donation

    return _make


@pytest.fixture
def make_request(engine):
    def _make(school, status="pending", **fields):
        values = {
            "school_name": "Hill Top College",
            "contact_person": "Principal Silva",
            "contact_email": "office@hilltop.example.com",
            "contact_phone": "0112345678",
            "category": "stationery",
            "title": "Exercise books",
            "description": "Exercise books for grade 5",
            "quantity": "300",
            "urgency": "high",
            "location": "Kandy",
        }
        values.update(fields)
        with Session(engine) as session:
            supply_request = RequestModel(school_id=school.id, status=status, **values)
            session.add(supply_request)
            session.commit()
            session.refresh(supply_request)
        return supply_request

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(account):
        token = app.state.tokens.create(account.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin(make_account):
    return make_account(role="admin", status="verified", name="Admin")


@pytest.fixture
def fetch(engine):
    """Re-read a row in a fresh session."""

    def _fetch(model, entity_id):
        with Session(engine) as session:
            return session.get(model, entity_id)

    return _fetch
