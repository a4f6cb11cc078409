"""Pytest configuration and fixtures."""

import os

# must be set before lendflow.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SEED_ON_STARTUP"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import lendflow.models  # noqa: F401
from lendflow.models.customer_model import Customer
from lendflow.services.loan_ledger import originate_loan
from lendflow.utils.database import Base, get_db, make_engine
from main import app


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    eng = make_engine("sqlite://")
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def file_session_factory(tmp_path):
    """File-backed database: every session gets its own connection."""
    eng = make_engine(f"sqlite:///{tmp_path / 'lendflow.db'}")
    Base.metadata.create_all(bind=eng)
    yield sessionmaker(autocommit=False, autoflush=False, bind=eng)
    eng.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_customer(db, email: str = "raj.patel@example.com", name: str = "Raj Patel") -> Customer:
    customer = Customer(
        name=name,
        email=email,
        phone="+91-9876543210",
        address="B-204, Sunshine Apartments, Mumbai",
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture
def customer(db) -> Customer:
    return make_customer(db)


@pytest.fixture
def loan(db, customer):
    """500000 at 8.5% over 60 months: EMI 10258.27, total 615496.20."""
    return originate_loan(db, customer.customer_id, amount=500000, interest_rate=8.5, term=60)


@pytest.fixture
def customer_payload() -> dict:
    return {
        "name": "Priya Sharma",
        "email": "Priya.Sharma@Example.com",
        "phone": "+91-9123456789",
        "address": "A-45, Green Park, New Delhi",
    }
