"""
Pytest fixtures and configuration for Mortgage Calculator tests.

This module provides common fixtures used across all test modules,
including database setup, test client, stores and rate providers.
"""

import os
import tempfile

# Must be set before the application modules read their configuration
os.environ.setdefault("MORTGAGE_CALC_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("MORTGAGE_CALC_CALCULATION_DELAY", "0")
os.environ.setdefault("MORTGAGE_CALC_LOG_DIR", os.path.join(tempfile.gettempdir(), "mortgage_calculator_test_logs"))

import pytest
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from mortgage_calculator.main import app
from mortgage_calculator.db import get_db
from mortgage_calculator.dependencies import get_rate_provider
from mortgage_calculator.models import Base
from mortgage_calculator.utils.properties import DatabaseStorage, MemoryStorage, NewProperty, PropertyStore
from mortgage_calculator.utils.rates import StaticRateProvider


# Create in-memory SQLite database for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_RATE = 6.25
TEST_RATE_SOURCE = "Test Rates"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def rate_provider() -> StaticRateProvider:
    return StaticRateProvider(rate=TEST_RATE, source=TEST_RATE_SOURCE)


@pytest.fixture(scope="function")
def client(db_session: Session, rate_provider: StaticRateProvider) -> Generator[TestClient, None, None]:
    """
    Create a test client with overridden database and rate provider dependencies.
    """
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_rate_provider] = lambda: rate_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def store(db_session: Session) -> PropertyStore:
    """Property store backed by the test database."""
    return PropertyStore(DatabaseStorage(db_session))


@pytest.fixture
def memory_store() -> PropertyStore:
    return PropertyStore(MemoryStorage())


@pytest.fixture
def sample_property() -> NewProperty:
    """
    The reference scenario: $300k home, 20% down, 6.5%, $3,600 tax, $1,200 insurance.
    """
    return NewProperty(
        name="Maple Street",
        home_price=300000,
        interest_rate=6.5,
        down_payment_percent=20,
        annual_tax_amount=3600,
        annual_insurance_amount=1200,
        monthly_payment=1916.96,
    )


@pytest.fixture
def full_store(store: PropertyStore, sample_property: NewProperty) -> PropertyStore:
    """
    Database-backed store already holding the maximum of three properties.
    """
    for i, payment in enumerate([1916.96, 2150.40, 1750.25]):
        store.save(sample_property.model_copy(update={"name": f"Property {i + 1}", "monthly_payment": payment}))
    return store
