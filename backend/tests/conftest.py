import os

# Settings are read at import time; configure before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wewallet.database import get_db
from wewallet.main import app, get_outcome_oracle
from wewallet.models import Base, TradeStatus
from wewallet.services.outcome_oracle import OutcomeOracle
from wewallet.services.user_service import UserService

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


class FixedOutcomeOracle(OutcomeOracle):
    def __init__(self, outcome=TradeStatus.LOST):
        self.outcome = outcome
        self.calls = 0

    def decide(self, trade):
        self.calls += 1
        return self.outcome


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def file_session_factory(tmp_path):
    """Separate connections per session, for interleaving two sessions."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'wewallet_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def oracle():
    return FixedOutcomeOracle(TradeStatus.LOST)


@pytest.fixture
def make_user(db_session):
    def _make_user(balance="1000", email=None):
        service = UserService(db_session)
        count = len(service.list_users())
        return service.create_user(email=email or f"trader{count}@example.com", balance=Decimal(balance))
    return _make_user


@pytest.fixture
def client(session_factory, oracle):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_outcome_oracle] = lambda: oracle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)
