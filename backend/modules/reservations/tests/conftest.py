# backend/modules/reservations/tests/conftest.py

import pytest
from datetime import date, datetime, time
from typing import Dict, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

from core.auth import User, create_access_token
from core.config import Settings
from core.database import Base, build_engine, get_db
from .. import models  # noqa: F401  registers tables on Base
from ..events import reservation_event_handlers
from ..schemas import ReservationCreate
from .factories import BOOKING_DATE, bind_session, OpeningHoursFactory, DiningTableFactory


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    bind_session(session)

    yield session

    bind_session(None)
    session.close()


@pytest.fixture(autouse=True)
def isolated_event_handlers():
    """Handlers registered by a test never leak into the next one."""
    saved = {event_type: list(handlers) for event_type, handlers in reservation_event_handlers.items()}
    yield
    for event_type, handlers in saved.items():
        reservation_event_handlers[event_type][:] = handlers


@pytest.fixture
def settings() -> Settings:
    return Settings(
        reservation_deposit_party_size=None,
        reservation_allocation_retries=1,
        reservation_max_party_size=20,
    )


@pytest.fixture
def now() -> datetime:
    return datetime.combine(date.today(), time(9, 0))


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def opening_hours(db_session) -> List:
    """Open 11:00-22:00 every day of the week."""
    return [
        OpeningHoursFactory(day_of_week=day, open_time=time(11, 0), close_time=time(22, 0))
        for day in range(7)
    ]


@pytest.fixture
def four_top(db_session):
    return DiningTableFactory(table_number="T4", capacity=4)


@pytest.fixture
def customer() -> User:
    return User(id=1, username="alice", email="alice@example.com", roles=[])


@pytest.fixture
def other_customer() -> User:
    return User(id=2, username="bob", email="bob@example.com", roles=[])


@pytest.fixture
def host() -> User:
    return User(id=100, username="host", roles=["host"])


@pytest.fixture
def make_request():
    """Build a ReservationCreate for BOOKING_DATE with overridable fields."""

    def _make(start_time: time = time(19, 0), party_size: int = 4, **overrides) -> ReservationCreate:
        data = {
            "reservation_date": BOOKING_DATE,
            "start_time": start_time,
            "party_size": party_size,
            "contact_name": "Test Guest",
            "contact_email": "guest@example.com",
        }
        data.update(overrides)
        return ReservationCreate(**data)

    return _make


@pytest.fixture
def client(db_session):
    """Create a test client."""
    from app.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id: int, roles: List[str], username: str = None) -> Dict[str, str]:
    token = create_access_token(
        {"sub": user_id, "username": username or f"user{user_id}", "roles": roles}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers():
    return auth_headers(1, [], "alice")


@pytest.fixture
def other_customer_headers():
    return auth_headers(2, [], "bob")


@pytest.fixture
def staff_headers():
    return auth_headers(100, ["host"], "host")


@pytest.fixture
def manager_headers():
    return auth_headers(200, ["manager"], "manager")


@pytest.fixture
def payment_gateway_headers():
    return auth_headers(900, ["payment_gateway"], "payments")
