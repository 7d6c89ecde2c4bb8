"""
Test configuration for pytest
"""

import pytest
import os
from datetime import date, datetime
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from typing import Generator

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["TIMEZONE"] = "UTC"

import gymkeeper.models  # noqa: E402,F401
from gymkeeper.core.clock import FixedClock  # noqa: E402
from gymkeeper.services.members import register_member  # noqa: E402
from gymkeeper.services.tenants import register_tenant  # noqa: E402


# Create test engine using in-memory SQLite for unit tests
test_engine = create_engine(
    "sqlite:///:memory:",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    # Create all tables
    SQLModel.metadata.create_all(test_engine)

    # Create session
    with Session(test_engine) as session:
        yield session

    # Cleanup
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def engine():
    """Engine behind the db fixture, for tests that need a second session"""
    return test_engine


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 2024-03-15 10:30 UTC"""
    return FixedClock(datetime(2024, 3, 15, 10, 30, 0))


@pytest.fixture
def tenant(db):
    return register_tenant(
        db,
        name="Asha Admin",
        email="admin@ironworks.test",
        password="secret123",
        gym_name="Ironworks",
        gym_code="IRON01",
    )


@pytest.fixture
def other_tenant(db):
    return register_tenant(
        db,
        name="Other Admin",
        email="admin@othergym.test",
        password="secret123",
        gym_name="Other Gym",
        gym_code="OTHER1",
    )


@pytest.fixture
def make_member(db, clock):
    """Factory registering a member through the service layer"""
    counter = {"n": 0}

    def _make(tenant, name=None, plan="Monthly", join_date=None, method="Cash", **fields):
        counter["n"] += 1
        profile = {
            "name": name or f"Member {counter['n']}",
            "phone": f"98765{counter['n']:05d}",
            "gender": "Female",
        }
        profile.update(fields)
        member, _ = register_member(
            db,
            tenant.id,
            profile,
            plan=plan,
            method=method,
            clock=clock,
            join_date=join_date,
        )
        return member

    return _make


@pytest.fixture
def march_15() -> date:
    return date(2024, 3, 15)
