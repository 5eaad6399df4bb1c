"""
Pytest configuration and fixtures for Resource Booking tests.

Provides stores (in-memory and SQLite-backed), a service bound to a
fresh store for each test, and sample data.
"""

from typing import Generator

import pytest
from sqlalchemy.orm import sessionmaker

from resource_booking.database import build_engine, build_session_factory, drop_all_tables, init_db
from resource_booking.services.booking_service import BookingService
from resource_booking.storage.base import Resource, ResourceInput, ResourceStatus
from resource_booking.storage.memory import InMemoryStore
from resource_booking.storage.sqlalchemy_store import SQLAlchemyStore


@pytest.fixture(scope="function")
def session_factory() -> Generator[sessionmaker, None, None]:
    """
    Session factory for a clean in-memory SQLite database.

    Tables are created before and dropped after each test.
    """
    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    try:
        yield build_session_factory(engine)
    finally:
        drop_all_tables(engine)
        engine.dispose()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def sql_store(session_factory) -> SQLAlchemyStore:
    return SQLAlchemyStore(session_factory)


@pytest.fixture(params=["memory", "sqlalchemy"])
def store(request):
    """Run the test once against each storage backend."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def service(store) -> BookingService:
    """BookingService on a fresh store with the default 8h/30d stats settings."""
    return BookingService(store, hours_per_day=8, default_period_days=30)


@pytest.fixture
def sample_resource(service: BookingService) -> Resource:
    """
    Create a sample available Resource.

    Returns:
        Resource: A persisted meeting room
    """
    return service.create_resource(
        ResourceInput(
            name="Meeting Room A",
            type="room",
            description="Second floor, seats 8",
            capacity=8,
            assigned_users=["user-1"],
            availability_schedule={"monday": {"start": "09:00", "end": "17:00"}},
        )
    )


@pytest.fixture
def maintenance_resource(service: BookingService) -> Resource:
    """Create a resource that is under maintenance."""
    return service.create_resource(
        ResourceInput(
            name="Projector",
            type="equipment",
            status=ResourceStatus.UNDER_MAINTENANCE,
        )
    )
