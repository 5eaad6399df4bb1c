"""
Storage backends for resources, bookings and appointments.
"""

import logging
from typing import Optional

from resource_booking.config import Settings, get_settings
from resource_booking.storage.base import (
    Appointment,
    AppointmentInput,
    AppointmentStatus,
    BookingInput,
    BookingStatus,
    Resource,
    ResourceBooking,
    ResourceInput,
    ResourceStatus,
    ResourceStore,
)
from resource_booking.storage.memory import InMemoryStore

logger = logging.getLogger(__name__)


def build_store(settings: Optional[Settings] = None) -> ResourceStore:
    """
    Create the store selected by STORAGE_BACKEND.

    The sqlalchemy backend creates missing tables on first use.
    """
    settings = settings or get_settings()

    if settings.uses_database:
        from resource_booking.database import get_session_factory, init_db
        from resource_booking.storage.sqlalchemy_store import SQLAlchemyStore

        init_db()
        logger.info("Using SQLAlchemy store")
        return SQLAlchemyStore(get_session_factory())

    logger.info("Using in-memory store")
    return InMemoryStore()


__all__ = [
    "Appointment",
    "AppointmentInput",
    "AppointmentStatus",
    "BookingInput",
    "BookingStatus",
    "Resource",
    "ResourceBooking",
    "ResourceInput",
    "ResourceStatus",
    "ResourceStore",
    "InMemoryStore",
    "build_store",
]
