"""
SQLAlchemy ResourceStore implementation.

Maps between the entity dataclasses and table records. Each store call
runs in its own short transaction.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from resource_booking.database import get_db_context
from resource_booking.models.resources import (
    AppointmentRecord,
    ResourceBookingRecord,
    ResourceRecord,
)
from resource_booking.storage.base import (
    Appointment,
    AppointmentStatus,
    BookingStatus,
    Resource,
    ResourceBooking,
    ResourceStatus,
    ResourceStore,
)
from resource_booking.timeutils import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class RecordMapper:
    """Maps between entity dataclasses and SQLAlchemy records."""

    @staticmethod
    def to_resource(record: ResourceRecord) -> Resource:
        return Resource(
            id=record.id,
            name=record.name,
            type=record.resource_type,
            status=ResourceStatus(record.status),
            description=record.description,
            capacity=record.capacity,
            assigned_users=list(record.assigned_users) if record.assigned_users is not None else None,
            availability_schedule=dict(record.availability_schedule) if record.availability_schedule is not None else None,
            # SQLite drops tzinfo on the way back
            created_at=ensure_utc(record.created_at),
            updated_at=ensure_utc(record.updated_at),
        )

    @staticmethod
    def from_resource(resource: Resource) -> ResourceRecord:
        return ResourceRecord(
            id=resource.id,
            name=resource.name,
            resource_type=resource.type,
            status=ResourceStatus(resource.status).value,
            description=resource.description,
            capacity=resource.capacity,
            assigned_users=resource.assigned_users,
            availability_schedule=resource.availability_schedule,
            created_at=resource.created_at,
            updated_at=resource.updated_at,
        )

    @staticmethod
    def to_booking(record: ResourceBookingRecord) -> ResourceBooking:
        return ResourceBooking(
            id=record.id,
            resource_id=record.resource_id,
            start_time=ensure_utc(record.start_time),
            end_time=ensure_utc(record.end_time),
            status=BookingStatus(record.status),
            notes=record.notes,
            created_at=ensure_utc(record.created_at),
        )

    @staticmethod
    def from_booking(booking: ResourceBooking) -> ResourceBookingRecord:
        return ResourceBookingRecord(
            id=booking.id,
            resource_id=booking.resource_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=BookingStatus(booking.status).value,
            notes=booking.notes,
            created_at=booking.created_at,
        )

    @staticmethod
    def to_appointment(record: AppointmentRecord) -> Appointment:
        return Appointment(
            id=record.id,
            customer_name=record.customer_name,
            email=record.email,
            phone=record.phone,
            service_name=record.service_name,
            service_id=record.service_id,
            assigned_member_id=record.assigned_member_id,
            assigned_member_name=record.assigned_member_name,
            workspace_id=record.workspace_id,
            date=record.date,
            time=record.time,
            status=AppointmentStatus(record.status),
            notes=record.notes,
        )

    @staticmethod
    def from_appointment(appointment: Appointment, created_at) -> AppointmentRecord:
        return AppointmentRecord(
            id=appointment.id,
            customer_name=appointment.customer_name,
            email=appointment.email,
            phone=appointment.phone,
            service_name=appointment.service_name,
            service_id=appointment.service_id,
            assigned_member_id=appointment.assigned_member_id,
            assigned_member_name=appointment.assigned_member_name,
            workspace_id=appointment.workspace_id,
            date=appointment.date,
            time=appointment.time,
            status=AppointmentStatus(appointment.status).value,
            notes=appointment.notes,
            created_at=created_at,
        )


class SQLAlchemyStore(ResourceStore):
    """
    ResourceStore implementation using a SQL database.

    Works with any engine the session factory is bound to (SQLite for
    development and tests, PostgreSQL in production).
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        """
        Initialize the store.

        Args:
            session_factory: Factory for sessions (uses the configured database if None)
        """
        self._session_factory = session_factory
        self._mapper = RecordMapper()

    def _session(self):
        return get_db_context(self._session_factory)

    # Resources

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        with self._session() as db:
            record = db.get(ResourceRecord, resource_id)
            return self._mapper.to_resource(record) if record else None

    def list_resources(self) -> Sequence[Resource]:
        with self._session() as db:
            stmt = select(ResourceRecord).order_by(ResourceRecord.created_at)
            return [self._mapper.to_resource(r) for r in db.scalars(stmt).all()]

    def put_resource(self, resource: Resource) -> None:
        with self._session() as db:
            db.merge(self._mapper.from_resource(resource))

    def delete_resource(self, resource_id: str) -> bool:
        with self._session() as db:
            record = db.get(ResourceRecord, resource_id)
            if record is None:
                return False

            result = db.execute(
                delete(ResourceBookingRecord).where(ResourceBookingRecord.resource_id == resource_id)
            )
            db.delete(record)

        logger.debug(f"Purged {result.rowcount} bookings of deleted resource {resource_id}")
        return True

    # Bookings

    def get_booking(self, booking_id: str) -> Optional[ResourceBooking]:
        with self._session() as db:
            record = db.get(ResourceBookingRecord, booking_id)
            return self._mapper.to_booking(record) if record else None

    def list_bookings(self, resource_id: Optional[str] = None) -> Sequence[ResourceBooking]:
        with self._session() as db:
            stmt = select(ResourceBookingRecord)
            if resource_id is not None:
                stmt = stmt.where(ResourceBookingRecord.resource_id == resource_id)
            stmt = stmt.order_by(ResourceBookingRecord.start_time)
            return [self._mapper.to_booking(r) for r in db.scalars(stmt).all()]

    def put_booking(self, booking: ResourceBooking) -> None:
        with self._session() as db:
            db.merge(self._mapper.from_booking(booking))

    # Appointments

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        with self._session() as db:
            record = db.get(AppointmentRecord, appointment_id)
            return self._mapper.to_appointment(record) if record else None

    def put_appointment(self, appointment: Appointment) -> None:
        with self._session() as db:
            existing = db.get(AppointmentRecord, appointment.id)
            created_at = existing.created_at if existing else utcnow()
            db.merge(self._mapper.from_appointment(appointment, created_at))

    def list_appointments(self) -> Sequence[Appointment]:
        with self._session() as db:
            stmt = select(AppointmentRecord).order_by(AppointmentRecord.created_at)
            return [self._mapper.to_appointment(r) for r in db.scalars(stmt).all()]
