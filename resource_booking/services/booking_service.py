"""
Resource booking service.

Provides:
- Resource administration (create, list, update, delete with booking purge)
- Availability checks against a resource's active bookings
- Booking creation, listing and soft cancellation
- Utilization statistics
- Appointment records and status changes

Missing entities and unavailable intervals are returned as values
(None / False / an unavailable BookingOutcome), never raised.
"""

import logging
import math
import threading
import uuid
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from resource_booking.config import get_settings
from resource_booking.services.intervals import conflicts, round_half_up, touches_window
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
from resource_booking.timeutils import (
    Timestamp,
    next_update_time,
    parse_interval,
    parse_optional_timestamp,
    utcnow,
)

logger = logging.getLogger(__name__)

_booking_service: Optional["BookingService"] = None


@dataclass
class BookingOutcome:
    """Result of an atomic check-and-book attempt."""

    available: bool
    booking: Optional[ResourceBooking] = None
    conflicts: list[ResourceBooking] = field(default_factory=list)


@dataclass
class StatsPeriod:
    start_date: datetime
    end_date: datetime


@dataclass
class ResourceStats:
    """Booking statistics for a resource over a period."""

    resource_id: str
    total_bookings: int
    total_hours: float
    utilization_percentage: float
    period: StatsPeriod


@dataclass
class AppointmentStats:
    """Appointment counts per status."""

    total: int = 0
    upcoming: int = 0
    completed: int = 0
    cancelled: int = 0


def _new_id() -> str:
    return str(uuid.uuid4())


class BookingService:
    """
    Availability and booking operations over a ResourceStore.

    check_resource_availability() followed by create_resource_booking()
    is not atomic: two callers can both see a free slot and both insert.
    book_resource() closes that gap within one process by holding a
    per-resource lock across the check and the insert.
    """

    def __init__(
        self,
        store: ResourceStore,
        hours_per_day: Optional[float] = None,
        default_period_days: Optional[int] = None,
    ):
        """
        Initialize the service.

        Args:
            store: Storage backend
            hours_per_day: Bookable hours per day for utilization (default from settings)
            default_period_days: Stats period when no range is given (default from settings)
        """
        settings = get_settings()
        self.store = store
        self.hours_per_day = hours_per_day if hours_per_day is not None else settings.hours_per_day
        self.default_period_days = (
            default_period_days if default_period_days is not None
            else settings.default_stats_period_days
        )
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _resource_lock(self, resource_id: str) -> threading.Lock:
        """
        Lock serializing writes to one resource.

        Only call for resources that exist; entries are dropped when the
        resource is deleted.
        """
        with self._locks_guard:
            lock = self._locks.get(resource_id)
            if lock is None:
                lock = self._locks[resource_id] = threading.Lock()
            return lock

    def _forget_lock(self, resource_id: str) -> None:
        with self._locks_guard:
            self._locks.pop(resource_id, None)

    # =========================================================================
    # Resources
    # =========================================================================

    def create_resource(self, data: ResourceInput) -> Resource:
        now = utcnow()
        resource = Resource(
            id=_new_id(),
            name=data.name,
            type=data.type,
            status=ResourceStatus(data.status or ResourceStatus.AVAILABLE),
            description=data.description,
            capacity=data.capacity,
            assigned_users=data.assigned_users,
            availability_schedule=data.availability_schedule,
            created_at=now,
            updated_at=now,
        )
        self.store.put_resource(resource)
        logger.info(f"Created resource {resource.id} ({resource.type}: {resource.name})")
        return resource

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        return self.store.get_resource(resource_id)

    def list_resources(
        self,
        resource_type: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Resource]:
        """
        List resources with optional filters.

        Args:
            resource_type: Exact resource type
            status: Exact resource status
            search: Case-insensitive substring of name or description
        """
        resources = list(self.store.list_resources())

        if resource_type:
            resources = [r for r in resources if r.type == resource_type]

        if status:
            resources = [r for r in resources if r.status == status]

        if search:
            needle = search.lower()
            resources = [
                r for r in resources
                if needle in r.name.lower()
                or (r.description is not None and needle in r.description.lower())
            ]

        return resources

    def update_resource(self, resource_id: str, data: ResourceInput) -> Optional[Resource]:
        """
        Replace every mutable field of a resource.

        Returns:
            The updated resource, or None if it does not exist
        """
        if self.store.get_resource(resource_id) is None:
            return None

        with self._resource_lock(resource_id):
            existing = self.store.get_resource(resource_id)
            if existing is None:
                self._forget_lock(resource_id)
                return None

            updated = Resource(
                id=existing.id,
                name=data.name,
                type=data.type,
                status=ResourceStatus(data.status or ResourceStatus.AVAILABLE),
                description=data.description,
                capacity=data.capacity,
                assigned_users=data.assigned_users,
                availability_schedule=data.availability_schedule,
                created_at=existing.created_at,
                updated_at=next_update_time(existing.updated_at),
            )
            self.store.put_resource(updated)

        logger.info(f"Updated resource {resource_id} (status={updated.status.value})")
        return updated

    def delete_resource(self, resource_id: str) -> bool:
        """
        Delete a resource together with all of its bookings.

        Returns:
            True if deleted, False if it did not exist
        """
        if self.store.get_resource(resource_id) is None:
            return False

        with self._resource_lock(resource_id):
            deleted = self.store.delete_resource(resource_id)
        self._forget_lock(resource_id)

        if deleted:
            logger.info(f"Deleted resource {resource_id} and its bookings")
        return deleted

    # =========================================================================
    # Availability
    # =========================================================================

    def find_conflicting_bookings(
        self,
        resource_id: str,
        start_time: Timestamp,
        end_time: Timestamp,
    ) -> list[ResourceBooking]:
        """
        Active bookings of a resource that collide with [start_time, end_time).

        Raises:
            BookingValidationError: If the interval is unparseable or empty
        """
        request_start, request_end = parse_interval(start_time, end_time)
        return [
            booking
            for booking in self.get_resource_bookings(resource_id=resource_id)
            if conflicts(request_start, request_end, booking.start_time, booking.end_time)
        ]

    def check_resource_availability(
        self,
        resource_id: str,
        start_time: Timestamp,
        end_time: Timestamp,
    ) -> bool:
        """
        Check whether a resource can be booked for [start_time, end_time).

        A missing resource or one under maintenance is unavailable
        regardless of its bookings. Read-only.

        Raises:
            BookingValidationError: If the interval is unparseable or empty
        """
        request_start, request_end = parse_interval(start_time, end_time)

        resource = self.store.get_resource(resource_id)
        if resource is None:
            return False

        if resource.is_under_maintenance:
            return False

        return not self.find_conflicting_bookings(resource_id, request_start, request_end)

    # =========================================================================
    # Bookings
    # =========================================================================

    def create_resource_booking(self, data: BookingInput) -> ResourceBooking:
        """
        Store a booking without checking availability.

        Callers must have checked availability for the same interval;
        use book_resource() to do both atomically.

        Raises:
            BookingValidationError: If the interval is unparseable or empty
        """
        start, end = parse_interval(data.start_time, data.end_time)
        booking = ResourceBooking(
            id=_new_id(),
            resource_id=data.resource_id,
            start_time=start,
            end_time=end,
            status=BookingStatus(data.status or BookingStatus.CONFIRMED),
            notes=data.notes,
            created_at=utcnow(),
        )
        self.store.put_booking(booking)
        logger.info(
            f"Created booking {booking.id} on resource {booking.resource_id} "
            f"[{start.isoformat()} - {end.isoformat()})"
        )
        return booking

    def book_resource(self, data: BookingInput) -> BookingOutcome:
        """
        Check availability and create the booking as one step.

        Returns:
            BookingOutcome with the new booking, or available=False and the
            conflicting bookings (empty when the resource is missing or
            under maintenance)

        Raises:
            BookingValidationError: If the interval is unparseable or empty
        """
        start, end = parse_interval(data.start_time, data.end_time)

        if self.store.get_resource(data.resource_id) is None:
            logger.info(f"Rejected booking on resource {data.resource_id}: resource not found")
            return BookingOutcome(available=False)

        with self._resource_lock(data.resource_id):
            if not self.check_resource_availability(data.resource_id, start, end):
                found = []
                if self.store.get_resource(data.resource_id) is not None:
                    found = self.find_conflicting_bookings(data.resource_id, start, end)
                else:
                    self._forget_lock(data.resource_id)
                logger.info(
                    f"Rejected booking on resource {data.resource_id}: "
                    f"unavailable (conflicts={[b.id for b in found]})"
                )
                return BookingOutcome(available=False, conflicts=found)

            booking = self.create_resource_booking(
                BookingInput(
                    resource_id=data.resource_id,
                    start_time=start,
                    end_time=end,
                    status=data.status,
                    notes=data.notes,
                )
            )

        return BookingOutcome(available=True, booking=booking)

    def get_resource_bookings(
        self,
        resource_id: Optional[str] = None,
        start_date: Optional[Timestamp] = None,
        end_date: Optional[Timestamp] = None,
    ) -> list[ResourceBooking]:
        """
        List active (non-cancelled) bookings.

        Args:
            resource_id: Only bookings of this resource
            start_date: Window start; the window only applies when both ends are given
            end_date: Window end

        Raises:
            InvalidTimestampError: If a window bound is unparseable
        """
        window_start = parse_optional_timestamp(start_date)
        window_end = parse_optional_timestamp(end_date)

        bookings = [b for b in self.store.list_bookings(resource_id) if b.is_active]

        if window_start is not None and window_end is not None:
            bookings = [
                b for b in bookings
                if touches_window(b.start_time, b.end_time, window_start, window_end)
            ]

        return bookings

    def get_resource_booking(self, booking_id: str) -> Optional[ResourceBooking]:
        """Look up a booking by id, including cancelled ones."""
        return self.store.get_booking(booking_id)

    def cancel_resource_booking(self, booking_id: str) -> Optional[ResourceBooking]:
        """
        Mark a booking cancelled. Cancelling twice returns the same booking.

        Returns:
            The cancelled booking, or None if it does not exist
        """
        booking = self.store.get_booking(booking_id)
        if booking is None:
            return None

        guard = (
            self._resource_lock(booking.resource_id)
            if self.store.get_resource(booking.resource_id) is not None
            else nullcontext()
        )
        with guard:
            booking = self.store.get_booking(booking_id)
            if booking is None:
                return None
            booking.status = BookingStatus.CANCELLED
            self.store.put_booking(booking)

        logger.info(f"Cancelled booking {booking_id} on resource {booking.resource_id}")
        return booking

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_resource_stats(
        self,
        resource_id: str,
        start_date: Optional[Timestamp] = None,
        end_date: Optional[Timestamp] = None,
    ) -> ResourceStats:
        """
        Calculate booking statistics for a resource.

        Utilization assumes hours_per_day bookable hours on every day of the
        period; the resource's availability_schedule is not consulted.
        Without both dates the period is default_period_days long.
        """
        period_start = parse_optional_timestamp(start_date)
        period_end = parse_optional_timestamp(end_date)

        bookings = self.get_resource_bookings(resource_id, period_start, period_end)
        total_hours = sum(b.duration_hours for b in bookings)

        if period_start is not None and period_end is not None:
            days_in_period = math.ceil((period_end - period_start) / timedelta(days=1))
        else:
            days_in_period = self.default_period_days

        available_hours = days_in_period * self.hours_per_day
        utilization = (total_hours / available_hours) * 100 if available_hours > 0 else 0.0

        now = utcnow()
        return ResourceStats(
            resource_id=resource_id,
            total_bookings=len(bookings),
            total_hours=round_half_up(total_hours),
            utilization_percentage=round_half_up(utilization),
            period=StatsPeriod(
                start_date=period_start or now - timedelta(days=self.default_period_days),
                end_date=period_end or now,
            ),
        )

    # =========================================================================
    # Appointments
    # =========================================================================

    def create_appointment(self, data: AppointmentInput) -> Appointment:
        appointment = Appointment(
            id=_new_id(),
            customer_name=data.customer_name,
            email=data.email,
            phone=data.phone,
            service_name=data.service_name,
            service_id=data.service_id,
            assigned_member_id=data.assigned_member_id,
            assigned_member_name=data.assigned_member_name,
            workspace_id=data.workspace_id,
            date=data.date,
            time=data.time,
            status=AppointmentStatus(data.status or AppointmentStatus.UPCOMING),
            notes=data.notes,
        )
        self.store.put_appointment(appointment)
        logger.info(f"Created appointment {appointment.id} for {appointment.date} {appointment.time}")
        return appointment

    def get_appointments(
        self,
        assigned_member_id: Optional[str] = None,
        service_id: Optional[str] = None,
        status: Optional[str] = None,
        workspace_id: Optional[str] = None,
    ) -> list[Appointment]:
        """
        List appointments with optional exact-match filters.

        A workspace_id of "all" disables the workspace filter.
        """
        appointments = list(self.store.list_appointments())

        if assigned_member_id:
            appointments = [a for a in appointments if a.assigned_member_id == assigned_member_id]

        if service_id:
            appointments = [a for a in appointments if a.service_id == service_id]

        if status:
            appointments = [a for a in appointments if a.status == status]

        if workspace_id and workspace_id != "all":
            appointments = [a for a in appointments if a.workspace_id == workspace_id]

        return appointments

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self.store.get_appointment(appointment_id)

    def _set_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
    ) -> Optional[Appointment]:
        appointment = self.store.get_appointment(appointment_id)
        if appointment is None:
            return None

        appointment.status = status
        self.store.put_appointment(appointment)
        logger.info(f"Appointment {appointment_id} marked {status.value}")
        return appointment

    def complete_appointment(self, appointment_id: str) -> Optional[Appointment]:
        """
        Mark an appointment completed.

        Returns:
            The updated appointment, or None if it does not exist
        """
        return self._set_appointment_status(appointment_id, AppointmentStatus.COMPLETED)

    def cancel_appointment(self, appointment_id: str) -> Optional[Appointment]:
        """
        Mark an appointment cancelled.

        Returns:
            The updated appointment, or None if it does not exist
        """
        return self._set_appointment_status(appointment_id, AppointmentStatus.CANCELLED)

    def get_appointment_stats(self) -> AppointmentStats:
        """Count appointments in total and per status."""
        stats = AppointmentStats()
        for appointment in self.store.list_appointments():
            stats.total += 1
            if appointment.status == AppointmentStatus.UPCOMING:
                stats.upcoming += 1
            elif appointment.status == AppointmentStatus.COMPLETED:
                stats.completed += 1
            elif appointment.status == AppointmentStatus.CANCELLED:
                stats.cancelled += 1
        return stats


def get_booking_service() -> BookingService:
    """
    Get the booking service singleton.

    Returns:
        BookingService backed by the store selected in settings
    """
    global _booking_service

    if _booking_service is None:
        from resource_booking.storage import build_store

        _booking_service = BookingService(build_store())
        logger.info("Booking service initialized")

    return _booking_service


def reset_booking_service():
    """Reset the booking service singleton (useful for testing)."""
    global _booking_service
    _booking_service = None
