"""
Resource store protocol and entity types.

Defines the interface for storage backends (process memory, SQL database)
and the plain entity objects the service layer works with.
"""

from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Protocol, Sequence, Union


class ResourceStatus(str, Enum):
    """Operational status of a resource."""

    AVAILABLE = "available"
    BOOKED = "booked"
    UNDER_MAINTENANCE = "under_maintenance"


class BookingStatus(str, Enum):
    """Booking lifecycle: confirmed -> cancelled (terminal)."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class AppointmentStatus(str, Enum):
    """Status of a sales-call appointment."""

    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class Resource:
    """A bookable resource (room, equipment, vehicle, ...)."""

    id: str
    name: str
    type: str
    created_at: datetime
    updated_at: datetime
    status: ResourceStatus = ResourceStatus.AVAILABLE
    description: Optional[str] = None
    capacity: Optional[int] = None
    assigned_users: Optional[list[str]] = None
    # Stored verbatim; availability checks and stats never read it.
    availability_schedule: Optional[dict[str, Any]] = None

    @property
    def is_under_maintenance(self) -> bool:
        return self.status == ResourceStatus.UNDER_MAINTENANCE


@dataclass
class ResourceBooking:
    """A time interval [start_time, end_time) reserved on a resource."""

    id: str
    resource_id: str
    start_time: datetime
    end_time: datetime
    created_at: datetime
    status: BookingStatus = BookingStatus.CONFIRMED
    notes: Optional[str] = None

    @property
    def is_active(self) -> bool:
        """Cancelled bookings are kept but no longer block the resource."""
        return self.status != BookingStatus.CANCELLED

    @property
    def duration_hours(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 3600


@dataclass
class Appointment:
    """A customer appointment (sales call) assigned to a team member."""

    id: str
    customer_name: str
    email: str
    service_name: str
    date: str
    time: str
    status: AppointmentStatus = AppointmentStatus.UPCOMING
    phone: Optional[str] = None
    service_id: Optional[str] = None
    assigned_member_id: Optional[str] = None
    assigned_member_name: Optional[str] = None
    workspace_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class ResourceInput:
    """
    Mutable fields of a resource.

    Used for both creation and full-replace updates.
    """

    name: str
    type: str
    status: ResourceStatus = ResourceStatus.AVAILABLE
    description: Optional[str] = None
    capacity: Optional[int] = None
    assigned_users: Optional[list[str]] = None
    availability_schedule: Optional[dict[str, Any]] = None


@dataclass
class BookingInput:
    """Request to book a resource for an interval."""

    resource_id: str
    start_time: Union[datetime, str]
    end_time: Union[datetime, str]
    status: Optional[BookingStatus] = None
    notes: Optional[str] = None


@dataclass
class AppointmentInput:
    """Request to record an appointment."""

    customer_name: str
    email: str
    service_name: str
    date: str
    time: str
    status: AppointmentStatus = AppointmentStatus.UPCOMING
    phone: Optional[str] = None
    service_id: Optional[str] = None
    assigned_member_id: Optional[str] = None
    assigned_member_name: Optional[str] = None
    workspace_id: Optional[str] = None
    notes: Optional[str] = None


class ResourceStore(Protocol):
    """
    Protocol for resource/booking storage backends.

    Implementations:
    - InMemoryStore: dict-backed, process lifetime only
    - SQLAlchemyStore: SQLite/PostgreSQL via SQLAlchemy

    Stores never hand out references to their internal state; every
    returned entity is a detached copy.
    """

    @abstractmethod
    def get_resource(self, resource_id: str) -> Optional[Resource]:
        """
        Get a resource by ID.

        Returns:
            Resource or None if not found
        """
        ...

    @abstractmethod
    def list_resources(self) -> Sequence[Resource]:
        """List every stored resource."""
        ...

    @abstractmethod
    def put_resource(self, resource: Resource) -> None:
        """Insert or replace a resource (keyed by id)."""
        ...

    @abstractmethod
    def delete_resource(self, resource_id: str) -> bool:
        """
        Delete a resource and purge all of its bookings.

        Returns:
            True if deleted, False if not found
        """
        ...

    @abstractmethod
    def get_booking(self, booking_id: str) -> Optional[ResourceBooking]:
        """
        Get a booking by ID, cancelled or not.

        Returns:
            Booking or None if not found
        """
        ...

    @abstractmethod
    def list_bookings(self, resource_id: Optional[str] = None) -> Sequence[ResourceBooking]:
        """
        List bookings, including cancelled ones.

        Args:
            resource_id: Only bookings of this resource (None = all)
        """
        ...

    @abstractmethod
    def put_booking(self, booking: ResourceBooking) -> None:
        """Insert or replace a booking (keyed by id)."""
        ...

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        """
        Get an appointment by ID.

        Returns:
            Appointment or None if not found
        """
        ...

    @abstractmethod
    def put_appointment(self, appointment: Appointment) -> None:
        """Insert or replace an appointment (keyed by id)."""
        ...

    @abstractmethod
    def list_appointments(self) -> Sequence[Appointment]:
        """List every stored appointment."""
        ...
