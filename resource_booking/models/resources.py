"""
Resource, ResourceBooking and Appointment table models.

Entities:
- ResourceRecord: bookable resources (rooms, equipment, vehicles)
- ResourceBookingRecord: time-range bookings on a resource
- AppointmentRecord: customer appointments assigned to team members
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resource_booking.models.base import BaseModel, get_json_type


class ResourceRecord(BaseModel):
    """
    Stored form of a bookable resource.

    Key features:
    - Status enumeration: available, booked, under_maintenance
    - Optional capacity and assigned users
    - Availability schedule kept as opaque JSON
    """

    __tablename__ = "resources"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Resource name (e.g., 'Meeting Room A', 'Projector')"
    )

    resource_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Resource type: 'room', 'equipment', 'vehicle', ..."
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Detailed description of the resource"
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="available",
        doc="Resource status: 'available', 'booked', 'under_maintenance'"
    )

    capacity: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        doc="Number of people/units the resource accommodates"
    )

    assigned_users: Mapped[Optional[list]] = mapped_column(
        get_json_type(),
        nullable=True,
        doc="IDs of users assigned to the resource"
    )

    availability_schedule: Mapped[Optional[dict]] = mapped_column(
        get_json_type(),
        nullable=True,
        doc="Opening hours / schedule (stored, not interpreted)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="Timestamp of last update (UTC)"
    )

    bookings: Mapped[list["ResourceBookingRecord"]] = relationship(
        "ResourceBookingRecord",
        back_populates="resource",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Bookings for this resource"
    )

    __table_args__ = (
        Index("idx_resource_type", "resource_type"),
        Index("idx_resource_status", "status"),
    )

    def __repr__(self) -> str:
        """String representation showing name and type."""
        return f"<ResourceRecord(name='{self.name}', type='{self.resource_type}', status='{self.status}')>"


class ResourceBookingRecord(BaseModel):
    """
    Stored form of a resource booking.

    Cancelled bookings keep their row; rows only disappear when the
    parent resource is deleted.
    """

    __tablename__ = "resource_bookings"

    resource_id: Mapped[str] = mapped_column(
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
        doc="Resource being booked"
    )

    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="Booking start time (UTC)"
    )

    end_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        doc="Booking end time (UTC, exclusive)"
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="confirmed",
        doc="Booking status: 'confirmed', 'cancelled'"
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        doc="Additional notes about the booking"
    )

    resource: Mapped["ResourceRecord"] = relationship(
        "ResourceRecord",
        back_populates="bookings",
        doc="Resource being booked"
    )

    # Indexes for time-range queries
    __table_args__ = (
        Index("idx_booking_resource", "resource_id"),
        Index("idx_booking_status", "status"),
        Index("idx_booking_resource_time", "resource_id", "start_time", "end_time"),
    )

    def __repr__(self) -> str:
        """String representation showing resource and time range."""
        return f"<ResourceBookingRecord(resource_id={self.resource_id}, start={self.start_time}, status='{self.status}')>"


class AppointmentRecord(BaseModel):
    """Stored form of a customer appointment."""

    __tablename__ = "appointments"

    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    service_name: Mapped[str] = mapped_column(String(200), nullable=False)
    service_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    assigned_member_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    assigned_member_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    workspace_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    date: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        doc="Appointment date (YYYY-MM-DD)"
    )
    time: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="Appointment time as entered (e.g., '10:30 AM')"
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="upcoming",
        doc="Appointment status: 'upcoming', 'completed', 'cancelled'"
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_appointment_member", "assigned_member_id"),
        Index("idx_appointment_workspace", "workspace_id"),
    )
