"""
SQLAlchemy models for the Resource Booking service.

Importing this package registers every table on Base.metadata.
"""

from resource_booking.models.base import Base, BaseModel, get_json_type
from resource_booking.models.resources import (
    AppointmentRecord,
    ResourceBookingRecord,
    ResourceRecord,
)

__all__ = [
    "Base",
    "BaseModel",
    "get_json_type",
    "ResourceRecord",
    "ResourceBookingRecord",
    "AppointmentRecord",
]
