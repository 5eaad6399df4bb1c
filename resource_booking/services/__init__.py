"""
Service layer for the Resource Booking service.

Provides business logic for:
- Resource administration
- Availability checks and atomic booking
- Booking listing, cancellation and utilization statistics
- Appointment records
"""

from resource_booking.services.booking_service import (
    AppointmentStats,
    BookingOutcome,
    BookingService,
    ResourceStats,
    StatsPeriod,
    get_booking_service,
    reset_booking_service,
)
from resource_booking.services.intervals import conflicts, round_half_up, touches_window

__all__ = [
    "AppointmentStats",
    "BookingOutcome",
    "BookingService",
    "ResourceStats",
    "StatsPeriod",
    "get_booking_service",
    "reset_booking_service",
    "conflicts",
    "round_half_up",
    "touches_window",
]
