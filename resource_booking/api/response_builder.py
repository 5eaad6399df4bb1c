"""
Response builder utilities for transforming service entities to API responses.
"""

from resource_booking.api.models import (
    AppointmentResponse,
    AppointmentStatsResponse,
    ResourceBookingResponse,
    ResourceResponse,
    ResourceStatsResponse,
    StatsPeriodResponse,
)
from resource_booking.services.booking_service import AppointmentStats, ResourceStats
from resource_booking.storage.base import Appointment, Resource, ResourceBooking
from resource_booking.timeutils import format_timestamp


def build_resource_response(resource: Resource) -> ResourceResponse:
    """
    Build ResourceResponse from a stored resource.

    Args:
        resource: Resource entity

    Returns:
        ResourceResponse ready for API return
    """
    return ResourceResponse(
        id=resource.id,
        name=resource.name,
        type=resource.type,
        description=resource.description,
        status=resource.status.value,
        capacity=resource.capacity,
        assigned_users=resource.assigned_users,
        availability_schedule=resource.availability_schedule,
        created_at=format_timestamp(resource.created_at),
        updated_at=format_timestamp(resource.updated_at),
    )


def build_booking_response(booking: ResourceBooking) -> ResourceBookingResponse:
    """Build ResourceBookingResponse from a stored booking."""
    return ResourceBookingResponse(
        id=booking.id,
        resource_id=booking.resource_id,
        start_time=format_timestamp(booking.start_time),
        end_time=format_timestamp(booking.end_time),
        status=booking.status.value,
        notes=booking.notes,
        created_at=format_timestamp(booking.created_at),
    )


def build_stats_response(stats: ResourceStats) -> ResourceStatsResponse:
    """Build ResourceStatsResponse from computed statistics."""
    return ResourceStatsResponse(
        resource_id=stats.resource_id,
        total_bookings=stats.total_bookings,
        total_hours=stats.total_hours,
        utilization_percentage=stats.utilization_percentage,
        period=StatsPeriodResponse(
            start_date=format_timestamp(stats.period.start_date),
            end_date=format_timestamp(stats.period.end_date),
        ),
    )


def build_appointment_response(appointment: Appointment) -> AppointmentResponse:
    """Build AppointmentResponse from a stored appointment."""
    return AppointmentResponse(
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
        status=appointment.status.value,
        notes=appointment.notes,
    )


def build_appointment_stats_response(stats: AppointmentStats) -> AppointmentStatsResponse:
    return AppointmentStatsResponse(
        total=stats.total,
        upcoming=stats.upcoming,
        completed=stats.completed,
        cancelled=stats.cancelled,
    )
