"""
Appointment endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from resource_booking.api.dependencies import get_service
from resource_booking.api.models import (
    AppointmentRequest,
    AppointmentResponse,
    AppointmentStatsResponse,
    ErrorResponse,
)
from resource_booking.api.response_builder import (
    build_appointment_response,
    build_appointment_stats_response,
)
from resource_booking.exceptions import AppointmentNotFoundError
from resource_booking.services.booking_service import BookingService
from resource_booking.storage.base import AppointmentInput

router = APIRouter(prefix="/api", tags=["Appointments"])


@router.post(
    "/appointments",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create appointment",
)
def create_appointment(
    request: AppointmentRequest,
    service: BookingService = Depends(get_service),
) -> AppointmentResponse:
    appointment = service.create_appointment(
        AppointmentInput(
            customer_name=request.customer_name,
            email=request.email,
            phone=request.phone,
            service_name=request.service_name,
            service_id=request.service_id,
            assigned_member_id=request.assigned_member_id,
            assigned_member_name=request.assigned_member_name,
            workspace_id=request.workspace_id,
            date=request.date,
            time=request.time,
            status=request.status,
            notes=request.notes,
        )
    )
    return build_appointment_response(appointment)


@router.get(
    "/appointments",
    response_model=list[AppointmentResponse],
    summary="List appointments",
    description="Filter by member, service, status or workspace (workspaceId=all disables that filter).",
)
def list_appointments(
    assigned_member_id: Optional[str] = Query(None, alias="assignedMemberId"),
    service_id: Optional[str] = Query(None, alias="serviceId"),
    appointment_status: Optional[str] = Query(None, alias="status"),
    workspace_id: Optional[str] = Query(None, alias="workspaceId"),
    service: BookingService = Depends(get_service),
) -> list[AppointmentResponse]:
    appointments = service.get_appointments(
        assigned_member_id=assigned_member_id,
        service_id=service_id,
        status=appointment_status,
        workspace_id=workspace_id,
    )
    return [build_appointment_response(a) for a in appointments]


@router.get(
    "/appointments/stats",
    response_model=AppointmentStatsResponse,
    summary="Appointment counts per status",
)
def get_appointment_stats(
    service: BookingService = Depends(get_service),
) -> AppointmentStatsResponse:
    return build_appointment_stats_response(service.get_appointment_stats())


@router.get(
    "/appointments/{appointment_id}",
    response_model=AppointmentResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get appointment",
)
def get_appointment(
    appointment_id: str,
    service: BookingService = Depends(get_service),
) -> AppointmentResponse:
    appointment = service.get_appointment(appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError(appointment_id)
    return build_appointment_response(appointment)


@router.post(
    "/appointments/{appointment_id}/complete",
    response_model=AppointmentResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Mark appointment completed",
)
def complete_appointment(
    appointment_id: str,
    service: BookingService = Depends(get_service),
) -> AppointmentResponse:
    appointment = service.complete_appointment(appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError(appointment_id)
    return build_appointment_response(appointment)


@router.post(
    "/appointments/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Cancel appointment",
)
def cancel_appointment(
    appointment_id: str,
    service: BookingService = Depends(get_service),
) -> AppointmentResponse:
    appointment = service.cancel_appointment(appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError(appointment_id)
    return build_appointment_response(appointment)
