"""
Resource and resource-booking endpoints.

Handlers are plain (sync) functions: FastAPI runs them on its worker
thread pool, which is what the service's per-resource locks guard against.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from resource_booking.api.dependencies import get_service
from resource_booking.api.models import (
    AvailabilityResponse,
    ErrorResponse,
    ResourceBookingRequest,
    ResourceBookingResponse,
    ResourceRequest,
    ResourceResponse,
    ResourceStatsResponse,
)
from resource_booking.api.response_builder import (
    build_booking_response,
    build_resource_response,
    build_stats_response,
)
from resource_booking.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    ResourceNotFoundError,
)
from resource_booking.services.booking_service import BookingService
from resource_booking.storage.base import BookingInput, ResourceInput
from resource_booking.timeutils import format_timestamp, parse_interval

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _to_resource_input(request: ResourceRequest) -> ResourceInput:
    return ResourceInput(
        name=request.name,
        type=request.type,
        status=request.status,
        description=request.description,
        capacity=request.capacity,
        assigned_users=request.assigned_users,
        availability_schedule=request.availability_schedule,
    )


# =============================================================================
# Resources
# =============================================================================


@router.post(
    "/resources",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create resource",
    tags=["Resources"],
)
def create_resource(
    request: ResourceRequest,
    service: BookingService = Depends(get_service),
) -> ResourceResponse:
    resource = service.create_resource(_to_resource_input(request))
    return build_resource_response(resource)


@router.get(
    "/resources",
    response_model=list[ResourceResponse],
    summary="List resources",
    tags=["Resources"],
)
def list_resources(
    type: Optional[str] = Query(None, description="Exact resource type"),
    resource_status: Optional[str] = Query(None, alias="status", description="Exact status"),
    search: Optional[str] = Query(None, description="Substring of name or description"),
    service: BookingService = Depends(get_service),
) -> list[ResourceResponse]:
    resources = service.list_resources(resource_type=type, status=resource_status, search=search)
    return [build_resource_response(r) for r in resources]


@router.get(
    "/resources/{resource_id}",
    response_model=ResourceResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get resource",
    tags=["Resources"],
)
def get_resource(
    resource_id: str,
    service: BookingService = Depends(get_service),
) -> ResourceResponse:
    resource = service.get_resource(resource_id)
    if resource is None:
        raise ResourceNotFoundError(resource_id)
    return build_resource_response(resource)


@router.put(
    "/resources/{resource_id}",
    response_model=ResourceResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Replace resource",
    tags=["Resources"],
)
def update_resource(
    resource_id: str,
    request: ResourceRequest,
    service: BookingService = Depends(get_service),
) -> ResourceResponse:
    resource = service.update_resource(resource_id, _to_resource_input(request))
    if resource is None:
        raise ResourceNotFoundError(resource_id)
    return build_resource_response(resource)


@router.delete(
    "/resources/{resource_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete resource and its bookings",
    tags=["Resources"],
)
def delete_resource(
    resource_id: str,
    service: BookingService = Depends(get_service),
) -> Response:
    if not service.delete_resource(resource_id):
        raise ResourceNotFoundError(resource_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/resources/{resource_id}/availability",
    response_model=AvailabilityResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Check availability",
    description="A missing resource, or one under maintenance, is reported as unavailable.",
    tags=["Resources"],
)
def check_availability(
    resource_id: str,
    start_time: str = Query(..., alias="startTime", description="Start time (ISO 8601)"),
    end_time: str = Query(..., alias="endTime", description="End time (ISO 8601)"),
    service: BookingService = Depends(get_service),
) -> AvailabilityResponse:
    start, end = parse_interval(start_time, end_time)
    return AvailabilityResponse(
        resource_id=resource_id,
        start_time=format_timestamp(start),
        end_time=format_timestamp(end),
        available=service.check_resource_availability(resource_id, start, end),
    )


@router.get(
    "/resources/{resource_id}/stats",
    response_model=ResourceStatsResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Resource utilization statistics",
    description="Utilization assumes 8 bookable hours per day (configurable via HOURS_PER_DAY).",
    tags=["Resources"],
)
def get_resource_stats(
    resource_id: str,
    start_date: Optional[str] = Query(None, alias="startDate", description="Period start (ISO 8601)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Period end (ISO 8601)"),
    service: BookingService = Depends(get_service),
) -> ResourceStatsResponse:
    stats = service.get_resource_stats(resource_id, start_date, end_date)
    return build_stats_response(stats)


# =============================================================================
# Resource Bookings
# =============================================================================


@router.post(
    "/resource-bookings",
    response_model=ResourceBookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Book a resource",
    description="""
Book a resource for [startTime, endTime).

The availability check and the insert happen atomically per resource.

- **201**: booking created
- **400**: invalid payload or timestamps
- **409**: resource missing, under maintenance, or already booked in the interval
    """,
    tags=["Bookings"],
)
def create_resource_booking(
    request: ResourceBookingRequest,
    service: BookingService = Depends(get_service),
) -> ResourceBookingResponse:
    outcome = service.book_resource(
        BookingInput(
            resource_id=request.resource_id,
            start_time=request.start_time,
            end_time=request.end_time,
            status=request.status,
            notes=request.notes,
        )
    )
    if not outcome.available:
        raise BookingConflictError(request.resource_id, [b.id for b in outcome.conflicts])
    return build_booking_response(outcome.booking)


@router.get(
    "/resource-bookings",
    response_model=list[ResourceBookingResponse],
    responses={400: {"model": ErrorResponse}},
    summary="List active bookings",
    tags=["Bookings"],
)
def list_resource_bookings(
    resource_id: Optional[str] = Query(None, alias="resourceId"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Window start (ISO 8601)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Window end (ISO 8601)"),
    service: BookingService = Depends(get_service),
) -> list[ResourceBookingResponse]:
    bookings = service.get_resource_bookings(resource_id, start_date, end_date)
    return [build_booking_response(b) for b in bookings]


@router.get(
    "/resource-bookings/{booking_id}",
    response_model=ResourceBookingResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get booking",
    description="Returns cancelled bookings too.",
    tags=["Bookings"],
)
def get_resource_booking(
    booking_id: str,
    service: BookingService = Depends(get_service),
) -> ResourceBookingResponse:
    booking = service.get_resource_booking(booking_id)
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return build_booking_response(booking)


@router.put(
    "/resource-bookings/{booking_id}/cancel",
    response_model=ResourceBookingResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Cancel booking",
    description="Soft cancellation; cancelling an already-cancelled booking succeeds.",
    tags=["Bookings"],
)
def cancel_resource_booking(
    booking_id: str,
    service: BookingService = Depends(get_service),
) -> ResourceBookingResponse:
    booking = service.cancel_resource_booking(booking_id)
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return build_booking_response(booking)
