"""
Pydantic request and response models for the Resource Booking API.

JSON field names are camelCase; Python attributes stay snake_case.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from resource_booking.exceptions import BookingValidationError
from resource_booking.timeutils import parse_interval


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


ResourceStatusValue = Literal["available", "booked", "under_maintenance"]
BookingStatusValue = Literal["confirmed", "cancelled"]
AppointmentStatusValue = Literal["upcoming", "completed", "cancelled"]


# =============================================================================
# Request Models
# =============================================================================


class ResourceRequest(CamelModel):
    """Create a resource, or replace all mutable fields of one."""

    name: str = Field(..., min_length=1, max_length=200, examples=["Meeting Room A"])
    type: str = Field(..., min_length=1, max_length=50, examples=["room"])
    description: Optional[str] = Field(None, max_length=2000)
    status: ResourceStatusValue = Field(
        default="available",
        description="available, booked or under_maintenance",
    )
    capacity: Optional[int] = Field(None, ge=1, description="People/units accommodated")
    assigned_users: Optional[list[str]] = Field(None, description="Assigned user IDs")
    availability_schedule: Optional[dict[str, Any]] = Field(
        None,
        description="Opening hours; stored as-is",
    )

    @field_validator("name", "type")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be blank")
        return v.strip()


class ResourceBookingRequest(CamelModel):
    """Request to book a resource for [startTime, endTime)."""

    resource_id: str = Field(..., min_length=1, description="Resource to book")
    start_time: str = Field(..., description="Start time (ISO 8601)", examples=["2025-01-01T09:00:00Z"])
    end_time: str = Field(..., description="End time (ISO 8601, exclusive)", examples=["2025-01-01T10:00:00Z"])
    notes: Optional[str] = Field(None, max_length=2000)
    status: Optional[BookingStatusValue] = Field(None, description="Defaults to confirmed")

    @model_validator(mode="after")
    def validate_interval(self) -> "ResourceBookingRequest":
        try:
            parse_interval(self.start_time, self.end_time)
        except BookingValidationError as e:
            raise ValueError(e.message) from e
        return self


class AppointmentRequest(CamelModel):
    """Request to record an appointment."""

    customer_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: Optional[str] = Field(None, max_length=50)
    service_name: str = Field(..., min_length=1, max_length=200)
    service_id: Optional[str] = None
    assigned_member_id: Optional[str] = None
    assigned_member_name: Optional[str] = None
    workspace_id: Optional[str] = None
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", examples=["2025-01-01"])
    time: str = Field(..., min_length=1, max_length=20, examples=["10:30 AM"])
    status: AppointmentStatusValue = "upcoming"
    notes: Optional[str] = Field(None, max_length=2000)


# =============================================================================
# Response Models
# =============================================================================


class ResourceResponse(CamelModel):
    """A resource as returned by the API."""

    id: str
    name: str
    type: str
    description: Optional[str] = None
    status: ResourceStatusValue
    capacity: Optional[int] = None
    assigned_users: Optional[list[str]] = None
    availability_schedule: Optional[dict[str, Any]] = None
    created_at: str = Field(..., description="Creation timestamp (ISO 8601)")
    updated_at: str = Field(..., description="Last update timestamp (ISO 8601)")


class ResourceBookingResponse(CamelModel):
    """A booking as returned by the API."""

    id: str
    resource_id: str
    start_time: str
    end_time: str
    status: BookingStatusValue
    notes: Optional[str] = None
    created_at: str


class AvailabilityResponse(CamelModel):
    """Answer to an availability query."""

    resource_id: str
    start_time: str
    end_time: str
    available: bool


class StatsPeriodResponse(CamelModel):
    start_date: str
    end_date: str


class ResourceStatsResponse(CamelModel):
    """Utilization statistics for a resource."""

    resource_id: str
    total_bookings: int
    total_hours: float
    utilization_percentage: float
    period: StatsPeriodResponse


class AppointmentResponse(CamelModel):
    """An appointment as returned by the API."""

    id: str
    customer_name: str
    email: str
    phone: Optional[str] = None
    service_name: str
    service_id: Optional[str] = None
    assigned_member_id: Optional[str] = None
    assigned_member_name: Optional[str] = None
    workspace_id: Optional[str] = None
    date: str
    time: str
    status: AppointmentStatusValue
    notes: Optional[str] = None


class AppointmentStatsResponse(CamelModel):
    """Appointment counts per status."""

    total: int
    upcoming: int
    completed: int
    cancelled: int


class ErrorResponse(BaseModel):
    """Error information for failed requests."""

    error_type: Literal[
        "validation_error",
        "not_found",
        "conflict",
        "http_error",
        "internal_error",
    ] = Field(..., description="Type of error")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(None, description="Additional error details")
    retryable: bool = Field(default=False, description="Whether request can be retried")


class HealthResponse(CamelModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    storage_backend: str = Field(..., description="Configured storage backend")
