"""
Unit tests for API Pydantic models.

Tests request validation and camelCase serialization.
"""

import pytest
from pydantic import ValidationError

from resource_booking.api.models import (
    AppointmentRequest,
    ErrorResponse,
    HealthResponse,
    ResourceBookingRequest,
    ResourceRequest,
)


class TestResourceRequest:
    """Test ResourceRequest validation."""

    def test_valid_request(self):
        request = ResourceRequest(name="Room", type="room")

        assert request.status == "available"
        assert request.capacity is None

    def test_accepts_camel_case(self):
        request = ResourceRequest.model_validate(
            {"name": "Room", "type": "room", "assignedUsers": ["u1"], "availabilitySchedule": {}}
        )

        assert request.assigned_users == ["u1"]
        assert request.availability_schedule == {}

    def test_strips_name(self):
        assert ResourceRequest(name="  Room  ", type="room").name == "Room"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            ResourceRequest(name="   ", type="room")

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            ResourceRequest(name="Room", type="room", status="retired")

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValidationError):
            ResourceRequest(name="Room", type="room", capacity=0)


class TestResourceBookingRequest:
    """Test ResourceBookingRequest validation."""

    def test_valid_request(self):
        request = ResourceBookingRequest.model_validate(
            {
                "resourceId": "r1",
                "startTime": "2025-01-01T09:00:00Z",
                "endTime": "2025-01-01T10:00:00Z",
            }
        )

        assert request.resource_id == "r1"
        assert request.status is None

    def test_unparseable_time_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ResourceBookingRequest(resource_id="r1", start_time="noon", end_time="2025-01-01T10:00:00Z")

        assert "Invalid timestamp" in str(exc_info.value)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ResourceBookingRequest(
                resource_id="r1",
                start_time="2025-01-01T10:00:00Z",
                end_time="2025-01-01T09:00:00Z",
            )

        assert "startTime must be before endTime" in str(exc_info.value)


class TestAppointmentRequest:
    """Test AppointmentRequest validation."""

    def test_defaults(self):
        request = AppointmentRequest(
            customer_name="Ada",
            email="ada@example.com",
            service_name="Consultation",
            date="2025-01-01",
            time="09:00",
        )

        assert request.status == "upcoming"

    def test_bad_date_rejected(self):
        with pytest.raises(ValidationError):
            AppointmentRequest(
                customer_name="Ada",
                email="ada@example.com",
                service_name="Consultation",
                date="01/01/2025",
                time="09:00",
            )


class TestResponseModels:
    """Test response serialization."""

    def test_health_dumps_camel_case(self):
        response = HealthResponse(status="healthy", version="0.1.0", storage_backend="memory")

        assert response.model_dump(by_alias=True) == {
            "status": "healthy",
            "version": "0.1.0",
            "storageBackend": "memory",
        }

    def test_error_response_defaults(self):
        error = ErrorResponse(error_type="not_found", message="Resource r1 not found")

        assert error.retryable is False
        assert error.details is None
