"""
Custom exceptions for resource booking operations.

Expected outcomes (missing resource, unavailable slot) are returned as
values by the service layer. These exceptions cover invalid input, plus
not-found/conflict variants for callers that prefer raising.
"""


class BookingError(Exception):
    """Base exception for resource booking operations."""

    retryable: bool = False

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class BookingValidationError(BookingError):
    """
    Invalid booking or resource data.

    Causes:
    - Unparseable timestamp
    - Interval whose start is not before its end
    - Missing required fields
    """

    retryable = False


class InvalidTimestampError(BookingValidationError):
    """A timestamp string could not be parsed as ISO 8601."""

    def __init__(self, value: str, original_error: Exception | None = None):
        super().__init__(f"Invalid timestamp: {value!r}", original_error)
        self.value = value


class InvalidIntervalError(BookingValidationError):
    """An interval's start is not strictly before its end."""

    def __init__(self, start, end):
        super().__init__(f"startTime must be before endTime (got {start} .. {end})")
        self.start = start
        self.end = end


class ResourceNotFoundError(BookingError):
    """Resource does not exist."""

    def __init__(self, resource_id: str):
        super().__init__(f"Resource {resource_id} not found")
        self.resource_id = resource_id


class BookingNotFoundError(BookingError):
    """Booking does not exist."""

    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class BookingConflictError(BookingError):
    """
    Requested interval is not available.

    Retryable with a different interval, or after the conflicting
    bookings are cancelled.
    """

    retryable = True

    def __init__(self, resource_id: str, conflicting_ids: list[str] | None = None):
        super().__init__(f"Resource {resource_id} is not available for the requested time range")
        self.resource_id = resource_id
        self.conflicting_ids = conflicting_ids or []


class AppointmentNotFoundError(BookingError):
    """Appointment does not exist."""

    def __init__(self, appointment_id: str):
        super().__init__(f"Appointment {appointment_id} not found")
        self.appointment_id = appointment_id
