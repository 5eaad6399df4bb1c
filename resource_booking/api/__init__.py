"""
Resource Booking API module.

Provides FastAPI HTTP endpoints for the booking service.
"""

from resource_booking.api.main import app, run_server

__all__ = ["app", "run_server"]
