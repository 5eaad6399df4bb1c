"""
FastAPI dependency injection providers.

Provides the booking service to route handlers.
"""

import logging

from resource_booking.services.booking_service import BookingService, get_booking_service

logger = logging.getLogger(__name__)


def init_service() -> BookingService:
    """Initialize the booking service at application startup."""
    service = get_booking_service()
    logger.info(f"Booking service ready ({type(service.store).__name__})")
    return service


def get_service() -> BookingService:
    """
    Dependency injection for the booking service.

    Tests override this with app.dependency_overrides to inject a
    service bound to a throwaway store.
    """
    return get_booking_service()
