"""
In-memory ResourceStore implementation.

Keeps resources, bookings and appointments in dicts for the lifetime of
the process. Every restart discards all data.
"""

import copy
import logging
import threading
from typing import Optional, Sequence

from resource_booking.storage.base import (
    Appointment,
    Resource,
    ResourceBooking,
    ResourceStore,
)

logger = logging.getLogger(__name__)


class InMemoryStore(ResourceStore):
    """
    ResourceStore backed by plain dicts.

    A single lock guards the maps so the store can be shared by the
    worker threads FastAPI runs sync endpoints on. Entities are deep-copied
    on the way in and out.
    """

    def __init__(self):
        self._resources: dict[str, Resource] = {}
        self._bookings: dict[str, ResourceBooking] = {}
        self._appointments: dict[str, Appointment] = {}
        self._lock = threading.RLock()

    # Resources

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        with self._lock:
            resource = self._resources.get(resource_id)
            return copy.deepcopy(resource) if resource else None

    def list_resources(self) -> Sequence[Resource]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._resources.values()]

    def put_resource(self, resource: Resource) -> None:
        with self._lock:
            self._resources[resource.id] = copy.deepcopy(resource)

    def delete_resource(self, resource_id: str) -> bool:
        with self._lock:
            if self._resources.pop(resource_id, None) is None:
                return False

            purged = [
                booking_id
                for booking_id, booking in self._bookings.items()
                if booking.resource_id == resource_id
            ]
            for booking_id in purged:
                del self._bookings[booking_id]

        logger.debug(f"Purged {len(purged)} bookings of deleted resource {resource_id}")
        return True

    # Bookings

    def get_booking(self, booking_id: str) -> Optional[ResourceBooking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return copy.deepcopy(booking) if booking else None

    def list_bookings(self, resource_id: Optional[str] = None) -> Sequence[ResourceBooking]:
        with self._lock:
            return [
                copy.deepcopy(b)
                for b in self._bookings.values()
                if resource_id is None or b.resource_id == resource_id
            ]

    def put_booking(self, booking: ResourceBooking) -> None:
        with self._lock:
            self._bookings[booking.id] = copy.deepcopy(booking)

    # Appointments

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            appointment = self._appointments.get(appointment_id)
            return copy.deepcopy(appointment) if appointment else None

    def put_appointment(self, appointment: Appointment) -> None:
        with self._lock:
            self._appointments[appointment.id] = copy.deepcopy(appointment)

    def list_appointments(self) -> Sequence[Appointment]:
        with self._lock:
            return [copy.deepcopy(a) for a in self._appointments.values()]

    def clear(self) -> None:
        """Drop all stored data."""
        with self._lock:
            self._resources.clear()
            self._bookings.clear()
            self._appointments.clear()
