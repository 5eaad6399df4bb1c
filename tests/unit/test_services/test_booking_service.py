"""
Unit tests for BookingService.

Each test runs against both the in-memory and the SQLite store.
"""

import threading
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from resource_booking.exceptions import (
    BookingValidationError,
    InvalidIntervalError,
    InvalidTimestampError,
)
from resource_booking.services.booking_service import (
    BookingService,
    get_booking_service,
    reset_booking_service,
)
from resource_booking.storage.base import (
    BookingInput,
    BookingStatus,
    ResourceInput,
    ResourceStatus,
)
from resource_booking.storage.memory import InMemoryStore


def at(hour, minute=0, day=1):
    return datetime(2025, 1, day, hour, minute, tzinfo=timezone.utc)


def book(service, resource_id, start, end, **kwargs):
    return service.create_resource_booking(
        BookingInput(resource_id=resource_id, start_time=start, end_time=end, **kwargs)
    )


class TestCheckResourceAvailability:
    """Test availability checks."""

    def test_free_resource_is_available(self, service, sample_resource):
        assert service.check_resource_availability(sample_resource.id, at(9), at(10)) is True

    def test_missing_resource_is_unavailable(self, service):
        assert service.check_resource_availability(str(uuid4()), at(9), at(10)) is False

    def test_maintenance_blocks_everything(self, service, maintenance_resource):
        """A resource under maintenance rejects even an empty calendar."""
        assert service.check_resource_availability(maintenance_resource.id, at(9), at(10)) is False

    def test_overlap_is_unavailable(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(10))

        assert service.check_resource_availability(sample_resource.id, at(9, 30), at(10, 30)) is False
        assert service.check_resource_availability(sample_resource.id, at(8, 30), at(9, 30)) is False
        assert service.check_resource_availability(sample_resource.id, at(8), at(12)) is False
        assert service.check_resource_availability(sample_resource.id, at(9, 15), at(9, 45)) is False
        assert service.check_resource_availability(sample_resource.id, at(9), at(10)) is False

    def test_touching_intervals_are_available(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(10))

        assert service.check_resource_availability(sample_resource.id, at(10), at(11)) is True
        assert service.check_resource_availability(sample_resource.id, at(8), at(9)) is True

    def test_other_resources_do_not_block(self, service, sample_resource):
        other = service.create_resource(ResourceInput(name="Room B", type="room"))
        book(service, other.id, at(9), at(10))

        assert service.check_resource_availability(sample_resource.id, at(9), at(10)) is True

    def test_cancelled_bookings_do_not_block(self, service, sample_resource):
        booking = book(service, sample_resource.id, at(9), at(10))
        service.cancel_resource_booking(booking.id)

        assert service.check_resource_availability(sample_resource.id, at(9), at(10)) is True

    def test_accepts_iso_strings(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(10))

        assert service.check_resource_availability(
            sample_resource.id, "2025-01-01T10:00:00Z", "2025-01-01T11:00:00Z"
        ) is True
        assert service.check_resource_availability(
            sample_resource.id, "2025-01-01T09:30:00+00:00", "2025-01-01T10:30:00+00:00"
        ) is False

    def test_offsets_compare_as_instants(self, service, sample_resource):
        """10:00+02:00 is 08:00Z, which ends before a 09:00Z booking."""
        book(service, sample_resource.id, at(9), at(10))

        assert service.check_resource_availability(
            sample_resource.id, "2025-01-01T09:00:00+02:00", "2025-01-01T10:00:00+02:00"
        ) is True

    def test_naive_timestamps_are_utc(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(10))

        assert service.check_resource_availability(
            sample_resource.id, datetime(2025, 1, 1, 9, 30), datetime(2025, 1, 1, 10, 30)
        ) is False

    def test_invalid_timestamp_raises(self, service, sample_resource):
        with pytest.raises(InvalidTimestampError):
            service.check_resource_availability(sample_resource.id, "not-a-date", at(10))

    def test_empty_interval_raises(self, service, sample_resource):
        with pytest.raises(InvalidIntervalError):
            service.check_resource_availability(sample_resource.id, at(10), at(10))

        with pytest.raises(BookingValidationError):
            service.check_resource_availability(sample_resource.id, at(11), at(10))

    def test_check_does_not_create_bookings(self, service, sample_resource):
        service.check_resource_availability(sample_resource.id, at(9), at(10))

        assert service.get_resource_bookings(sample_resource.id) == []


class TestBookResource:
    """Test the atomic check-and-book operation."""

    def test_booking_scenario(self, service, sample_resource):
        """Book 09:00-10:00, reject 09:30-10:30, accept the touching 10:00-11:00."""
        first = service.book_resource(
            BookingInput(
                resource_id=sample_resource.id,
                start_time="2025-01-01T09:00:00Z",
                end_time="2025-01-01T10:00:00Z",
            )
        )
        assert first.available is True
        assert first.booking.status == BookingStatus.CONFIRMED

        rejected = service.book_resource(
            BookingInput(
                resource_id=sample_resource.id,
                start_time="2025-01-01T09:30:00Z",
                end_time="2025-01-01T10:30:00Z",
            )
        )
        assert rejected.available is False
        assert rejected.booking is None
        assert [b.id for b in rejected.conflicts] == [first.booking.id]

        second = service.book_resource(
            BookingInput(
                resource_id=sample_resource.id,
                start_time="2025-01-01T10:00:00Z",
                end_time="2025-01-01T11:00:00Z",
            )
        )
        assert second.available is True

        listed = service.get_resource_bookings(sample_resource.id)
        assert {b.id for b in listed} == {first.booking.id, second.booking.id}

    def test_missing_resource(self, service):
        outcome = service.book_resource(
            BookingInput(resource_id=str(uuid4()), start_time=at(9), end_time=at(10))
        )

        assert outcome.available is False
        assert outcome.conflicts == []

    def test_maintenance_resource(self, service, maintenance_resource):
        outcome = service.book_resource(
            BookingInput(resource_id=maintenance_resource.id, start_time=at(9), end_time=at(10))
        )

        assert outcome.available is False
        assert service.get_resource_bookings(maintenance_resource.id) == []

    def test_keeps_notes(self, service, sample_resource):
        outcome = service.book_resource(
            BookingInput(
                resource_id=sample_resource.id,
                start_time=at(9),
                end_time=at(10),
                notes="Quarterly review",
            )
        )

        stored = service.get_resource_booking(outcome.booking.id)
        assert stored.notes == "Quarterly review"

    def test_invalid_interval_raises(self, service, sample_resource):
        with pytest.raises(InvalidIntervalError):
            service.book_resource(
                BookingInput(resource_id=sample_resource.id, start_time=at(10), end_time=at(9))
            )


class TestConcurrentBooking:
    """Test that racing callers cannot double-book a slot."""

    def test_only_one_racer_wins(self):
        service = BookingService(InMemoryStore(), hours_per_day=8, default_period_days=30)
        resource = service.create_resource(ResourceInput(name="Van", type="vehicle"))

        racers = 10
        barrier = threading.Barrier(racers)
        outcomes = []
        outcomes_lock = threading.Lock()

        def attempt():
            barrier.wait()
            outcome = service.book_resource(
                BookingInput(resource_id=resource.id, start_time=at(9), end_time=at(10))
            )
            with outcomes_lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=attempt) for _ in range(racers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(1 for o in outcomes if o.available) == 1
        assert len(service.get_resource_bookings(resource.id)) == 1


class TestResourceLocks:
    """Test that per-resource locks only exist for live resources."""

    def test_unknown_ids_create_no_locks(self, service):
        for _ in range(50):
            outcome = service.book_resource(
                BookingInput(resource_id=str(uuid4()), start_time=at(9), end_time=at(10))
            )
            assert outcome.available is False

        service.update_resource(str(uuid4()), ResourceInput(name="X", type="room"))
        service.delete_resource(str(uuid4()))

        assert service._locks == {}

    def test_delete_drops_lock(self, service, sample_resource):
        service.book_resource(
            BookingInput(resource_id=sample_resource.id, start_time=at(9), end_time=at(10))
        )
        assert sample_resource.id in service._locks

        service.delete_resource(sample_resource.id)

        assert service._locks == {}

    def test_cancelling_orphan_booking_creates_no_lock(self, memory_store):
        """A raw booking on an unknown resource can be cancelled without a lock entry."""
        service = BookingService(memory_store, hours_per_day=8, default_period_days=30)
        booking = book(service, str(uuid4()), at(9), at(10))

        assert service.cancel_resource_booking(booking.id).status == BookingStatus.CANCELLED
        assert service._locks == {}


class TestCreateResourceBooking:
    """Test raw booking creation."""

    def test_defaults(self, service, sample_resource):
        booking = book(service, sample_resource.id, "2025-01-01T09:00:00Z", "2025-01-01T10:00:00Z")

        assert booking.id
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.start_time == at(9)
        assert booking.end_time == at(10)
        assert booking.created_at.tzinfo is not None

    def test_does_not_check_availability(self, service, sample_resource):
        """Raw creation stores overlapping bookings; book_resource() is the guarded path."""
        book(service, sample_resource.id, at(9), at(10))
        book(service, sample_resource.id, at(9), at(10))

        assert len(service.get_resource_bookings(sample_resource.id)) == 2

    def test_cancelled_on_creation_is_invisible(self, service, sample_resource):
        booking = book(service, sample_resource.id, at(9), at(10), status=BookingStatus.CANCELLED)

        assert service.get_resource_bookings(sample_resource.id) == []
        assert service.get_resource_booking(booking.id).status == BookingStatus.CANCELLED

    def test_ids_are_unique(self, service, sample_resource):
        ids = {book(service, sample_resource.id, at(h), at(h + 1)).id for h in range(8, 14)}

        assert len(ids) == 6


class TestGetResourceBookings:
    """Test booking listing."""

    def test_filters_by_resource(self, service, sample_resource):
        other = service.create_resource(ResourceInput(name="Room B", type="room"))
        mine = book(service, sample_resource.id, at(9), at(10))
        book(service, other.id, at(9), at(10))

        assert [b.id for b in service.get_resource_bookings(sample_resource.id)] == [mine.id]
        assert len(service.get_resource_bookings()) == 2

    def test_excludes_cancelled(self, service, sample_resource):
        kept = book(service, sample_resource.id, at(9), at(10))
        dropped = book(service, sample_resource.id, at(11), at(12))
        service.cancel_resource_booking(dropped.id)

        assert [b.id for b in service.get_resource_bookings(sample_resource.id)] == [kept.id]

    def test_window_filter(self, service, sample_resource):
        early = book(service, sample_resource.id, at(9), at(10))
        book(service, sample_resource.id, at(9, day=3), at(10, day=3))

        listed = service.get_resource_bookings(sample_resource.id, at(0), at(23))
        assert [b.id for b in listed] == [early.id]

    def test_window_is_closed(self, service, sample_resource):
        """A booking ending exactly at the window start is listed."""
        booking = book(service, sample_resource.id, at(9), at(10))

        listed = service.get_resource_bookings(sample_resource.id, at(10), at(12))
        assert [b.id for b in listed] == [booking.id]

    def test_window_needs_both_bounds(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(10))
        book(service, sample_resource.id, at(9, day=3), at(10, day=3))

        assert len(service.get_resource_bookings(sample_resource.id, start_date=at(0, day=2))) == 2
        assert len(service.get_resource_bookings(sample_resource.id, end_date=at(0, day=2))) == 2

    def test_invalid_window_raises(self, service, sample_resource):
        with pytest.raises(InvalidTimestampError):
            service.get_resource_bookings(sample_resource.id, "yesterday", "today")


class TestCancelResourceBooking:
    """Test soft cancellation."""

    def test_cancel(self, service, sample_resource):
        booking = book(service, sample_resource.id, at(9), at(10))

        cancelled = service.cancel_resource_booking(booking.id)

        assert cancelled.id == booking.id
        assert cancelled.status == BookingStatus.CANCELLED
        assert service.get_resource_booking(booking.id).status == BookingStatus.CANCELLED

    def test_cancel_twice(self, service, sample_resource):
        booking = book(service, sample_resource.id, at(9), at(10))

        first = service.cancel_resource_booking(booking.id)
        second = service.cancel_resource_booking(booking.id)

        assert second.status == BookingStatus.CANCELLED
        assert second.start_time == first.start_time
        assert second.end_time == first.end_time

    def test_cancel_missing(self, service):
        assert service.cancel_resource_booking(str(uuid4())) is None

    def test_cancel_frees_slot(self, service, sample_resource):
        booking = book(service, sample_resource.id, at(9), at(10))
        service.cancel_resource_booking(booking.id)

        outcome = service.book_resource(
            BookingInput(resource_id=sample_resource.id, start_time=at(9), end_time=at(10))
        )
        assert outcome.available is True


class TestGetResourceStats:
    """Test utilization statistics."""

    def test_full_day(self, service, sample_resource):
        """Eight booked hours in a one-day window is 100% of an 8h day."""
        book(service, sample_resource.id, at(9), at(17))

        stats = service.get_resource_stats(sample_resource.id, at(0), at(0, day=2))

        assert stats.resource_id == sample_resource.id
        assert stats.total_bookings == 1
        assert stats.total_hours == 8.0
        assert stats.utilization_percentage == 100.0
        assert stats.period.start_date == at(0)
        assert stats.period.end_date == at(0, day=2)

    def test_partial_days_round_up(self, service, sample_resource):
        """A 36h window counts as two days of capacity."""
        book(service, sample_resource.id, at(9), at(21))

        stats = service.get_resource_stats(sample_resource.id, at(0), at(12, day=2))

        assert stats.total_hours == 12.0
        assert stats.utilization_percentage == 75.0

    def test_default_period(self, service, sample_resource):
        """Without dates every active booking counts against 30 days of capacity."""
        book(service, sample_resource.id, at(9), at(17))

        before = datetime.now(timezone.utc)
        stats = service.get_resource_stats(sample_resource.id)
        after = datetime.now(timezone.utc)

        assert stats.total_hours == 8.0
        assert stats.utilization_percentage == 3.33
        assert before <= stats.period.end_date <= after
        assert stats.period.end_date - stats.period.start_date == timedelta(days=30)

    def test_one_date_uses_default_period(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(17))
        book(service, sample_resource.id, at(9, day=5), at(17, day=5))

        stats = service.get_resource_stats(sample_resource.id, start_date=at(0, day=4))

        assert stats.total_bookings == 2
        assert stats.total_hours == 16.0
        assert stats.period.start_date == at(0, day=4)

    def test_excludes_cancelled_and_out_of_window(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(10))
        cancelled = book(service, sample_resource.id, at(11), at(12))
        service.cancel_resource_booking(cancelled.id)
        book(service, sample_resource.id, at(9, day=10), at(10, day=10))

        stats = service.get_resource_stats(sample_resource.id, at(0), at(0, day=2))

        assert stats.total_bookings == 1
        assert stats.total_hours == 1.0

    def test_rounds_to_two_places(self, service, sample_resource):
        book(service, sample_resource.id, at(9), at(9, 20))

        stats = service.get_resource_stats(sample_resource.id, at(0), at(0, day=2))

        assert stats.total_hours == 0.33
        assert stats.utilization_percentage == 4.17

    def test_empty_window_has_zero_utilization(self, service, sample_resource):
        stats = service.get_resource_stats(sample_resource.id, at(9), at(9))

        assert stats.utilization_percentage == 0.0

    def test_unknown_resource(self, service):
        stats = service.get_resource_stats(str(uuid4()))

        assert stats.total_bookings == 0
        assert stats.total_hours == 0.0
        assert stats.utilization_percentage == 0.0

    def test_configurable_hours_per_day(self, store):
        service = BookingService(store, hours_per_day=24, default_period_days=30)
        resource = service.create_resource(ResourceInput(name="Server", type="equipment"))
        book(service, resource.id, at(0), at(12))

        stats = service.get_resource_stats(resource.id, at(0), at(0, day=2))

        assert stats.utilization_percentage == 50.0


class TestResources:
    """Test resource administration."""

    def test_create_defaults(self, service):
        resource = service.create_resource(ResourceInput(name="Desk 4", type="desk"))

        assert resource.id
        assert resource.status == ResourceStatus.AVAILABLE
        assert resource.description is None
        assert resource.assigned_users is None
        assert resource.created_at == resource.updated_at

    def test_get_roundtrip(self, service, sample_resource):
        fetched = service.get_resource(sample_resource.id)

        assert fetched.name == "Meeting Room A"
        assert fetched.capacity == 8
        assert fetched.assigned_users == ["user-1"]
        assert fetched.availability_schedule == {"monday": {"start": "09:00", "end": "17:00"}}
        assert fetched.created_at == sample_resource.created_at

    def test_get_missing(self, service):
        assert service.get_resource(str(uuid4())) is None

    def test_list_filters(self, service, sample_resource, maintenance_resource):
        service.create_resource(
            ResourceInput(name="Van", type="vehicle", description="Blue transit van")
        )

        assert len(service.list_resources()) == 3
        assert [r.name for r in service.list_resources(resource_type="equipment")] == ["Projector"]
        assert [r.name for r in service.list_resources(status="under_maintenance")] == ["Projector"]
        assert [r.name for r in service.list_resources(search="ROOM")] == ["Meeting Room A"]
        assert [r.name for r in service.list_resources(search="transit")] == ["Van"]
        assert service.list_resources(resource_type="room", status="booked") == []

    def test_update_replaces_fields(self, service, sample_resource):
        updated = service.update_resource(
            sample_resource.id,
            ResourceInput(name="Meeting Room A2", type="room", status=ResourceStatus.BOOKED),
        )

        assert updated.id == sample_resource.id
        assert updated.name == "Meeting Room A2"
        assert updated.status == ResourceStatus.BOOKED
        assert updated.description is None
        assert updated.created_at == sample_resource.created_at
        assert updated.updated_at > sample_resource.updated_at
        assert service.get_resource(sample_resource.id).name == "Meeting Room A2"

    def test_updated_at_strictly_increases(self, service, sample_resource):
        stamps = [sample_resource.updated_at]
        for _ in range(5):
            stamps.append(
                service.update_resource(
                    sample_resource.id, ResourceInput(name="Room", type="room")
                ).updated_at
            )

        assert all(a < b for a, b in zip(stamps, stamps[1:]))

    def test_update_keeps_bookings(self, service, sample_resource):
        booking = book(service, sample_resource.id, at(9), at(10))

        service.update_resource(sample_resource.id, ResourceInput(name="Renamed", type="room"))

        assert [b.id for b in service.get_resource_bookings(sample_resource.id)] == [booking.id]

    def test_update_missing(self, service):
        assert service.update_resource(str(uuid4()), ResourceInput(name="X", type="room")) is None

    def test_maintenance_update_blocks_booking(self, service, sample_resource):
        service.update_resource(
            sample_resource.id,
            ResourceInput(name="Meeting Room A", type="room", status=ResourceStatus.UNDER_MAINTENANCE),
        )

        assert service.check_resource_availability(sample_resource.id, at(9), at(10)) is False

    def test_delete_purges_bookings(self, service, sample_resource):
        active = book(service, sample_resource.id, at(9), at(10))
        cancelled = book(service, sample_resource.id, at(11), at(12))
        service.cancel_resource_booking(cancelled.id)

        assert service.delete_resource(sample_resource.id) is True

        assert service.get_resource(sample_resource.id) is None
        assert service.get_resource_bookings(sample_resource.id) == []
        assert service.get_resource_booking(active.id) is None
        assert service.get_resource_booking(cancelled.id) is None

    def test_delete_keeps_other_bookings(self, service, sample_resource):
        other = service.create_resource(ResourceInput(name="Room B", type="room"))
        kept = book(service, other.id, at(9), at(10))

        service.delete_resource(sample_resource.id)

        assert service.get_resource_booking(kept.id) is not None

    def test_delete_missing(self, service):
        assert service.delete_resource(str(uuid4())) is False

    def test_returned_copies_are_detached(self, service, sample_resource):
        """Mutating a returned entity does not change the stored one."""
        fetched = service.get_resource(sample_resource.id)
        fetched.name = "Changed"
        fetched.assigned_users.append("user-2")

        stored = service.get_resource(sample_resource.id)
        assert stored.name == "Meeting Room A"
        assert stored.assigned_users == ["user-1"]


class TestBookingServiceSingleton:
    """Test the module-level service accessor."""

    def test_singleton(self, monkeypatch):
        from resource_booking.config import get_settings

        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        get_settings.cache_clear()
        reset_booking_service()
        try:
            first = get_booking_service()
            assert get_booking_service() is first
            assert isinstance(first.store, InMemoryStore)

            reset_booking_service()
            assert get_booking_service() is not first
        finally:
            reset_booking_service()
            get_settings.cache_clear()
