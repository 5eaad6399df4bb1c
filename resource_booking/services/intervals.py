"""
Interval overlap tests used by availability checks and booking listings.
"""

import math
from datetime import datetime


def conflicts(
    request_start: datetime,
    request_end: datetime,
    booking_start: datetime,
    booking_end: datetime,
) -> bool:
    """
    Whether a requested interval collides with an existing booking.

    Both intervals are half-open, so a request ending exactly when the
    booking starts (or starting exactly when it ends) does not collide.

    For well-formed intervals this is the usual
    ``request_start < booking_end and request_end > booking_start`` test,
    split into its three cases.
    """
    starts_inside = booking_start <= request_start < booking_end
    ends_inside = booking_start < request_end <= booking_end
    contains = request_start <= booking_start and request_end >= booking_end
    return starts_inside or ends_inside or contains


def touches_window(
    booking_start: datetime,
    booking_end: datetime,
    window_start: datetime,
    window_end: datetime,
) -> bool:
    """
    Whether a booking falls in a listing window at all.

    The window is closed on both ends: a booking that starts or ends
    inside it, or spans it, is included. A booking ending exactly at
    window_start counts.
    """
    return (
        window_start <= booking_start <= window_end
        or window_start <= booking_end <= window_end
        or (booking_start <= window_start and booking_end >= window_end)
    )


def round_half_up(value: float, places: int = 2) -> float:
    """Round with .5 going up, not to even."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor
