"""
Resource Booking service.

Availability checking, booking and utilization statistics for shared
resources, served over a FastAPI HTTP API.
"""

__version__ = "0.1.0"
