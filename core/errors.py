# core/errors.py

from typing import Dict, List, Optional


class BookingServiceError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookingValidationError(BookingServiceError):
    """The booking payload is empty, not an object, or has missing/mistyped fields."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []


class InvalidBookingId(BookingServiceError):
    status_code = 400

    def __init__(self, booking_id: str):
        super().__init__("Invalid ID format")
        self.booking_id = booking_id


class BookingNotFound(BookingServiceError):
    status_code = 404

    def __init__(self, booking_id: str):
        super().__init__("Booking not found")
        self.booking_id = booking_id


class StoreError(BookingServiceError):
    """Connection or query failure; the message carries the underlying cause."""

    status_code = 500
