# bookings.py

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from bookings.repository import BookingRepository
from core.errors import BookingServiceError, BookingValidationError, StoreError
from core.logger import logger
from models.booking import Booking

# --- Response Models ---

class BookingEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    booking: Booking

class BookingListEnvelope(BaseModel):
    success: bool = True
    count: int
    bookings: List[Booking]

class MessageEnvelope(BaseModel):
    success: bool = True
    message: str

router = APIRouter(prefix="/api", tags=["bookings"])


def get_booking_repository(request: Request) -> BookingRepository:
    return request.app.state.booking_repository


def failure_response(exc: BookingServiceError, server_message: str) -> JSONResponse:
    """Render a domain failure as the service's JSON error envelope."""
    if isinstance(exc, StoreError):
        content = {"success": False, "message": server_message, "error": exc.message}
    else:
        content = {"success": False, "message": exc.message}
    if isinstance(exc, BookingValidationError) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


def unexpected_failure(exc: Exception, server_message: str) -> JSONResponse:
    return failure_response(StoreError(str(exc)), server_message)


# --- Booking Endpoints ---

@router.post("/book", status_code=201, response_model=BookingEnvelope)
async def create_booking(
    payload: Any = Body(None),
    repository: BookingRepository = Depends(get_booking_repository),
):
    """Validates and stores a new booking."""
    try:
        booking = await repository.create(payload)
    except BookingServiceError as exc:
        if exc.status_code >= 500:
            logger.error(f"❌ Booking save error: {exc.message}")
        return failure_response(exc, "Internal server error")
    except Exception as exc:
        logger.exception(f"❌ Booking save error: {exc}")
        return unexpected_failure(exc, "Internal server error")

    return BookingEnvelope(message="Booking saved successfully", booking=booking)


@router.get("/bookings", response_model=BookingListEnvelope)
async def list_bookings(repository: BookingRepository = Depends(get_booking_repository)):
    """Returns every booking, newest first."""
    try:
        bookings = await repository.list_all()
    except BookingServiceError as exc:
        logger.error(f"❌ Error getting bookings: {exc.message}")
        return failure_response(exc, "Failed to retrieve bookings")
    except Exception as exc:
        logger.exception(f"❌ Error getting bookings: {exc}")
        return unexpected_failure(exc, "Failed to retrieve bookings")

    return BookingListEnvelope(count=len(bookings), bookings=bookings)


@router.get("/bookings/{booking_id}", response_model=BookingEnvelope, response_model_exclude_none=True)
async def get_booking(booking_id: str, repository: BookingRepository = Depends(get_booking_repository)):
    try:
        booking = await repository.get_by_id(booking_id)
    except BookingServiceError as exc:
        if exc.status_code >= 500:
            logger.error(f"❌ Error getting booking by ID: {exc.message}")
        return failure_response(exc, "Failed to retrieve booking")
    except Exception as exc:
        logger.exception(f"❌ Error getting booking by ID: {exc}")
        return unexpected_failure(exc, "Failed to retrieve booking")

    return BookingEnvelope(booking=booking)


@router.delete("/bookings/{booking_id}", response_model=MessageEnvelope)
async def delete_booking(booking_id: str, repository: BookingRepository = Depends(get_booking_repository)):
    try:
        await repository.delete_by_id(booking_id)
    except BookingServiceError as exc:
        if exc.status_code >= 500:
            logger.error(f"❌ Error deleting booking: {exc.message}")
        return failure_response(exc, "Failed to delete booking")
    except Exception as exc:
        logger.exception(f"❌ Error deleting booking: {exc}")
        return unexpected_failure(exc, "Failed to delete booking")

    return MessageEnvelope(message="Booking deleted successfully")
