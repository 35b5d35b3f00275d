# main.py

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import config
from core.logger import logger, setup_logging
from database.connection import ConnectionManager

# Import routers
from bookings.bookings import router as bookings_router
from bookings.repository import BookingRepository

setup_logging()

INVALID_JSON_MESSAGE = "Invalid JSON body. Please send JSON with Content-Type: application/json"

ENDPOINTS = {
    "POST /api/book": "Create a new booking",
    "GET /api/bookings": "Get all bookings",
    "GET /api/bookings/:id": "Get booking by ID",
    "DELETE /api/bookings/:id": "Delete booking by ID",
}


def create_app(connection: Optional[ConnectionManager] = None, cors_origins=None) -> FastAPI:
    """
    Build the booking API around a single connection manager.

    Tests pass their own manager; otherwise one is made from the environment.
    """
    if connection is None:
        connection = ConnectionManager(
            config.MONGO_URI,
            config.MONGODB_DB,
            timeout_ms=config.SERVER_SELECTION_TIMEOUT_MS,
        )
    origins = cors_origins if cors_origins is not None else config.CORS_ORIGINS

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting Tours Booking API")
        yield
        connection.close()
        logger.info("🛑 Shutting down Tours Booking API")

    app = FastAPI(title="Tours Booking API", version="1.0.0", lifespan=lifespan)
    app.state.connection = connection
    app.state.booking_repository = BookingRepository(connection)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Malformed JSON bodies get the same 400 envelope as invalid fields
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"⚠️ Rejected request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": INVALID_JSON_MESSAGE},
        )

    @app.get("/")
    async def health_check():
        return {
            "success": True,
            "message": "🚀 Tours Booking Backend Running!",
            "endpoints": ENDPOINTS,
        }

    app.include_router(bookings_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
