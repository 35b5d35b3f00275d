from datetime import datetime, timezone
from typing import Any, List

from bson import ObjectId
from pymongo.errors import PyMongoError

from core.errors import BookingNotFound, InvalidBookingId, StoreError
from core.logger import logger
from database.connection import ConnectionManager
from models.booking import Booking, validate_booking


def is_valid_booking_id(booking_id: str) -> bool:
    # ObjectId.is_valid also accepts any 12 character string
    return len(booking_id) == 24 and ObjectId.is_valid(booking_id)


def local_timestamp() -> str:
    return datetime.now().strftime("%m/%d/%Y, %I:%M:%S %p")


def utc_now() -> datetime:
    # MongoDB keeps milliseconds only
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class BookingRepository:
    def __init__(self, connection: ConnectionManager, collection_name: str = "bookings"):
        self.connection = connection
        self.collection_name = collection_name

    async def _collection(self):
        database = await self.connection.acquire()
        return database[self.collection_name]

    def _object_id(self, booking_id: str) -> ObjectId:
        if not is_valid_booking_id(booking_id):
            raise InvalidBookingId(booking_id)
        return ObjectId(booking_id)

    async def create(self, fields: Any) -> Booking:
        booking = validate_booking(fields)

        booking_doc = booking.model_dump(by_alias=True)
        booking_doc["date"] = booking.date or local_timestamp()
        booking_doc["createdAt"] = utc_now()

        collection = await self._collection()
        try:
            result = await collection.insert_one(booking_doc)
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

        booking_doc["_id"] = result.inserted_id
        logger.info(f"✅ New booking saved: {result.inserted_id}")
        return Booking.from_document(booking_doc)

    async def list_all(self) -> List[Booking]:
        """Every booking, newest first."""
        collection = await self._collection()
        try:
            cursor = collection.find().sort([("createdAt", -1), ("_id", -1)])
            documents = await cursor.to_list(length=None)
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc
        return [Booking.from_document(document) for document in documents]

    async def get_by_id(self, booking_id: str) -> Booking:
        object_id = self._object_id(booking_id)
        collection = await self._collection()
        try:
            document = await collection.find_one({"_id": object_id})
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

        if not document:
            raise BookingNotFound(booking_id)
        return Booking.from_document(document)

    async def delete_by_id(self, booking_id: str) -> None:
        object_id = self._object_id(booking_id)
        collection = await self._collection()
        try:
            result = await collection.delete_one({"_id": object_id})
        except PyMongoError as exc:
            raise StoreError(str(exc)) from exc

        if result.deleted_count == 0:
            raise BookingNotFound(booking_id)
        logger.info(f"🗑️ Booking deleted: {booking_id}")
