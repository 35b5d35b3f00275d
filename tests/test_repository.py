import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from core.errors import BookingNotFound, BookingValidationError, InvalidBookingId, StoreError

VALID = {"packagePrice": 5000, "numPersons": 2, "carType": "SUV", "total": 10000}


@pytest.mark.asyncio
async def test_create_then_get_returns_the_stored_record(repository):
    created = await repository.create(dict(VALID, date="12/24/2026"))
    fetched = await repository.get_by_id(created.id)

    assert fetched == created
    assert fetched.package_price == 5000
    assert fetched.num_persons == 2
    assert fetched.car_type == "SUV"
    assert fetched.total == 10000
    assert fetched.date == "12/24/2026"
    assert fetched.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_create_generates_date_when_absent(repository):
    created = await repository.create(dict(VALID, date=""))
    assert created.date
    assert created.date != ""


@pytest.mark.asyncio
async def test_invalid_create_persists_nothing(repository, client_factory):
    await repository.create(VALID)

    for field in VALID:
        payload = dict(VALID)
        payload.pop(field)
        with pytest.raises(BookingValidationError):
            await repository.create(payload)

    assert len(await repository.list_all()) == 1
    assert len(client_factory.bookings.documents) == 1


@pytest.mark.asyncio
async def test_list_all_is_newest_first(repository):
    ids = []
    for number in range(5):
        booking = await repository.create(dict(VALID, total=number))
        ids.append(booking.id)

    bookings = await repository.list_all()

    assert [booking.id for booking in bookings] == list(reversed(ids))
    created = [booking.created_at for booking in bookings]
    assert created == sorted(created, reverse=True)


@pytest.mark.asyncio
async def test_list_all_on_empty_collection(repository):
    assert await repository.list_all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("booking_id", ["not-an-id", "xyz", "abcdefghijkl", "0" * 23])
async def test_malformed_id_never_reaches_the_store(repository, client_factory, booking_id):
    with pytest.raises(InvalidBookingId):
        await repository.get_by_id(booking_id)
    with pytest.raises(InvalidBookingId):
        await repository.delete_by_id(booking_id)

    assert client_factory.clients == []
    assert client_factory.bookings.calls == 0


@pytest.mark.asyncio
async def test_unknown_id_is_not_found(repository):
    unknown = str(ObjectId())
    with pytest.raises(BookingNotFound):
        await repository.get_by_id(unknown)
    with pytest.raises(BookingNotFound):
        await repository.delete_by_id(unknown)


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found(repository):
    created = await repository.create(VALID)

    await repository.delete_by_id(created.id)

    with pytest.raises(BookingNotFound):
        await repository.get_by_id(created.id)
    assert await repository.list_all() == []


@pytest.mark.asyncio
async def test_store_failures_become_store_errors(repository, client_factory):
    created = await repository.create(VALID)
    client_factory.bookings.error = AutoReconnect("connection reset by peer")

    with pytest.raises(StoreError, match="connection reset by peer"):
        await repository.list_all()
    with pytest.raises(StoreError):
        await repository.get_by_id(created.id)
    with pytest.raises(StoreError):
        await repository.delete_by_id(created.id)
    with pytest.raises(StoreError):
        await repository.create(VALID)
