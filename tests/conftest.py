import pytest
from fastapi.testclient import TestClient

from database.connection import ConnectionManager
from bookings.repository import BookingRepository
from main import create_app

from fakes import FakeClientFactory

TEST_URI = "mongodb://fake-host:27017/tours-bookings-test"


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def connection(client_factory):
    return ConnectionManager(TEST_URI, "tours-bookings-test", client_factory=client_factory)


@pytest.fixture
def repository(connection):
    return BookingRepository(connection)


@pytest.fixture
def client(connection):
    app = create_app(connection=connection, cors_origins=["*"])
    with TestClient(app) as test_client:
        yield test_client
