import asyncio
from enum import Enum
from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from core.errors import StoreError
from core.logger import logger


class ConnectionState(str, Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class ConnectionManager:
    """
    Lazily opens one MongoDB client and hands out its database to every request.

    Callers arriving while the first attempt is in flight await the same
    pending future. A failed attempt is cleared so the next call starts over.
    """

    def __init__(
        self,
        uri: str,
        database_name: str,
        timeout_ms: int = 5000,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ):
        self.uri = uri
        self.database_name = database_name
        self.timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client = None
        self._database = None
        self._pending: Optional[asyncio.Future] = None
        self.state = ConnectionState.UNCONNECTED

        if not uri:
            logger.warning("⚠️ MONGO_URI not provided. Set the MONGO_URI environment variable.")

    async def acquire(self):
        if self._database is not None:
            return self._database

        if not self.uri:
            raise StoreError("MONGO_URI is not configured")

        if self._pending is None:
            self.state = ConnectionState.CONNECTING
            self._pending = asyncio.ensure_future(self._connect())
            self._pending.add_done_callback(self._attempt_finished)

        pending = self._pending
        try:
            # Shielded so a cancelled request does not abort the shared attempt
            return await asyncio.shield(pending)
        except asyncio.CancelledError:
            if pending.cancelled():
                raise StoreError("MongoDB connection attempt was cancelled")
            raise
        except StoreError:
            raise
        except Exception as exc:
            raise StoreError(str(exc)) from exc

    def _attempt_finished(self, task: asyncio.Future):
        # Runs even when every waiter has gone away
        if self._pending is not task:
            return
        self._pending = None
        if not task.cancelled() and task.exception() is not None:
            self.state = ConnectionState.FAILED

    async def _connect(self):
        try:
            client = self._client_factory(
                self.uri,
                serverSelectionTimeoutMS=self.timeout_ms,
                tz_aware=True,
            )
        except Exception as exc:
            logger.error(f"❌ MongoDB connection error: {exc}")
            raise StoreError(str(exc)) from exc

        try:
            await client.admin.command("ping")
        except asyncio.CancelledError:
            client.close()
            raise
        except Exception as exc:
            client.close()
            logger.error(f"❌ MongoDB connection error: {exc}")
            raise StoreError(str(exc)) from exc

        self._client = client
        self._database = client.get_default_database(self.database_name)
        self.state = ConnectionState.CONNECTED
        logger.info(f"✅ MongoDB connected: {self._database.name}")
        return self._database

    def close(self):
        if self._pending is not None:
            self._pending.cancel()
        if self._client is not None:
            self._client.close()
            logger.info("🛑 MongoDB client closed")
        self._client = None
        self._database = None
        self._pending = None
        self.state = ConnectionState.UNCONNECTED
