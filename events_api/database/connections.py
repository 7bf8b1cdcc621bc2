"""Database connection management for the Events API."""

from typing import Any, Dict, Optional
from contextlib import asynccontextmanager

import structlog
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from events_api.models.config import EventsApiConfig


logger = structlog.get_logger(__name__)


class DatabaseManager:
    """Manages the MongoDB client, its sessions and transactions."""

    def __init__(self, config: EventsApiConfig):
        """
        Initialize database manager with configuration.

        Args:
            config: Application configuration containing database settings
        """
        self.config = config
        self.logger = logger.bind(component="database_manager")

        self._client: Optional[AsyncIOMotorClient] = None

        # Client configuration
        self._client_config = {
            "maxPoolSize": config.db_pool_size,
            "serverSelectionTimeoutMS": config.db_timeout_ms,
            "appname": "events_api",
            "tz_aware": False,
        }

    async def initialize(self) -> None:
        """Create the MongoDB client and verify the server is reachable."""
        try:
            self.logger.info("Initializing database connection")

            self._client = AsyncIOMotorClient(self.config.mongodb_url, **self._client_config)
            await self._verify_connection()

            self.logger.info(
                "Connected to MongoDB",
                database=self.config.database_name,
                collection=self.config.events_collection,
            )

        except Exception as e:
            self.logger.error("Failed to initialize database connection",
                              mongodb_url=self._mask_password(self.config.mongodb_url), error=str(e))
            await self.cleanup()
            raise

    async def _verify_connection(self) -> None:
        """Verify that the database connection is working."""
        await self._client.admin.command("ping")
        info = await self._client.server_info()
        self.logger.info("MongoDB connection verified", version=info.get("version"))

    async def cleanup(self) -> None:
        """Close the MongoDB client."""
        if self._client is None:
            return

        self.logger.info("Cleaning up database connection")
        try:
            self._client.close()
            self.logger.info("MongoDB client closed")
        except Exception as e:
            self.logger.error("Error closing MongoDB client", error=str(e))
        finally:
            self._client = None

    def get_client(self) -> AsyncIOMotorClient:
        """
        Get the MongoDB client.

        Raises:
            RuntimeError: If the client is not initialized
        """
        if self._client is None:
            raise RuntimeError("MongoDB client not initialized")
        return self._client

    def get_database(self) -> AsyncIOMotorDatabase:
        """Get the application database."""
        return self.get_client()[self.config.database_name]

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """Get a collection of the application database."""
        return self.get_database()[name]

    @asynccontextmanager
    async def get_session(self):
        """
        Start a client session, ended on every exit path.

        Yields:
            AsyncIOMotorClientSession: The started session
        """
        session: AsyncIOMotorClientSession = await self.get_client().start_session()
        try:
            yield session
        finally:
            await session.end_session()

    @asynccontextmanager
    async def get_transaction(self):
        """
        Run a unit of work inside a transaction.

        The transaction is committed when the block completes and aborted when
        it raises; the session is released either way.

        Yields:
            AsyncIOMotorClientSession: Session with an active transaction
        """
        async with self.get_session() as session:
            session.start_transaction()
            try:
                yield session
            except Exception as e:
                self.logger.warning("Aborting transaction", error=str(e))
                await session.abort_transaction()
                raise
            await session.commit_transaction()

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check on the database connection."""
        if self._client is None:
            return {"mongodb": {"status": "not_initialized"}, "overall": "unhealthy"}

        try:
            await self._client.admin.command("ping")
            return {"mongodb": {"status": "healthy"}, "overall": "healthy"}
        except Exception as e:
            return {"mongodb": {"status": "unhealthy", "error": str(e)}, "overall": "unhealthy"}

    def _mask_password(self, database_url: str) -> str:
        """Mask password in database URL for logging."""
        try:
            if "://" in database_url and "@" in database_url:
                scheme, rest = database_url.split("://", 1)
                auth, host_part = rest.split("@", 1)
                if ":" in auth:
                    user, _ = auth.split(":", 1)
                    return f"{scheme}://{user}:***@{host_part}"
            return database_url
        except ValueError:
            return "***"
