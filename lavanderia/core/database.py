# lavanderia/core/database.py

from contextlib import AbstractAsyncContextManager
from typing import Optional, cast

import motor.motor_asyncio
from motor.motor_asyncio import AsyncIOMotorDatabase
from loguru import logger

from lavanderia.core.exceptions import StoreError


class MongoDbContext(AbstractAsyncContextManager):
    """Conexão MongoDB gerenciada pelo lifespan da aplicação (ou por uma task Celery)."""

    def __init__(self, uri: str, db_name: str):
        self.uri = uri
        self.db_name = db_name
        self.client: Optional[motor.motor_asyncio.AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def connect(self):
        """Establishes and verifies connection to MongoDB."""
        if self.client is not None and self.db is not None:
            logger.info("MongoDB connection already established.")
            return

        logger.info("Connecting to MongoDB...")
        try:
            self.client = motor.motor_asyncio.AsyncIOMotorClient(
                self.uri,
                uuidRepresentation="standard",
                serverSelectionTimeoutMS=5000,
            )
            await self.client.admin.command("ping")
            self.db = self.client[self.db_name]
            logger.success(f"MongoDB connection successful to database '{self.db_name}'.")
        except Exception as e:
            logger.critical(f"FATAL: Failed to connect to MongoDB: {e}")
            self.client = None
            self.db = None
            raise ConnectionError(f"MongoDB connection failed: {e}") from e

    async def disconnect(self):
        """Closes the MongoDB connection."""
        if self.client is not None:
            logger.info("Closing MongoDB connection...")
            try:
                self.client.close()
                logger.info("MongoDB connection closed.")
            finally:
                self.client = None
                self.db = None

    def get_db(self) -> AsyncIOMotorDatabase:
        """Returns the database instance, raising error if not connected."""
        if self.db is None:
            logger.critical("Attempted to get MongoDB instance, but it's not available.")
            raise RuntimeError("MongoDB database is not connected or initialized.")
        return cast(AsyncIOMotorDatabase, self.db)


# Contexto ativo do processo; definido pelo lifespan em lavanderia.main
mongo_manager: Optional[MongoDbContext] = None


def set_mongo_manager(manager: Optional[MongoDbContext]):
    global mongo_manager
    mongo_manager = manager


async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency to get a MongoDB database instance."""
    if mongo_manager is None:
        raise StoreError("Database connection not available")
    try:
        return mongo_manager.get_db()
    except RuntimeError as e:
        raise StoreError(f"Database connection not available: {e}") from e
