"""
MongoDB Connection
Shared client for the stores; when MongoDB is unreachable the stores run
on in-memory dictionaries instead.
"""

from typing import Optional, Dict, Any

from loguru import logger
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..config import settings


class MongoConnection:
    """Owns the MongoClient and reports database health"""

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None, timeout_ms: Optional[int] = None):
        self.uri = uri or settings.MONGO_URI
        self.db_name = db_name or settings.MONGO_DB
        self.timeout_ms = timeout_ms or settings.MONGO_TIMEOUT_MS
        self.client: Optional[MongoClient] = None
        self.db: Optional[Database] = None

    def connect(self) -> Optional[Database]:
        """Connect and ping; returns None (memory mode) on failure"""
        try:
            self.client = MongoClient(self.uri, serverSelectionTimeoutMS=self.timeout_ms)
            self.client.admin.command("ping")
            self.db = self.client[self.db_name]
            logger.info(f"Connected to MongoDB: {self.db_name}")
        except PyMongoError as e:
            logger.warning(f"MongoDB connection failed, using in-memory stores: {e}")
            self.close()
        return self.db

    @property
    def is_memory_mode(self) -> bool:
        return self.db is None

    def status(self) -> Dict[str, Any]:
        """Database section of the health report"""
        if self.db is None:
            return {"status": "memory"}
        try:
            self.client.admin.command("ping")
            return {
                "status": "connected",
                "name": self.db.name,
                "collections": len(self.db.list_collection_names()),
            }
        except PyMongoError as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {"status": "disconnected", "error": str(e)}

    def close(self):
        if self.client is not None:
            self.client.close()
        self.client = None
        self.db = None


# ============================================
# Singleton
# ============================================

_mongo_connection: Optional[MongoConnection] = None


def get_mongo_connection() -> MongoConnection:
    """Get or create the shared connection (connects on first use)"""
    global _mongo_connection
    if _mongo_connection is None:
        _mongo_connection = MongoConnection()
        _mongo_connection.connect()
    return _mongo_connection


def close_mongo_connection():
    """Close the shared connection; the next get_mongo_connection() reconnects"""
    global _mongo_connection
    if _mongo_connection is not None:
        _mongo_connection.close()
    _mongo_connection = None
