"""
Session Context Store
Durable per-session facts (partial flight query, remembered personal
details) so a conversation survives a process restart.

Documents: {session_id, context: {...}, created_at, updated_at}
Updates are field-level: saving {"name": "Asha"} never drops other keys.
"""

from datetime import datetime
from typing import Optional, Dict, Any

from loguru import logger
from pymongo.database import Database
from pymongo.errors import PyMongoError

COLLECTION = "session_contexts"


class SessionContextStore:
    """Falls back to an in-memory dict when no database is given"""

    def __init__(self, db: Optional[Database] = None):
        self.collection = db[COLLECTION] if db is not None else None
        self._memory_store: Dict[str, Dict[str, Any]] = {}

        if self.collection is not None:
            try:
                self.collection.create_index("session_id", unique=True)
            except PyMongoError as e:
                logger.warning(f"SessionContextStore index creation failed: {e}")

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Saved context for a session, or None"""
        if self.collection is None:
            context = self._memory_store.get(session_id)
            return dict(context) if context is not None else None

        try:
            doc = self.collection.find_one({"session_id": session_id})
        except PyMongoError as e:
            logger.error(f"Error loading context for session {session_id}: {e}")
            return None
        return dict(doc.get("context") or {}) if doc else None

    def merge(self, session_id: str, updates: Dict[str, Any]):
        """Create-if-absent, then set each updated key individually"""
        updates = {key: value for key, value in (updates or {}).items() if value is not None}
        if not updates:
            return

        if self.collection is None:
            self._memory_store.setdefault(session_id, {}).update(updates)
            return

        now = datetime.utcnow()
        fields = {f"context.{key}": value for key, value in updates.items()}
        fields["updated_at"] = now
        try:
            self.collection.update_one(
                {"session_id": session_id},
                {"$set": fields, "$setOnInsert": {"created_at": now}},
                upsert=True,
            )
            logger.debug(f"Context saved for session {session_id}: {list(updates)}")
        except PyMongoError as e:
            logger.error(f"Error saving context for session {session_id}: {e}")

    def clear(self, session_id: str):
        if self.collection is None:
            self._memory_store.pop(session_id, None)
            return
        try:
            self.collection.delete_one({"session_id": session_id})
            logger.info(f"Context cleared for session {session_id}")
        except PyMongoError as e:
            logger.error(f"Error clearing context for session {session_id}: {e}")
