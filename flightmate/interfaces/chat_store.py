"""
Chat Store
Chat sessions and their messages.

Collections:
- chat_sessions: {_id, user_id, title, created_at, updated_at}
- messages: {_id, chat_session_id, is_user_message, message, created_at, updated_at}

Creating a session propagates database errors. Other failures are logged:
reads then behave as "absent" and message or title writes are dropped.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List

from bson import ObjectId
from loguru import logger
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..utils.text_helpers import (
    DEFAULT_SESSION_TITLE,
    MAX_STORED_TITLE_LENGTH,
    PREVIEW_LENGTH,
    truncate,
)

SESSIONS_COLLECTION = "chat_sessions"
MESSAGES_COLLECTION = "messages"


def is_valid_id(value: Optional[str]) -> bool:
    return bool(value) and ObjectId.is_valid(value)


class ChatStore:
    """
    Session and message persistence.
    Uses MongoDB when a database is given, in-memory lists otherwise.
    """

    def __init__(self, db: Optional[Database] = None):
        self.sessions = db[SESSIONS_COLLECTION] if db is not None else None
        self.messages = db[MESSAGES_COLLECTION] if db is not None else None

        self._memory_sessions: Dict[str, Dict[str, Any]] = {}
        self._memory_messages: List[Dict[str, Any]] = []

        if self.messages is not None:
            try:
                self.sessions.create_index([("user_id", ASCENDING), ("updated_at", DESCENDING)])
                self.messages.create_index([("chat_session_id", ASCENDING), ("created_at", ASCENDING)])
            except PyMongoError as e:
                logger.warning(f"ChatStore index creation failed: {e}")

    @property
    def is_memory_mode(self) -> bool:
        return self.sessions is None

    # ============================================
    # Sessions
    # ============================================

    def create_session(self, user_id: str, title: str = DEFAULT_SESSION_TITLE) -> Dict[str, Any]:
        now = datetime.utcnow()
        doc = {
            "_id": ObjectId(),
            "user_id": user_id,
            "title": truncate(title or DEFAULT_SESSION_TITLE, MAX_STORED_TITLE_LENGTH),
            "created_at": now,
            "updated_at": now,
        }
        if self.is_memory_mode:
            self._memory_sessions[str(doc["_id"])] = doc
        else:
            self.sessions.insert_one(doc)
        logger.info(f"Created chat session {doc['_id']} for user {user_id}")
        return doc

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        if not is_valid_id(session_id):
            return None
        if self.is_memory_mode:
            return self._memory_sessions.get(session_id)
        try:
            return self.sessions.find_one({"_id": ObjectId(session_id)})
        except PyMongoError as e:
            logger.error(f"Error loading session {session_id}: {e}")
            return None

    def update_title(self, session_id: str, title: str):
        title = truncate(title, MAX_STORED_TITLE_LENGTH)
        if self.is_memory_mode:
            session = self._memory_sessions.get(session_id)
            if session:
                session["title"] = title
                session["updated_at"] = datetime.utcnow()
            return
        try:
            self.sessions.update_one(
                {"_id": ObjectId(session_id)},
                {"$set": {"title": title, "updated_at": datetime.utcnow()}},
            )
        except PyMongoError as e:
            logger.error(f"Error updating title for session {session_id}: {e}")

    def list_sessions(self, user_id: str) -> List[Dict[str, Any]]:
        """The user's sessions, newest first, with message count and last-message preview"""
        if self.is_memory_mode:
            docs = [s for s in self._memory_sessions.values() if s["user_id"] == user_id]
            docs.sort(key=lambda s: s["updated_at"], reverse=True)
        else:
            try:
                docs = list(self.sessions.find({"user_id": user_id}).sort("updated_at", DESCENDING))
            except PyMongoError as e:
                logger.error(f"Error listing sessions for user {user_id}: {e}")
                return []

        summaries = []
        for doc in docs:
            session_id = str(doc["_id"])
            latest = self.get_messages(session_id, limit=1)
            last_message = None
            if latest:
                last_message = {
                    "text": truncate(latest[0]["message"], PREVIEW_LENGTH),
                    "is_user_message": latest[0]["is_user_message"],
                    "timestamp": latest[0]["created_at"],
                }
            summaries.append({
                "session_id": session_id,
                "title": doc["title"],
                "message_count": self.count_messages(session_id),
                "last_message": last_message,
                "created_at": doc["created_at"],
                "updated_at": doc["updated_at"],
            })
        return summaries

    # ============================================
    # Messages
    # ============================================

    def add_message(self, session_id: str, is_user_message: bool, message: str) -> Dict[str, Any]:
        now = datetime.utcnow()
        doc = {
            "_id": ObjectId(),
            "chat_session_id": session_id,
            "is_user_message": is_user_message,
            "message": message,
            "created_at": now,
            "updated_at": now,
        }
        if self.is_memory_mode:
            self._memory_messages.append(doc)
            session = self._memory_sessions.get(session_id)
            if session:
                session["updated_at"] = now
        else:
            try:
                self.messages.insert_one(doc)
                self.sessions.update_one({"_id": ObjectId(session_id)}, {"$set": {"updated_at": now}})
            except PyMongoError as e:
                logger.error(f"Error saving message for session {session_id}: {e}")
        return doc

    def get_messages(self, session_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Messages newest first"""
        if self.is_memory_mode:
            docs = [m for m in self._memory_messages if m["chat_session_id"] == session_id]
            docs.reverse()
            return docs[:limit] if limit else docs
        try:
            cursor = self.messages.find({"chat_session_id": session_id}).sort(
                [("created_at", DESCENDING), ("_id", DESCENDING)]
            )
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error loading messages for session {session_id}: {e}")
            return []

    def get_recent_messages(self, session_id: str, limit: int) -> List[Dict[str, Any]]:
        """The last `limit` messages, oldest first"""
        return list(reversed(self.get_messages(session_id, limit=limit)))

    def count_messages(self, session_id: str) -> int:
        if self.is_memory_mode:
            return sum(1 for m in self._memory_messages if m["chat_session_id"] == session_id)
        try:
            return self.messages.count_documents({"chat_session_id": session_id})
        except PyMongoError as e:
            logger.error(f"Error counting messages for session {session_id}: {e}")
            return 0
