"""
User Store
Registered users: {_id, email (unique, lower-cased), username, password_hash,
created_at, updated_at}
"""

from datetime import datetime
from typing import Optional, Dict, Any

from bson import ObjectId
from loguru import logger
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

COLLECTION = "users"


class DuplicateEmailError(Exception):
    """A user with this email already exists"""


def to_public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    """User document without the password hash"""
    return {
        "id": str(doc["_id"]),
        "email": doc["email"],
        "username": doc["username"],
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
    }


class UserStore:
    """MongoDB-backed, with an in-memory fallback keyed by id"""

    def __init__(self, db: Optional[Database] = None):
        self.collection = db[COLLECTION] if db is not None else None
        self._memory_store: Dict[str, Dict[str, Any]] = {}

        if self.collection is not None:
            try:
                self.collection.create_index("email", unique=True)
            except PyMongoError as e:
                logger.warning(f"UserStore index creation failed: {e}")

    def create_user(self, email: str, username: str, password_hash: str) -> Dict[str, Any]:
        email = email.strip().lower()
        now = datetime.utcnow()
        doc = {
            "_id": ObjectId(),
            "email": email,
            "username": username,
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now,
        }

        if self.collection is None:
            if self.get_by_email(email):
                raise DuplicateEmailError(email)
            self._memory_store[str(doc["_id"])] = doc
        else:
            try:
                self.collection.insert_one(doc)
            except DuplicateKeyError as e:
                raise DuplicateEmailError(email) from e

        logger.info(f"Registered user {doc['_id']} ({email})")
        return doc

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        email = (email or "").strip().lower()
        if self.collection is None:
            return next((u for u in self._memory_store.values() if u["email"] == email), None)
        try:
            return self.collection.find_one({"email": email})
        except PyMongoError as e:
            logger.error(f"Error loading user by email: {e}")
            return None

    def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        if not user_id or not ObjectId.is_valid(user_id):
            return None
        if self.collection is None:
            return self._memory_store.get(user_id)
        try:
            return self.collection.find_one({"_id": ObjectId(user_id)})
        except PyMongoError as e:
            logger.error(f"Error loading user {user_id}: {e}")
            return None
