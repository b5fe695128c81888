"""
Persistence gateway.

Users and health logs live behind the `Storage` interface. `MemoryStorage`
keeps everything in process; `MongoStorage` uses Motor. Both apply the empty
profile at user creation and enforce unique usernames.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from .config import get_settings
from .errors import ConflictError, NotFoundError
from .models.user import Profile, ProfileUpdate, UserCredentials, UserInDB
from .models.health_log import HealthLog, HealthLogCreate, HealthLogType, health_log_adapter

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Storage(ABC):
    """CRUD over users and health logs."""

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserInDB]:
        ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        ...

    @abstractmethod
    async def create_user(self, credentials: UserCredentials) -> UserInDB:
        """Create a user with an empty profile. Raises ConflictError on a taken username."""

    @abstractmethod
    async def update_user(self, user_id: str, profile: ProfileUpdate) -> UserInDB:
        """Replace every profile field. Raises NotFoundError for an unknown id."""

    @abstractmethod
    async def create_health_log(self, user_id: str, entry: HealthLogCreate) -> HealthLog:
        ...

    @abstractmethod
    async def get_user_health_logs(
        self,
        user_id: str,
        log_type: Optional[HealthLogType] = None
    ) -> List[HealthLog]:
        ...

    @abstractmethod
    async def delete_user_health_logs(
        self,
        user_id: str,
        log_type: Optional[HealthLogType] = None
    ) -> int:
        ...


class MemoryStorage(Storage):
    """In-process storage. Records are copied in and out."""

    def __init__(self):
        self._users: Dict[str, UserInDB] = {}
        self._health_logs: Dict[str, HealthLog] = {}
        self._ids = itertools.count(1)

    def _next_id(self) -> str:
        return str(next(self._ids))

    async def get_user(self, user_id: str) -> Optional[UserInDB]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        for user in self._users.values():
            if user.username == username:
                return user.model_copy(deep=True)
        return None

    async def create_user(self, credentials: UserCredentials) -> UserInDB:
        if any(u.username == credentials.username for u in self._users.values()):
            raise ConflictError(f"Username {credentials.username!r} already exists")

        user = UserInDB(
            id=self._next_id(),
            username=credentials.username,
            hashed_password=credentials.hashed_password,
            created_at=_now(),
            **Profile().model_dump()
        )
        self._users[user.id] = user
        return user.model_copy(deep=True)

    async def update_user(self, user_id: str, profile: ProfileUpdate) -> UserInDB:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        updated = UserInDB(**{**user.model_dump(), **profile.model_dump()})
        self._users[user_id] = updated
        return updated.model_copy(deep=True)

    async def create_health_log(self, user_id: str, entry: HealthLogCreate) -> HealthLog:
        log = health_log_adapter.validate_python({
            **entry.model_dump(),
            "id": self._next_id(),
            "user_id": user_id,
            "created_at": _now(),
        })
        self._health_logs[log.id] = log
        return log.model_copy(deep=True)

    def _select(self, user_id: str, log_type: Optional[HealthLogType]) -> List[HealthLog]:
        type_value = HealthLogType(log_type).value if log_type else None
        return [
            log for log in self._health_logs.values()
            if log.user_id == user_id and (type_value is None or log.type == type_value)
        ]

    async def get_user_health_logs(
        self,
        user_id: str,
        log_type: Optional[HealthLogType] = None
    ) -> List[HealthLog]:
        logs = sorted(
            self._select(user_id, log_type),
            key=lambda log: (log.created_at, int(log.id)),
            reverse=True
        )
        return [log.model_copy(deep=True) for log in logs]

    async def delete_user_health_logs(
        self,
        user_id: str,
        log_type: Optional[HealthLogType] = None
    ) -> int:
        doomed = self._select(user_id, log_type)
        for log in doomed:
            del self._health_logs[log.id]
        return len(doomed)


class MongoStorage(Storage):
    """MongoDB storage using Motor."""

    def __init__(self, url: str, database_name: str):
        self.url = url
        self.database_name = database_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure indexes exist."""
        self.client = AsyncIOMotorClient(self.url, tz_aware=True)
        self.db = self.client[self.database_name]

        # Verify connection
        await self.client.admin.command('ping')
        logger.info("Connected to MongoDB: %s", self.database_name)

        await self._create_indexes()

    async def close(self) -> None:
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def _create_indexes(self) -> None:
        await self.collection("users").create_index("username", unique=True)
        await self.collection("health_logs").create_index([("user_id", 1), ("type", 1)])
        await self.collection("health_logs").create_index("created_at")

    def collection(self, name: str):
        """Get a collection by name."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]

    @staticmethod
    def _object_id(value: str) -> Optional[ObjectId]:
        try:
            return ObjectId(value)
        except (InvalidId, TypeError):
            return None

    @staticmethod
    def _to_user(doc: dict) -> UserInDB:
        doc["id"] = str(doc.pop("_id"))
        return UserInDB(**doc)

    @staticmethod
    def _to_log(doc: dict) -> HealthLog:
        doc["id"] = str(doc.pop("_id"))
        return health_log_adapter.validate_python(doc)

    async def get_user(self, user_id: str) -> Optional[UserInDB]:
        oid = self._object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection("users").find_one({"_id": oid})
        return self._to_user(doc) if doc else None

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        doc = await self.collection("users").find_one({"username": username})
        return self._to_user(doc) if doc else None

    async def create_user(self, credentials: UserCredentials) -> UserInDB:
        user_doc = {
            "username": credentials.username,
            "hashed_password": credentials.hashed_password,
            "created_at": _now(),
            **Profile().model_dump(mode="json")
        }
        try:
            result = await self.collection("users").insert_one(user_doc)
        except DuplicateKeyError:
            raise ConflictError(f"Username {credentials.username!r} already exists")

        user_doc["_id"] = result.inserted_id
        return self._to_user(user_doc)

    async def update_user(self, user_id: str, profile: ProfileUpdate) -> UserInDB:
        oid = self._object_id(user_id)
        doc = None
        if oid is not None:
            doc = await self.collection("users").find_one_and_update(
                {"_id": oid},
                {"$set": profile.model_dump(mode="json")},
                return_document=ReturnDocument.AFTER
            )
        if doc is None:
            raise NotFoundError(f"User {user_id} not found")
        return self._to_user(doc)

    async def create_health_log(self, user_id: str, entry: HealthLogCreate) -> HealthLog:
        log_doc = {
            **entry.model_dump(mode="json"),
            "user_id": user_id,
            "created_at": _now(),
        }
        result = await self.collection("health_logs").insert_one(log_doc)
        log_doc["_id"] = result.inserted_id
        return self._to_log(log_doc)

    @staticmethod
    def _filter(user_id: str, log_type: Optional[HealthLogType]) -> dict:
        filter_query = {"user_id": user_id}
        if log_type:
            filter_query["type"] = HealthLogType(log_type).value
        return filter_query

    async def get_user_health_logs(
        self,
        user_id: str,
        log_type: Optional[HealthLogType] = None
    ) -> List[HealthLog]:
        cursor = self.collection("health_logs").find(self._filter(user_id, log_type)).sort("created_at", -1)

        results = []
        async for doc in cursor:
            results.append(self._to_log(doc))
        return results

    async def delete_user_health_logs(
        self,
        user_id: str,
        log_type: Optional[HealthLogType] = None
    ) -> int:
        result = await self.collection("health_logs").delete_many(self._filter(user_id, log_type))
        return result.deleted_count


def create_storage(backend: Optional[str] = None) -> Storage:
    """Build the storage backend named in settings."""
    settings = get_settings()
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "mongo":
        return MongoStorage(settings.MONGODB_URL, settings.DATABASE_NAME)
    raise ValueError(f"Unknown storage backend: {backend}")


class Database:
    """Process-wide storage holder."""

    storage: Optional[Storage] = None

    @classmethod
    async def connect(cls, backend: Optional[str] = None) -> Storage:
        cls.storage = create_storage(backend)
        await cls.storage.connect()
        return cls.storage

    @classmethod
    async def disconnect(cls) -> None:
        if cls.storage:
            await cls.storage.close()
            cls.storage = None


# Convenience function for dependency injection
async def get_storage() -> Storage:
    """FastAPI dependency for storage access."""
    if Database.storage is None:
        await Database.connect()
    return Database.storage
