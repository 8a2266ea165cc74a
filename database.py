"""
Document store access.

The MongoClient is a process-scoped handle opened by connect() and released
by close(); handlers receive the Database through FastAPI dependencies.
MongoStore wraps one collection and is the only place pymongo errors are seen.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import Settings
from errors import StoreError, ValidationError
from logging_setup import get_logger

logger = get_logger(__name__)

ORDERS = "orders"
PRODUCTS = "products"
USERS = "users"
BANNERS = "BannerCollection"


def connect(settings: Settings) -> MongoClient:
    return MongoClient(
        settings.database_url,
        serverSelectionTimeoutMS=settings.database_timeout_ms,
        socketTimeoutMS=settings.database_timeout_ms,
        connectTimeoutMS=settings.database_timeout_ms,
        tz_aware=True,
    )


def close(client: MongoClient) -> None:
    client.close()


def parse_object_id(value: Any, label: str) -> ObjectId:
    """Turn a path parameter into an ObjectId, or raise ValidationError."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or len(value) != 24 or not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {label} ID")
    return ObjectId(value)


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return doc
    d = {**doc}
    if isinstance(d.get("_id"), ObjectId):
        d["_id"] = str(d["_id"])
    for k, v in list(d.items()):
        if isinstance(v, datetime):
            d[k] = v.isoformat()
    return d


def insert_result(result) -> Dict[str, Any]:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result) -> Dict[str, Any]:
    upserted_id = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted_id) if upserted_id is not None else None,
    }


class MongoStore:
    """Thin adapter over a single collection."""

    def __init__(self, collection: Collection, label: str):
        self.collection = collection
        self.label = label

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except PyMongoError as exc:
            logger.error("store operation failed", collection=self.collection.name, action=action, exc_info=exc)
            raise StoreError(f"Failed to {action}") from exc

    def insert(self, doc: Dict[str, Any]):
        with self._guard(f"create {self.label}"):
            return self.collection.insert_one(doc)

    def find(self, filt: Optional[Dict[str, Any]] = None, sort: Optional[List[Tuple[str, int]]] = None) -> List[dict]:
        with self._guard(f"fetch {self.label}s"):
            cursor = self.collection.find(filt or {})
            if sort:
                cursor = cursor.sort(sort)
            return list(cursor)

    def find_one(self, filt: Dict[str, Any]) -> Optional[dict]:
        with self._guard(f"fetch {self.label}"):
            return self.collection.find_one(filt)

    def find_by_id(self, oid: ObjectId) -> Optional[dict]:
        return self.find_one({"_id": oid})

    def update_one(self, filt: Dict[str, Any], fields: Dict[str, Any], upsert: bool = False):
        with self._guard(f"update {self.label}"):
            return self.collection.update_one(filt, {"$set": fields}, upsert=upsert)

    def update_by_id(self, oid: ObjectId, fields: Dict[str, Any]):
        return self.update_one({"_id": oid}, fields)

    def delete_by_id(self, oid: ObjectId):
        with self._guard(f"delete {self.label}"):
            return self.collection.delete_one({"_id": oid})

    def count(self, filt: Optional[Dict[str, Any]] = None) -> int:
        with self._guard(f"count {self.label}s"):
            return self.collection.count_documents(filt or {})

    def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[dict]:
        with self._guard(f"aggregate {self.label}s"):
            return list(self.collection.aggregate(pipeline))


def store_for(db: Database, name: str, label: str) -> MongoStore:
    return MongoStore(db[name], label)
