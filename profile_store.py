import logging
import os
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from bson import ObjectId
from bson.errors import InvalidId
from dotenv import load_dotenv
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import StoreFailure

logger = logging.getLogger(__name__)

_client: MongoClient | None = None
_indexes_ready = False

USER_FIELDS = ("name", "avatar")


def _get_client() -> MongoClient:
    global _client
    if _client is None:
        load_dotenv()
        mongo_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
        _client = MongoClient(mongo_uri)
    return _client


def _get_db():
    load_dotenv()
    return _get_client()[os.getenv("MONGODB_DB", "devconnector")]


def _get_users():
    return _get_db()[os.getenv("MONGODB_USERS_COLLECTION", "users")]


def _get_profiles():
    global _indexes_ready
    collection = _get_db()[os.getenv("MONGODB_PROFILES_COLLECTION", "profiles")]
    if not _indexes_ready:
        collection.create_index([("user", ASCENDING)], unique=True)
        _indexes_ready = True
    return collection


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.exception("MongoDB %s failed", action)
        raise StoreFailure(f"{action} failed") from exc


def parse_object_id(value: str | ObjectId) -> ObjectId | None:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _serialize(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    return value


def _populate_users(docs: list[dict]) -> list[dict]:
    owner_ids = [doc["user"] for doc in docs if isinstance(doc.get("user"), ObjectId)]
    if not owner_ids:
        return docs
    projection = {field: 1 for field in USER_FIELDS}
    users = {user["_id"]: user for user in _get_users().find({"_id": {"$in": owner_ids}}, projection)}
    for doc in docs:
        user = users.get(doc.get("user"))
        if user is not None:
            doc["user"] = {"_id": user["_id"], **{field: user.get(field) for field in USER_FIELDS}}
    return docs


def _present(doc: dict | None) -> dict | None:
    if doc is None:
        return None
    return _serialize(_populate_users([doc])[0])


def load_profile_document(owner_id: str) -> dict | None:
    """Return the raw profile document of ``owner_id`` (ObjectIds kept)."""
    owner = parse_object_id(owner_id)
    if owner is None:
        return None
    with _translate_errors("profile lookup"):
        return _get_profiles().find_one({"user": owner})


def get_profile_by_owner(owner_id: str) -> dict | None:
    doc = load_profile_document(owner_id)
    with _translate_errors("user lookup"):
        return _present(doc)


def get_profile_by_id(profile_id: str) -> dict | None:
    object_id = parse_object_id(profile_id)
    if object_id is None:
        return None
    with _translate_errors("profile lookup"):
        return _present(_get_profiles().find_one({"_id": object_id}))


def list_profiles() -> list[dict]:
    with _translate_errors("profile listing"):
        docs = list(_get_profiles().find())
        return [_serialize(doc) for doc in _populate_users(docs)]


def upsert_profile(owner_id: str, fields: dict[str, Any], defaults: dict[str, Any]) -> dict:
    """Create the owner's profile or update it in place, in one operation.

    ``fields`` go to ``$set`` and ``defaults`` to ``$setOnInsert``; the
    unique index on ``user`` keeps a single profile per owner.
    """
    owner = ObjectId(owner_id)
    update: dict[str, Any] = {"$setOnInsert": defaults}
    if fields:
        update["$set"] = fields

    with _translate_errors("profile upsert"):
        profiles = _get_profiles()
        try:
            doc = profiles.find_one_and_update(
                {"user": owner},
                update,
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # A concurrent upsert inserted first; the document now exists.
            logger.info("Profile insert race for user=%s, applying as update", owner_id)
            if fields:
                doc = profiles.find_one_and_update(
                    {"user": owner},
                    {"$set": fields},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                doc = profiles.find_one({"user": owner})
        return _present(doc)


def set_history_list(owner_id: str, list_name: str, entries: list[dict]) -> dict | None:
    owner = parse_object_id(owner_id)
    if owner is None:
        return None
    with _translate_errors(f"{list_name} update"):
        doc = _get_profiles().find_one_and_update(
            {"user": owner},
            {"$set": {list_name: entries}},
            return_document=ReturnDocument.AFTER,
        )
        return _present(doc)


def delete_owner(owner_id: str) -> None:
    owner = parse_object_id(owner_id)
    if owner is None:
        return
    with _translate_errors("profile deletion"):
        profile_result = _get_profiles().delete_one({"user": owner})
        user_result = _get_users().delete_one({"_id": owner})
    logger.info(
        "Deleted user=%s profiles=%d users=%d",
        owner_id,
        profile_result.deleted_count,
        user_result.deleted_count,
    )
