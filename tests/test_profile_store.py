import pytest
from pymongo.errors import DuplicateKeyError, PyMongoError

import profile_store
from errors import StoreFailure
from profile_merge import build_profile_fields, insert_defaults, merge_profile


def _upsert(owner_id, patch):
    fields = build_profile_fields(patch)
    return profile_store.upsert_profile(owner_id, fields, insert_defaults(fields))


def test_upsert_creates_single_profile_with_populated_user(mongo, user_id):
    profile = _upsert(user_id, {"status": "Developer", "skills": "python"})

    assert profile["user"] == {"_id": user_id, "name": "Jane Doe", "avatar": "//gravatar.com/avatar/jane"}
    assert profile["social"] == {}
    assert profile["experience"] == []
    assert isinstance(profile["_id"], str)
    assert isinstance(profile["date"], str)
    assert profile_store._get_profiles().count_documents({}) == 1


def test_repeated_upsert_updates_in_place(mongo, user_id):
    first = _upsert(user_id, {"status": "Student", "skills": "css", "twitter": "t"})
    second = _upsert(user_id, {"status": "Developer", "skills": "go", "facebook": "f"})

    assert second["_id"] == first["_id"]
    assert second["date"] == first["date"]
    assert second["status"] == "Developer"
    assert second["skills"] == ["go"]
    assert second["social"] == {"twitter": "t", "facebook": "f"}
    assert profile_store._get_profiles().count_documents({}) == 1


def test_unique_index_rejects_second_profile(mongo, user_id):
    _upsert(user_id, {"status": "Developer", "skills": "go"})

    with pytest.raises(DuplicateKeyError):
        profile_store._get_profiles().insert_one({"user": profile_store.parse_object_id(user_id)})


class _RacingCollection:
    """Collection whose first upsert loses an insert race to another writer."""

    def __init__(self, collection):
        self._collection = collection
        self._raced = False

    def __getattr__(self, name):
        return getattr(self._collection, name)

    def find_one_and_update(self, filter, update, upsert=False, **kwargs):
        if upsert and not self._raced:
            self._raced = True
            self._collection.insert_one({**filter, "status": "Winner", "social": {}})
            raise DuplicateKeyError("E11000 duplicate key error")
        return self._collection.find_one_and_update(filter, update, upsert=upsert, **kwargs)


def test_lost_insert_race_applies_update_to_existing_profile(mongo, user_id, monkeypatch):
    racing = _RacingCollection(profile_store._get_profiles())
    monkeypatch.setattr(profile_store, "_get_profiles", lambda: racing)

    profile = _upsert(user_id, {"status": "Developer", "skills": "go"})

    assert profile["status"] == "Developer"
    assert profile["skills"] == ["go"]
    assert racing.count_documents({}) == 1


def test_lookups_with_malformed_ids_return_none(mongo):
    assert profile_store.get_profile_by_id("123") is None
    assert profile_store.get_profile_by_owner("nope") is None
    assert profile_store.load_profile_document("nope") is None


def test_profile_without_user_record_keeps_bare_owner_id(mongo, missing_id):
    profile = _upsert(missing_id, {"status": "Developer", "skills": "go"})

    assert profile["user"] == missing_id


def test_delete_owner_removes_profile_and_user_and_is_idempotent(mongo, user_id):
    _upsert(user_id, {"status": "Developer", "skills": "go"})

    profile_store.delete_owner(user_id)
    profile_store.delete_owner(user_id)

    assert profile_store.get_profile_by_owner(user_id) is None
    assert profile_store._get_users().count_documents({}) == 0


def test_driver_errors_become_store_failures(mongo, monkeypatch):
    class _BrokenCollection:
        def find(self, *args, **kwargs):
            raise PyMongoError("connection reset")

    monkeypatch.setattr(profile_store, "_get_profiles", lambda: _BrokenCollection())

    with pytest.raises(StoreFailure):
        profile_store.list_profiles()


def test_store_upsert_matches_in_memory_merge(mongo, user_id):
    patches = [
        {"status": "Student", "skills": "css, html", "company": "Acme", "twitter": "t"},
        {"status": "Developer", "location": "Berlin", "facebook": "f"},
        {"skills": "go ,python", "twitter": "t2"},
    ]

    expected = None
    for patch in patches:
        stored = _upsert(user_id, patch)
        expected = merge_profile(expected, patch)

    compared = ("status", "company", "location", "skills", "social", "experience", "education")
    assert {key: stored.get(key) for key in compared} == {key: expected.get(key) for key in compared}
