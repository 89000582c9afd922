from collections.abc import Callable, Iterator

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from jose import jwt

import profile_store
from app import app

JWT_SECRET = "test-secret"


@pytest.fixture
def mongo(monkeypatch) -> mongomock.MongoClient:
    client = mongomock.MongoClient()
    monkeypatch.setattr(profile_store, "_client", client)
    monkeypatch.setattr(profile_store, "_indexes_ready", False)
    return client


@pytest.fixture
def make_user(mongo) -> Callable[..., str]:
    def _make_user(name: str = "Jane Doe", avatar: str = "//gravatar.com/avatar/jane") -> str:
        result = profile_store._get_users().insert_one({"name": name, "avatar": avatar})
        return str(result.inserted_id)

    return _make_user


def make_token(user_id: str) -> str:
    return jwt.encode({"user": {"id": user_id}}, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def client(mongo, monkeypatch) -> Iterator[TestClient]:
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(make_user) -> Callable[[str | None], dict[str, str]]:
    def _headers(user_id: str | None = None) -> dict[str, str]:
        return {"x-auth-token": make_token(user_id or make_user())}

    return _headers


@pytest.fixture
def user_id(make_user) -> str:
    return make_user()


@pytest.fixture
def missing_id() -> str:
    return str(ObjectId())
