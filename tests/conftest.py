"""Shared pytest fixtures."""

import copy
import re
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from synopsis.config import Config
from synopsis.core.modules.summary.models import Summary
from synopsis.core.modules.user.models import User

USER_ID = UUID("87654321-4321-8765-4321-876543218765")
SUMMARY_ID = UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture
def config():
    """Configuration that never touches a real server."""
    return Config(
        database_url="mongodb://localhost:27017/synopsis_test",
        token_secret_key="test-secret",
        cors_origins=["http://localhost:5173"],
    )


@pytest.fixture
def mock_user():
    """Create a mock user for testing."""
    return User(
        id=USER_ID,
        email="a@b.com",
        password_hash="$2b$12$hashed_password_here",
    )


@pytest.fixture
def mock_summary():
    """Create a stored summary for testing."""
    return Summary(
        id=SUMMARY_ID,
        note="hello world",
        summary="hello",
        tags=["t1"],
        created_at=datetime(2025, 1, 15, 10, 30, tzinfo=UTC),
        owner_id=USER_ID,
    )


@pytest.fixture
def mock_cursor():
    """Chainable cursor: sort/skip/limit return the cursor itself, to_list is awaitable."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    return cursor


@pytest.fixture
def mock_collection(mock_cursor):
    """Async collection double covering the operations the services use."""
    collection = MagicMock()
    collection.create_index = AsyncMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=0)
    collection.find = MagicMock(return_value=mock_cursor)
    return collection


@pytest.fixture
def mock_database(mock_collection):
    database = MagicMock()
    database.get_collection.return_value = mock_collection
    return database


class InMemoryCursor:
    """Cursor over a snapshot of matching documents, chainable like pymongo's."""

    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, keys: list[tuple[str, int]]) -> "InMemoryCursor":
        # Stable sorts from the least significant key give a compound ordering
        for field, direction in reversed(keys):
            self._docs.sort(key=lambda doc: _sort_key(doc.get(field)), reverse=direction < 0)
        return self

    def skip(self, count: int) -> "InMemoryCursor":
        self._skip = count
        return self

    def limit(self, count: int) -> "InMemoryCursor":
        self._limit = count
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        end = self._skip + self._limit if self._limit else None
        return copy.deepcopy(self._docs[self._skip : end])


class InMemoryCollection:
    """Document store honouring the query and update operators the services issue.

    Supports equality, `$or`, `$regex` with `$options`, `$type: "string"`,
    `$set` updates, `$set` pipeline stages with `$not` and `$field` references,
    and unique indexes with an optional partial filter.
    """

    def __init__(self) -> None:
        self._docs: list[dict[str, Any]] = []
        self._unique: list[tuple[list[str], dict[str, Any] | None]] = []

    async def create_index(self, keys: list[tuple[str, Any]], unique: bool = False, **kwargs: Any) -> str:
        if unique:
            self._unique.append(([field for field, _ in keys], kwargs.get("partialFilterExpression")))
        return "_".join(field for field, _ in keys)

    async def insert_one(self, doc: dict[str, Any]) -> SimpleNamespace:
        doc = copy.deepcopy(doc)
        if any(stored["_id"] == doc["_id"] for stored in self._docs):
            raise DuplicateKeyError("E11000 duplicate key error: _id")
        self._check_unique(doc)
        self._docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        doc = self._first(query)
        return None if doc is None else copy.deepcopy(doc)

    def find(self, query: dict[str, Any]) -> InMemoryCursor:
        return InMemoryCursor([copy.deepcopy(doc) for doc in self._docs if _matches(doc, query)])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for doc in self._docs if _matches(doc, query))

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any] | list[dict[str, Any]],
        return_document: bool = ReturnDocument.BEFORE,
    ) -> dict[str, Any] | None:
        doc = self._first(query)
        if doc is None:
            return None

        updated = copy.deepcopy(doc)
        if isinstance(update, list):
            for stage in update:
                for field, expr in stage["$set"].items():
                    updated[field] = _evaluate(expr, doc)
        else:
            updated.update(copy.deepcopy(update["$set"]))

        self._check_unique(updated)
        before = copy.deepcopy(doc)
        doc.clear()
        doc.update(updated)
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        doc = self._first(query)
        if doc is None:
            return SimpleNamespace(deleted_count=0)
        self._docs.remove(doc)
        return SimpleNamespace(deleted_count=1)

    def _first(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next((doc for doc in self._docs if _matches(doc, query)), None)

    def _check_unique(self, candidate: dict[str, Any]) -> None:
        for fields, partial in self._unique:
            if partial is not None and not _matches(candidate, partial):
                continue
            for other in self._docs:
                if other["_id"] == candidate["_id"]:
                    continue
                if partial is not None and not _matches(other, partial):
                    continue
                if all(other.get(f) == candidate.get(f) for f in fields):
                    raise DuplicateKeyError(f"E11000 duplicate key error: {fields}")


class InMemoryDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, InMemoryCollection] = {}

    def get_collection(self, name: str) -> InMemoryCollection:
        return self._collections.setdefault(name, InMemoryCollection())


def _sort_key(value: Any) -> tuple[int, Any]:
    # Missing and null values sort before everything else, as in MongoDB
    return (0, 0) if value is None else (1, value)


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in condition):
                return False
        elif not _field_matches(doc.get(key), condition):
            return False
    return True


def _field_matches(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict):
        if "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            values = value if isinstance(value, list) else [value]
            return any(isinstance(v, str) and re.search(condition["$regex"], v, flags) for v in values)
        if "$type" in condition:
            if condition["$type"] != "string":
                raise NotImplementedError(condition)
            return isinstance(value, str)
        raise NotImplementedError(condition)
    if isinstance(value, list) and not isinstance(condition, list):
        return condition in value
    return value == condition


def _evaluate(expr: Any, doc: dict[str, Any]) -> Any:
    if isinstance(expr, str) and expr.startswith("$"):
        return doc.get(expr[1:])
    if isinstance(expr, dict) and "$not" in expr:
        return not _evaluate(expr["$not"][0], doc)
    return expr


@pytest.fixture
def memory_database():
    """Database whose collections keep documents in memory and evaluate queries against them."""
    return InMemoryDatabase()
