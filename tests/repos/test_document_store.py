from __future__ import annotations

import asyncio

import pytest

from progress_service.repos.document_store import (
    DocumentExists,
    DocumentMissing,
    InMemoryDocumentStore,
    VersionConflict,
)


def test_insert_then_get_starts_at_version_one() -> None:
    store = InMemoryDocumentStore()
    asyncio.run(store.insert("courses", "c1", {"id": "c1", "title": "x"}))

    doc = asyncio.run(store.get("courses", "c1"))
    assert doc is not None
    assert doc.version == 1
    assert doc.body["title"] == "x"


def test_insert_existing_id_raises() -> None:
    store = InMemoryDocumentStore()
    asyncio.run(store.insert("courses", "c1", {"id": "c1"}))
    with pytest.raises(DocumentExists):
        asyncio.run(store.insert("courses", "c1", {"id": "c1"}))


def test_same_id_in_other_collection_is_independent() -> None:
    store = InMemoryDocumentStore()
    asyncio.run(store.insert("courses", "x", {"id": "x"}))
    asyncio.run(store.insert("lessons", "x", {"id": "x"}))
    assert asyncio.run(store.get("lessons", "x")) is not None


def test_compare_and_swap_bumps_version() -> None:
    store = InMemoryDocumentStore()
    asyncio.run(store.insert("courses", "c1", {"n": 1}))

    updated = asyncio.run(store.compare_and_swap("courses", "c1", 1, {"n": 2}))

    assert updated.version == 2
    assert asyncio.run(store.get("courses", "c1")).body == {"n": 2}  # type: ignore[union-attr]


def test_compare_and_swap_with_stale_version_conflicts() -> None:
    store = InMemoryDocumentStore()
    asyncio.run(store.insert("courses", "c1", {"n": 1}))
    asyncio.run(store.compare_and_swap("courses", "c1", 1, {"n": 2}))

    with pytest.raises(VersionConflict):
        asyncio.run(store.compare_and_swap("courses", "c1", 1, {"n": 3}))


def test_compare_and_swap_missing_document() -> None:
    store = InMemoryDocumentStore()
    with pytest.raises(DocumentMissing):
        asyncio.run(store.compare_and_swap("courses", "nope", 1, {}))


def test_find_matches_scalars_and_list_members() -> None:
    store = InMemoryDocumentStore()
    asyncio.run(store.insert("courses", "c1", {"slug": "a", "enrolledStudents": ["u1", "u2"]}))
    asyncio.run(store.insert("courses", "c2", {"slug": "b", "enrolledStudents": ["u2"]}))

    assert [d.id for d in asyncio.run(store.find("courses", "slug", "b"))] == ["c2"]
    found = asyncio.run(store.find("courses", "enrolledStudents", "u2"))
    assert sorted(d.id for d in found) == ["c1", "c2"]


def test_returned_bodies_are_copies() -> None:
    store = InMemoryDocumentStore()
    body = {"tags": ["a"]}
    asyncio.run(store.insert("courses", "c1", body))
    body["tags"].append("mutated")

    doc = asyncio.run(store.get("courses", "c1"))
    doc.body["tags"].append("also mutated")  # type: ignore[union-attr]

    assert asyncio.run(store.get("courses", "c1")).body == {"tags": ["a"]}  # type: ignore[union-attr]
