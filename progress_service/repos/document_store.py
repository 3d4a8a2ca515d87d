"""Document store abstraction with per-document optimistic concurrency.

The progress engine touches three aggregates (learner, course, group)
per request, but the store only guarantees atomicity per document.
There is no cross-document transaction.  What the store DOES offer is a
version counter on every document and a compare-and-swap write:

    doc = await store.get("courses", course_id)          # version 7
    ...compute the new body...
    await store.compare_and_swap("courses", course_id, 7, new_body)

If another request wrote the course in between (version is now 8), the
swap raises VersionConflict and the caller re-reads and recomputes.
``AggregateRepo.mutate`` wraps that loop.

Two implementations satisfy the protocol:
  InMemoryDocumentStore  (this module; dev and tests)
  PgDocumentStore        (progress_service.repos.pg_document_store)
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


class VersionConflict(Exception):
    """The document changed since it was read."""

    def __init__(self, collection: str, doc_id: str, expected_version: int) -> None:
        super().__init__(
            f"{collection}/{doc_id} is no longer at version {expected_version}"
        )
        self.collection = collection
        self.doc_id = doc_id
        self.expected_version = expected_version


class DocumentExists(Exception):
    """Insert of a document id that is already taken."""


class DocumentMissing(Exception):
    """Compare-and-swap against a document that does not exist."""


@dataclass(frozen=True, slots=True)
class VersionedDocument:
    id: str
    version: int
    body: dict[str, Any]


@runtime_checkable
class DocumentStore(Protocol):
    async def get(self, collection: str, doc_id: str) -> VersionedDocument | None: ...

    async def find(
        self, collection: str, field: str, value: Any
    ) -> list[VersionedDocument]:
        """Documents whose ``field`` equals ``value`` or, for list fields,
        contains it."""
        ...

    async def insert(
        self, collection: str, doc_id: str, body: dict[str, Any]
    ) -> VersionedDocument:
        """Create at version 1.  Raises DocumentExists."""
        ...

    async def compare_and_swap(
        self,
        collection: str,
        doc_id: str,
        expected_version: int,
        body: dict[str, Any],
    ) -> VersionedDocument:
        """Replace the body iff the stored version matches, bumping it.

        Raises VersionConflict or DocumentMissing.
        """
        ...


def field_matches(body: dict[str, Any], field: str, value: Any) -> bool:
    stored = body.get(field)
    if isinstance(stored, list):
        return value in stored
    return stored == value


class InMemoryDocumentStore:
    """Dict-backed store for dev and tests.

    Bodies are round-tripped through JSON on write and deep-copied on
    read so callers can never mutate stored state by reference, and so
    anything that would not survive the PostgreSQL JSONB column fails
    here too.  No method awaits between reading and writing a document,
    which makes each call atomic on the event loop.
    """

    def __init__(self) -> None:
        self._docs: dict[tuple[str, str], VersionedDocument] = {}

    @staticmethod
    def _snapshot(body: dict[str, Any]) -> dict[str, Any]:
        return json.loads(json.dumps(body))

    async def get(self, collection: str, doc_id: str) -> VersionedDocument | None:
        doc = self._docs.get((collection, doc_id))
        if doc is None:
            return None
        return VersionedDocument(doc.id, doc.version, copy.deepcopy(doc.body))

    async def find(
        self, collection: str, field: str, value: Any
    ) -> list[VersionedDocument]:
        return [
            VersionedDocument(doc.id, doc.version, copy.deepcopy(doc.body))
            for (coll, _), doc in self._docs.items()
            if coll == collection and field_matches(doc.body, field, value)
        ]

    async def insert(
        self, collection: str, doc_id: str, body: dict[str, Any]
    ) -> VersionedDocument:
        key = (collection, doc_id)
        if key in self._docs:
            raise DocumentExists(f"{collection}/{doc_id} already exists")
        doc = VersionedDocument(doc_id, 1, self._snapshot(body))
        self._docs[key] = doc
        return VersionedDocument(doc.id, doc.version, copy.deepcopy(doc.body))

    async def compare_and_swap(
        self,
        collection: str,
        doc_id: str,
        expected_version: int,
        body: dict[str, Any],
    ) -> VersionedDocument:
        key = (collection, doc_id)
        current = self._docs.get(key)
        if current is None:
            raise DocumentMissing(f"{collection}/{doc_id} does not exist")
        if current.version != expected_version:
            raise VersionConflict(collection, doc_id, expected_version)
        doc = VersionedDocument(doc_id, current.version + 1, self._snapshot(body))
        self._docs[key] = doc
        return VersionedDocument(doc.id, doc.version, copy.deepcopy(doc.body))
