"""Typed repositories over the document store.

``AggregateRepo`` converts between documents and domain dataclasses and
owns the read-modify-write loop every aggregate write goes through::

    change = await repos.courses.mutate(course_id, lambda c: replace(...))

``mutate`` re-reads the latest version, applies the pure function, and
compare-and-swaps the result.  On a version conflict it starts over with
the fresh document, up to ``max_retries`` attempts.  Because the
functions passed in are set unions and idempotent ledger operations,
re-applying them to a newer version is always safe.  When the function
returns an unchanged value nothing is written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from progress_service.core.errors import Internal, NotFound
from progress_service.core.metrics import CAS_CONFLICTS
from progress_service.repos.document_store import DocumentStore, VersionConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Change(Generic[T]):
    """Result of a mutate: the value it was applied to and the value stored."""

    before: T
    after: T

    @property
    def changed(self) -> bool:
        return self.before != self.after


class AggregateRepo(Generic[T]):
    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        label: str,
        encode: Callable[[T], dict[str, Any]],
        decode: Callable[[dict[str, Any]], T],
        id_of: Callable[[T], str],
        max_retries: int = 5,
    ) -> None:
        self._store = store
        self.collection = collection
        self._label = label
        self._encode = encode
        self._decode = decode
        self._id_of = id_of
        self._max_retries = max_retries

    async def get(self, doc_id: str) -> T | None:
        doc = await self._store.get(self.collection, doc_id)
        return None if doc is None else self._decode(doc.body)

    async def require(self, doc_id: str) -> T:
        found = await self.get(doc_id)
        if found is None:
            raise NotFound(f"{self._label} not found.")
        return found

    async def find(self, field: str, value: Any) -> list[T]:
        docs = await self._store.find(self.collection, field, value)
        docs.sort(key=lambda d: d.id)
        return [self._decode(d.body) for d in docs]

    async def find_one(self, field: str, value: Any) -> T | None:
        found = await self.find(field, value)
        return found[0] if found else None

    async def add(self, obj: T) -> T:
        """Insert a new aggregate.  Raises DocumentExists on an id clash."""
        doc = await self._store.insert(self.collection, self._id_of(obj), self._encode(obj))
        return self._decode(doc.body)

    async def mutate(self, doc_id: str, fn: Callable[[T], T]) -> Change[T]:
        for attempt in range(1, self._max_retries + 1):
            doc = await self._store.get(self.collection, doc_id)
            if doc is None:
                raise NotFound(f"{self._label} not found.")

            current = self._decode(doc.body)
            updated = fn(current)
            if updated == current:
                return Change(current, current)

            try:
                await self._store.compare_and_swap(
                    self.collection, doc_id, doc.version, self._encode(updated)
                )
            except VersionConflict:
                CAS_CONFLICTS.labels(collection=self.collection).inc()
                logger.debug(
                    "Version conflict on %s/%s (attempt %d/%d), retrying",
                    self.collection,
                    doc_id,
                    attempt,
                    self._max_retries,
                )
                continue

            return Change(current, updated)

        logger.error(
            "Gave up writing %s/%s after %d conflicting attempts",
            self.collection,
            doc_id,
            self._max_retries,
        )
        raise Internal(f"{self._label} is being modified concurrently; retry the request.")
