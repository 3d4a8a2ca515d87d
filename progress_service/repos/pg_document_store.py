"""PostgreSQL implementation of DocumentStore."""

from __future__ import annotations

from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from progress_service.db.tables import DocumentRow
from progress_service.repos.document_store import (
    DocumentExists,
    DocumentMissing,
    VersionConflict,
    VersionedDocument,
)


class PgDocumentStore:
    """Satisfies the DocumentStore Protocol using one JSONB table.

    Each call runs in its own short transaction; there is deliberately no
    request-wide session, since a multi-aggregate workflow is a sequence
    of independent per-document writes.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, collection: str, doc_id: str) -> VersionedDocument | None:
        async with self._session_factory() as session:
            stmt = select(DocumentRow).where(
                DocumentRow.collection == collection, DocumentRow.id == doc_id
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
            return None if row is None else _row_to_doc(row)

    async def find(
        self, collection: str, field: str, value: Any
    ) -> list[VersionedDocument]:
        async with self._session_factory() as session:
            stmt = select(DocumentRow).where(
                DocumentRow.collection == collection,
                or_(
                    DocumentRow.body.contains({field: value}),
                    DocumentRow.body.contains({field: [value]}),
                ),
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [_row_to_doc(r) for r in rows]

    async def insert(
        self, collection: str, doc_id: str, body: dict[str, Any]
    ) -> VersionedDocument:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(
                    DocumentRow(collection=collection, id=doc_id, version=1, body=body)
                )
        except IntegrityError:
            raise DocumentExists(f"{collection}/{doc_id} already exists") from None
        return VersionedDocument(doc_id, 1, body)

    async def compare_and_swap(
        self,
        collection: str,
        doc_id: str,
        expected_version: int,
        body: dict[str, Any],
    ) -> VersionedDocument:
        async with self._session_factory() as session, session.begin():
            stmt = (
                update(DocumentRow)
                .where(
                    DocumentRow.collection == collection,
                    DocumentRow.id == doc_id,
                    DocumentRow.version == expected_version,
                )
                .values(body=body, version=expected_version + 1)
            )
            result = await session.execute(stmt)
            if result.rowcount == 1:
                return VersionedDocument(doc_id, expected_version + 1, body)

            exists = await session.execute(
                select(DocumentRow.version).where(
                    DocumentRow.collection == collection, DocumentRow.id == doc_id
                )
            )
            if exists.scalar_one_or_none() is None:
                raise DocumentMissing(f"{collection}/{doc_id} does not exist")
            raise VersionConflict(collection, doc_id, expected_version)


def _row_to_doc(row: DocumentRow) -> VersionedDocument:
    return VersionedDocument(id=row.id, version=row.version, body=dict(row.body))
