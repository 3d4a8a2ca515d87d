"""SQLAlchemy table definitions.

Every aggregate (learners, courses, lessons, quizzes, groups,
certificates) is one JSONB document in a single ``documents`` table,
keyed by (collection, id).  ``version`` backs the optimistic
compare-and-swap in PgDocumentStore.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from progress_service.db.engine import Base


class DocumentRow(Base):
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    body: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    __table_args__ = (
        # Serves find(): containment queries within one collection.
        Index("ix_documents_body_gin", "body", postgresql_using="gin"),
    )
