"""SQLAlchemy models for the knowledge-base chunk tables.

Embeddings are stored as JSON arrays; similarity search runs elsewhere.
"""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

JSONType = JSON().with_variant(JSONB(), "postgresql")


class ContentChunkRow(Base):
    """One retrieval chunk of a source article.

    Rows for a ``source_path`` are replaced as a set whenever the article's
    ``source_hash`` changes.
    """

    __tablename__ = "content_chunks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_path = Column(String(512), nullable=False)
    title = Column(String(512), nullable=False)
    section_title = Column(String(512), nullable=True)
    category = Column(String(32), nullable=False)
    content = Column(Text, nullable=False)
    chunk_index = Column(Integer, nullable=False)
    source_hash = Column(String(16), nullable=False)
    difficulty = Column(String(16), nullable=False, default="basico")
    # "metadata" is reserved on declarative classes.
    metadata_json = Column("metadata", JSONType, nullable=False, default=dict)
    embedding = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_content_chunks_source_path", "source_path"),
        Index("ix_content_chunks_category", "category"),
    )


class ContentSourceRow(Base):
    """Last ingested hash of a source article.

    Kept apart from the chunk rows so that an article which produced no
    chunks is still recognised as unchanged on the next run.
    """

    __tablename__ = "content_sources"

    source_path = Column(String(512), primary_key=True)
    source_hash = Column(String(16), nullable=False)
    chunk_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
