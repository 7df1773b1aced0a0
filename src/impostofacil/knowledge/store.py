"""Chunk stores: where chunks and their embeddings are persisted."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from impostofacil.db.models import ContentChunkRow, ContentSourceRow
from impostofacil.db.session import session_scope
from impostofacil.knowledge.errors import StorageError
from impostofacil.knowledge.models import ChunkMetadata, ContentChunk

logger = logging.getLogger(__name__)


class ChunkStore(Protocol):
    def get_existing_hash(self, source_path: str) -> Optional[str]:
        """Hash ``source_path`` was last ingested from, or ``None``."""

    def existing_hashes(self, source_paths: Iterable[str]) -> Dict[str, str]:
        """Bulk form of :meth:`get_existing_hash`; unknown paths are omitted."""

    def delete_chunks(self, source_path: str) -> int:
        """Drop every chunk and the hash record of ``source_path``; returns the chunk count."""

    def insert_chunks(self, chunks: Sequence[ContentChunk]) -> None:
        """Add ``chunks`` and record each source path's hash."""

    def replace_chunks(self, source_path: str, source_hash: str, chunks: Sequence[ContentChunk]) -> int:
        """Delete then insert in one transaction, recording ``source_hash`` even when ``chunks`` is empty.

        Returns the number of deleted chunks. Either both steps apply or neither.
        """

    def get_chunks(self, source_path: str) -> List[ContentChunk]:
        """Stored chunks of ``source_path`` ordered by ``chunk_index``."""


def _hashes_by_path(chunks: Sequence[ContentChunk]) -> Dict[str, str]:
    hashes: Dict[str, str] = {}
    for chunk in sorted(chunks, key=lambda item: item.chunk_index):
        hashes.setdefault(chunk.source_path, chunk.source_hash)
    return hashes


class InMemoryChunkStore:
    """Dictionary-backed store for tests and dry runs with storage disabled."""

    def __init__(self) -> None:
        self._chunks: Dict[str, List[ContentChunk]] = defaultdict(list)
        self._hashes: Dict[str, str] = {}

    def get_existing_hash(self, source_path: str) -> Optional[str]:
        return self._hashes.get(source_path)

    def existing_hashes(self, source_paths: Iterable[str]) -> Dict[str, str]:
        return {path: self._hashes[path] for path in source_paths if path in self._hashes}

    def delete_chunks(self, source_path: str) -> int:
        self._hashes.pop(source_path, None)
        return len(self._chunks.pop(source_path, []))

    def insert_chunks(self, chunks: Sequence[ContentChunk]) -> None:
        for chunk in chunks:
            self._chunks[chunk.source_path].append(chunk.model_copy(deep=True))
        self._hashes.update(_hashes_by_path(chunks))

    def replace_chunks(self, source_path: str, source_hash: str, chunks: Sequence[ContentChunk]) -> int:
        deleted = self.delete_chunks(source_path)
        self.insert_chunks(chunks)
        self._hashes[source_path] = source_hash
        return deleted

    def get_chunks(self, source_path: str) -> List[ContentChunk]:
        return sorted(self._chunks.get(source_path, []), key=lambda chunk: chunk.chunk_index)

    def __len__(self) -> int:
        return sum(len(chunks) for chunks in self._chunks.values())


def _to_row(chunk: ContentChunk) -> ContentChunkRow:
    return ContentChunkRow(
        source_path=chunk.source_path,
        title=chunk.title,
        section_title=chunk.section_title,
        category=chunk.category,
        content=chunk.content,
        chunk_index=chunk.chunk_index,
        source_hash=chunk.source_hash,
        difficulty=chunk.difficulty,
        metadata_json=chunk.metadata.model_dump(mode="json", exclude_none=True),
        embedding=chunk.embedding,
    )


def _from_row(row: ContentChunkRow) -> ContentChunk:
    return ContentChunk(
        source_path=row.source_path,
        title=row.title,
        section_title=row.section_title,
        category=row.category,
        content=row.content,
        chunk_index=row.chunk_index,
        source_hash=row.source_hash,
        difficulty=row.difficulty,
        metadata=ChunkMetadata.model_validate(row.metadata_json or {}),
        embedding=row.embedding,
    )


class SqlChunkStore:
    """SQLAlchemy store over the ``content_chunks`` and ``content_sources`` tables."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Session-level steps, composed by the public methods
    # ------------------------------------------------------------------

    @staticmethod
    def _delete(session: Session, source_path: str) -> int:
        result = session.execute(delete(ContentChunkRow).where(ContentChunkRow.source_path == source_path))
        session.execute(delete(ContentSourceRow).where(ContentSourceRow.source_path == source_path))
        return result.rowcount or 0

    @staticmethod
    def _record(session: Session, source_path: str, source_hash: str) -> None:
        session.flush()
        count = session.scalar(
            select(func.count()).select_from(ContentChunkRow).where(ContentChunkRow.source_path == source_path)
        )
        session.merge(ContentSourceRow(source_path=source_path, source_hash=source_hash, chunk_count=count or 0))

    def _insert(self, session: Session, chunks: Sequence[ContentChunk]) -> None:
        session.add_all([_to_row(chunk) for chunk in chunks])
        for path, source_hash in _hashes_by_path(chunks).items():
            self._record(session, path, source_hash)

    # ------------------------------------------------------------------
    # ChunkStore
    # ------------------------------------------------------------------

    def get_existing_hash(self, source_path: str) -> Optional[str]:
        return self.existing_hashes([source_path]).get(source_path)

    def existing_hashes(self, source_paths: Iterable[str]) -> Dict[str, str]:
        paths = list(source_paths)
        if not paths:
            return {}
        stmt = select(ContentSourceRow.source_path, ContentSourceRow.source_hash).where(
            ContentSourceRow.source_path.in_(paths)
        )
        try:
            with session_scope(self._session_factory) as session:
                return {path: source_hash for path, source_hash in session.execute(stmt).all()}
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to read existing hashes: {exc}") from exc

    def delete_chunks(self, source_path: str) -> int:
        try:
            with session_scope(self._session_factory) as session:
                return self._delete(session, source_path)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to delete chunks for {source_path}: {exc}") from exc

    def insert_chunks(self, chunks: Sequence[ContentChunk]) -> None:
        try:
            with session_scope(self._session_factory) as session:
                self._insert(session, chunks)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to insert {len(chunks)} chunk(s): {exc}") from exc

    def replace_chunks(self, source_path: str, source_hash: str, chunks: Sequence[ContentChunk]) -> int:
        try:
            with session_scope(self._session_factory) as session:
                deleted = self._delete(session, source_path)
                self._insert(session, chunks)
                self._record(session, source_path, source_hash)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to replace chunks for {source_path}: {exc}") from exc
        logger.debug("Replaced %d chunk(s) of %s with %d", deleted, source_path, len(chunks))
        return deleted

    def get_chunks(self, source_path: str) -> List[ContentChunk]:
        stmt = (
            select(ContentChunkRow)
            .where(ContentChunkRow.source_path == source_path)
            .order_by(ContentChunkRow.chunk_index)
        )
        try:
            with session_scope(self._session_factory) as session:
                return [_from_row(row) for row in session.scalars(stmt).all()]
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to load chunks for {source_path}: {exc}") from exc
