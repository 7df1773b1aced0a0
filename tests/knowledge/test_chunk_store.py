from __future__ import annotations

import pytest

from impostofacil.db.session import create_db_engine, create_session_factory, init_db
from impostofacil.knowledge.models import ChunkMetadata, ContentChunk, SourceCitation
from impostofacil.knowledge.store import InMemoryChunkStore, SqlChunkStore


def _chunk(path, index, source_hash="h1", embedding=None):
    return ContentChunk(
        source_path=path,
        title="Guia",
        section_title=f"Seção {index}",
        category="ibs",
        content=f"conteudo {index}",
        chunk_index=index,
        source_hash=source_hash,
        metadata=ChunkMetadata(
            original_title="Guia",
            tags=["ibs"],
            sources=[SourceCitation(name="LC 214/2025", date_accessed="2025-06-01")],
        ),
        embedding=embedding,
    )


@pytest.fixture
def sql_store():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield SqlChunkStore(create_session_factory(engine))
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request, sql_store):
    if request.param == "memory":
        return InMemoryChunkStore()
    return sql_store


class TestChunkStores:
    def test_replace_then_read_back(self, store):
        deleted = store.replace_chunks("ibs/a.mdx", "h1", [_chunk("ibs/a.mdx", 1), _chunk("ibs/a.mdx", 0)])
        chunks = store.get_chunks("ibs/a.mdx")

        assert deleted == 0
        assert [chunk.chunk_index for chunk in chunks] == [0, 1]
        assert chunks[0].metadata.sources[0].date_accessed == "2025-06-01"

    def test_replace_deletes_previous_set(self, store):
        three = [_chunk("ibs/a.mdx", index) for index in range(3)]
        store.replace_chunks("ibs/a.mdx", "h1", three)

        deleted = store.replace_chunks("ibs/a.mdx", "h2", [_chunk("ibs/a.mdx", 0, "h2")])

        assert deleted == 3
        assert [chunk.source_hash for chunk in store.get_chunks("ibs/a.mdx")] == ["h2"]
        assert store.get_existing_hash("ibs/a.mdx") == "h2"

    def test_existing_hashes(self, store):
        store.replace_chunks("ibs/a.mdx", "aaaa", [_chunk("ibs/a.mdx", 0, "aaaa")])
        store.replace_chunks("cbs/b.mdx", "bbbb", [_chunk("cbs/b.mdx", 0, "bbbb")])

        assert store.existing_hashes(["ibs/a.mdx", "faq/c.mdx"]) == {"ibs/a.mdx": "aaaa"}
        assert store.existing_hashes([]) == {}

    def test_hash_recorded_without_chunks(self, store):
        store.replace_chunks("ibs/vazio.mdx", "cccc", [])

        assert store.get_chunks("ibs/vazio.mdx") == []
        assert store.get_existing_hash("ibs/vazio.mdx") == "cccc"

    def test_embeddings_round_trip(self, store):
        store.replace_chunks("ibs/a.mdx", "h1", [_chunk("ibs/a.mdx", 0, embedding=[0.25, -1.0])])

        assert store.get_chunks("ibs/a.mdx")[0].embedding == [0.25, -1.0]

    def test_other_paths_untouched(self, store):
        store.replace_chunks("ibs/a.mdx", "h1", [_chunk("ibs/a.mdx", 0)])
        store.replace_chunks("cbs/b.mdx", "h1", [_chunk("cbs/b.mdx", 0)])

        store.replace_chunks("ibs/a.mdx", "h3", [])

        assert store.get_chunks("ibs/a.mdx") == []
        assert len(store.get_chunks("cbs/b.mdx")) == 1


class TestStorageOperations:
    def test_unknown_path_has_no_hash(self, store):
        assert store.get_existing_hash("ibs/nada.mdx") is None

    def test_insert_records_hash(self, store):
        store.insert_chunks([_chunk("ibs/a.mdx", 1, "dddd"), _chunk("ibs/a.mdx", 0, "dddd")])

        assert store.get_existing_hash("ibs/a.mdx") == "dddd"
        assert [chunk.chunk_index for chunk in store.get_chunks("ibs/a.mdx")] == [0, 1]

    def test_insert_spanning_paths(self, store):
        store.insert_chunks([_chunk("ibs/a.mdx", 0, "aaaa"), _chunk("cbs/b.mdx", 0, "bbbb")])

        assert store.existing_hashes(["ibs/a.mdx", "cbs/b.mdx"]) == {"ibs/a.mdx": "aaaa", "cbs/b.mdx": "bbbb"}

    def test_delete_returns_row_count(self, store):
        store.insert_chunks([_chunk("ibs/a.mdx", index) for index in range(4)])
        store.insert_chunks([_chunk("cbs/b.mdx", 0)])

        assert store.delete_chunks("ibs/a.mdx") == 4
        assert store.get_chunks("ibs/a.mdx") == []
        assert store.get_existing_hash("ibs/a.mdx") is None
        assert len(store.get_chunks("cbs/b.mdx")) == 1

    def test_delete_unknown_path(self, store):
        assert store.delete_chunks("ibs/nada.mdx") == 0


class TestEngine:
    def test_engine_requires_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(ValueError, match="DATABASE_URL"):
            create_db_engine()
