from __future__ import annotations

from types import SimpleNamespace

import pytest
from openai import OpenAIError

from impostofacil.caching.ttl_cache import TTLCache
from impostofacil.knowledge.embeddings import CachedEmbeddingProvider, OpenAIEmbeddingProvider, embed_in_batches
from impostofacil.knowledge.errors import EmbeddingError, MissingConfigurationError


class FakeEmbeddings:
    def __init__(self, reverse=False, fail=False, drop=0):
        self.calls = []
        self.reverse = reverse
        self.fail = fail
        self.drop = drop

    def create(self, model, input):
        self.calls.append((model, list(input)))
        if self.fail:
            raise OpenAIError("rate limited")
        items = [SimpleNamespace(index=i, embedding=[float(len(text))]) for i, text in enumerate(input)]
        if self.reverse:
            items.reverse()
        return SimpleNamespace(data=items[: len(items) - self.drop])


class RecordingProvider:
    model = "fake-model"

    def __init__(self):
        self.batches = []

    def embed(self, texts):
        self.batches.append(list(texts))
        return [[float(len(text))] for text in texts]


class TestOpenAIProvider:
    def test_results_follow_input_order(self):
        fake = FakeEmbeddings(reverse=True)
        provider = OpenAIEmbeddingProvider(api_key="sk-test", model="m", client=SimpleNamespace(embeddings=fake))

        assert provider.embed(["a", "bbb"]) == [[1.0], [3.0]]
        assert fake.calls == [("m", ["a", "bbb"])]

    def test_empty_input_skips_request(self):
        fake = FakeEmbeddings()
        provider = OpenAIEmbeddingProvider(api_key="sk-test", client=SimpleNamespace(embeddings=fake))

        assert provider.embed([]) == []
        assert fake.calls == []

    def test_sdk_errors_are_wrapped(self):
        provider = OpenAIEmbeddingProvider(
            api_key="sk-test", client=SimpleNamespace(embeddings=FakeEmbeddings(fail=True))
        )

        with pytest.raises(EmbeddingError, match="rate limited"):
            provider.embed(["a"])

    def test_count_mismatch(self):
        provider = OpenAIEmbeddingProvider(
            api_key="sk-test", client=SimpleNamespace(embeddings=FakeEmbeddings(drop=1))
        )

        with pytest.raises(EmbeddingError, match="expected 2 embeddings, received 1"):
            provider.embed(["a", "b"])

    def test_missing_key_fails_lazily(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        provider = OpenAIEmbeddingProvider()

        with pytest.raises(MissingConfigurationError, match="OPENAI_API_KEY"):
            provider.embed(["a"])

    def test_model_from_environment(self, monkeypatch):
        monkeypatch.setenv("IMPOSTOFACIL_EMBEDDING_MODEL", "text-embedding-3-large")

        assert OpenAIEmbeddingProvider(api_key="sk-test").model == "text-embedding-3-large"


class TestCachedProvider:
    def test_only_misses_go_upstream(self):
        upstream = RecordingProvider()
        cached = CachedEmbeddingProvider(upstream)

        assert cached.embed(["a", "bb"]) == [[1.0], [2.0]]
        assert cached.embed(["bb", "ccc", "a"]) == [[2.0], [3.0], [1.0]]
        assert upstream.batches == [["a", "bb"], ["ccc"]]
        assert (cached.hits, cached.misses) == (2, 3)

    def test_entries_expire(self):
        now = [0.0]
        upstream = RecordingProvider()
        cached = CachedEmbeddingProvider(upstream, TTLCache(60, clock=lambda: now[0]))

        cached.embed(["a"])
        now[0] = 61
        cached.embed(["a"])

        assert upstream.batches == [["a"], ["a"]]


class TestBatches:
    def test_sequential_batches_with_progress(self):
        upstream = RecordingProvider()
        progress = []

        vectors = embed_in_batches(
            upstream, ["a", "b", "c", "d", "e"], batch_size=2, on_batch=lambda *args: progress.append(args)
        )

        assert len(vectors) == 5
        assert upstream.batches == [["a", "b"], ["c", "d"], ["e"]]
        assert progress == [(1, 2, 5), (3, 4, 5), (5, 5, 5)]

    def test_batch_size_from_environment(self, monkeypatch):
        monkeypatch.setenv("IMPOSTOFACIL_EMBEDDING_BATCH_SIZE", "3")
        upstream = RecordingProvider()

        embed_in_batches(upstream, ["a", "b", "c", "d"])

        assert [len(batch) for batch in upstream.batches] == [3, 1]
