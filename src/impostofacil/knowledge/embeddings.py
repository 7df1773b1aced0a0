"""Embedding providers used by the ingestion run."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from openai import OpenAI, OpenAIError

from impostofacil import config
from impostofacil.caching.ttl_cache import TTLCache
from impostofacil.knowledge.errors import EmbeddingError, MissingConfigurationError

logger = logging.getLogger(__name__)

Vector = List[float]


class EmbeddingProvider(Protocol):
    model: str

    def embed(self, texts: Sequence[str]) -> List[Vector]:
        """Return one vector per input text, in input order."""


class OpenAIEmbeddingProvider:
    """Embeddings through the OpenAI SDK.

    The SDK client is created lazily so constructing the provider never
    needs network access or a key; pass ``client`` to reuse an existing one.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        self.api_key = api_key or config.openai_api_key()
        self.model = model or config.embedding_model()
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise MissingConfigurationError(["OPENAI_API_KEY"])
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def embed(self, texts: Sequence[str]) -> List[Vector]:
        if not texts:
            return []
        try:
            response = self.client.embeddings.create(model=self.model, input=list(texts))
        except OpenAIError as exc:
            raise EmbeddingError(f"embedding request failed: {exc}") from exc
        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(texts):
            raise EmbeddingError(f"expected {len(texts)} embeddings, received {len(data)}")
        return [list(item.embedding) for item in data]


class CachedEmbeddingProvider:
    """Memoises another provider per text in a :class:`TTLCache`.

    Only cache misses are sent upstream, in their original relative order.
    """

    def __init__(self, provider: EmbeddingProvider, cache: Optional[TTLCache] = None):
        self.provider = provider
        self.model = provider.model
        self.cache: TTLCache = cache if cache is not None else TTLCache()
        self.hits = 0
        self.misses = 0

    def _key(self, text: str) -> str:
        return f"{self.model}:{hashlib.sha256(text.encode('utf-8')).hexdigest()}"

    def embed(self, texts: Sequence[str]) -> List[Vector]:
        results: Dict[int, Vector] = {}
        pending: List[int] = []
        for index, text in enumerate(texts):
            cached = self.cache.get(self._key(text))
            if cached is None:
                pending.append(index)
            else:
                results[index] = cached
        self.hits += len(texts) - len(pending)
        self.misses += len(pending)

        if pending:
            fresh = self.provider.embed([texts[index] for index in pending])
            if len(fresh) != len(pending):
                raise EmbeddingError(f"expected {len(pending)} embeddings, received {len(fresh)}")
            for index, vector in zip(pending, fresh):
                self.cache.set(self._key(texts[index]), vector)
                results[index] = vector
        return [results[index] for index in range(len(texts))]


def embed_in_batches(
    provider: EmbeddingProvider,
    texts: Sequence[str],
    batch_size: Optional[int] = None,
    on_batch: Optional[Callable[[int, int, int], None]] = None,
) -> List[Vector]:
    """Embed ``texts`` in sequential batches.

    Batches are sent one after another to stay inside provider rate limits.
    ``on_batch(first, last, total)`` is called before each request with
    1-based bounds.
    """

    size = batch_size or config.embedding_batch_size()
    vectors: List[Vector] = []
    for start in range(0, len(texts), size):
        batch = list(texts[start : start + size])
        if on_batch is not None:
            on_batch(start + 1, min(start + size, len(texts)), len(texts))
        embedded = provider.embed(batch)
        if len(embedded) != len(batch):
            raise EmbeddingError(f"expected {len(batch)} embeddings, received {len(embedded)}")
        vectors.extend(embedded)
    logger.debug("Embedded %d texts in batches of %d", len(texts), size)
    return vectors
