from pathlib import Path

import pytest

from impostofacil import config


def test_defaults(monkeypatch) -> None:
    for name in ("IMPOSTOFACIL_CONTENT_DIR", "IMPOSTOFACIL_SOURCES_FILE", "IMPOSTOFACIL_EMBEDDING_BATCH_SIZE"):
        monkeypatch.delenv(name, raising=False)

    assert config.content_dir() == Path("src/content")
    assert config.sources_file() == Path("src/content/sources.json")
    assert config.embedding_batch_size() == 20


def test_sources_file_follows_content_dir(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("IMPOSTOFACIL_SOURCES_FILE", raising=False)
    monkeypatch.setenv("IMPOSTOFACIL_CONTENT_DIR", str(tmp_path))

    assert config.sources_file() == tmp_path / "sources.json"


def test_empty_secrets_are_unset(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")

    assert config.database_url() is None
    assert config.openai_api_key() is None


@pytest.mark.parametrize("raw", ["vinte", "0", "-3"])
def test_invalid_batch_size(monkeypatch, raw) -> None:
    monkeypatch.setenv("IMPOSTOFACIL_EMBEDDING_BATCH_SIZE", raw)

    with pytest.raises(ValueError, match="IMPOSTOFACIL_EMBEDDING_BATCH_SIZE"):
        config.embedding_batch_size()


def test_invalid_snapshot_ttl(monkeypatch) -> None:
    monkeypatch.setenv("IMPOSTOFACIL_SNAPSHOT_TTL_HOURS", "amanha")

    with pytest.raises(ValueError):
        config.snapshot_ttl_hours()
