import json
from datetime import date

import pytest
from click.testing import CliRunner

from impostofacil.cli.main import cli

ARTICLE = """---
title: Split payment
description: Como funciona o split payment
category: transicao
---
# Split payment

""" + "O recolhimento passa a ocorrer na liquidação financeira conforme LC 214/2025. " * 30


@pytest.fixture
def runner(monkeypatch):
    for name in ("DATABASE_URL", "OPENAI_API_KEY", "REDIS_URL"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / "content"
    (root / "transicao").mkdir(parents=True)
    (root / "transicao" / "split-payment.mdx").write_text(ARTICLE, encoding="utf-8")
    return root


def test_ingest_requires_configuration(runner, content_dir) -> None:
    result = runner.invoke(cli, ["ingest", "--content-dir", str(content_dir)])

    assert result.exit_code == 1
    assert "Missing required environment variables: DATABASE_URL, OPENAI_API_KEY" in result.output


def test_ingest_dry_run_reports_chunks(runner, content_dir) -> None:
    result = runner.invoke(cli, ["ingest", "--dry-run", "--content-dir", str(content_dir)])

    assert result.exit_code == 0, result.output
    assert "DRY RUN MODE" in result.output
    assert "Found 1 MDX files" in result.output
    assert "transicao/split-payment.mdx:" in result.output
    assert "Total chunks:" in result.output


def test_ingest_blocks_on_invalid_article(runner, content_dir) -> None:
    (content_dir / "transicao" / "ruim.mdx").write_text("---\ncategory: icms\n---\ntexto", encoding="utf-8")

    result = runner.invoke(cli, ["ingest", "--dry-run", "--content-dir", str(content_dir)])

    assert result.exit_code == 1
    assert "Validation Results: 1/2 valid" in result.output
    assert "Use --force to ingest anyway" in result.output


def test_ingest_empty_directory(runner, tmp_path) -> None:
    result = runner.invoke(cli, ["ingest", "--dry-run", "--content-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "No files to process." in result.output


def test_ingest_rejects_unknown_category(runner, content_dir) -> None:
    result = runner.invoke(cli, ["ingest", "--dry-run", "-c", "icms", "--content-dir", str(content_dir)])

    assert result.exit_code == 2


def test_chunk_stats(runner, content_dir) -> None:
    path = content_dir / "transicao" / "split-payment.mdx"

    result = runner.invoke(cli, ["chunk-stats", str(path), "--max-tokens", "200"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert len(payload["content_hash"]) == 16
    assert payload["original_sections"] == 1
    assert payload["final_chunks"] >= 2


def test_verify_sources_missing_registry(runner, tmp_path) -> None:
    result = runner.invoke(cli, ["verify-sources", "--sources-file", str(tmp_path / "sources.json")])

    assert result.exit_code == 0
    assert "Source registry not found" in result.output


def test_verify_sources_writes_report(runner, tmp_path) -> None:
    registry = {
        "version": "1.0",
        "lastUpdated": "2025-06-01",
        "sources": [
            {"id": "a", "name": "Fonte A", "shortName": "A", "lastChecked": date.today().isoformat()},
            {"id": "b", "name": "Fonte B", "shortName": "B", "lastChecked": "2000-01-01"},
        ],
    }
    sources = tmp_path / "sources.json"
    sources.write_text(json.dumps(registry), encoding="utf-8")
    report = tmp_path / "report.md"

    result = runner.invoke(
        cli, ["verify-sources", "--sources-file", str(sources), "--report", str(report), "--check-urls"]
    )

    assert result.exit_code == 0, result.output
    assert "Warnings: 1" in result.output
    assert "### Warnings" in report.read_text(encoding="utf-8")
    saved = json.loads(sources.read_text(encoding="utf-8"))
    assert saved["lastUpdated"] == date.today().isoformat()
    assert saved["sources"][1]["lastChecked"] == "2000-01-01"


def test_simulate_prints_json(runner) -> None:
    result = runner.invoke(
        cli,
        ["simulate", "--sector", "servicos", "--regime", "lucro_presumido", "--bracket", "360k_4.8m", "--mistakes"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["result"]["annual_impact"]["max"] == 290250
    assert payload["teaser"]["risk_level"] == "critico"
    assert payload["mistakes"][0]["id"] == "regime_errado_lp"


def test_simulate_requires_sector(runner) -> None:
    result = runner.invoke(cli, ["simulate"])

    assert result.exit_code == 2
