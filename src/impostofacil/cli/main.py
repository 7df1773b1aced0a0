"""Command-line interface for impostofacil."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Tuple

import click

from impostofacil import config
from impostofacil.caching.ttl_cache import TTLCache
from impostofacil.db.session import create_db_engine, create_session_factory
from impostofacil.knowledge.chunker import get_chunking_stats
from impostofacil.knowledge.embeddings import CachedEmbeddingProvider, OpenAIEmbeddingProvider
from impostofacil.knowledge.errors import KnowledgeBaseError
from impostofacil.knowledge.frontmatter import parse_document
from impostofacil.knowledge.ingest import IngestionOptions, Ingestor, format_ingestion_summary
from impostofacil.knowledge.models import CATEGORIES, DEFAULT_CHUNKING_OPTIONS, ChunkingOptions
from impostofacil.knowledge.sources import (
    build_verification_report,
    count_by_status,
    load_registry,
    save_registry,
    update_registry,
    verify_sources,
)
from impostofacil.knowledge.store import SqlChunkStore
from impostofacil.knowledge.validator import format_validation_results
from impostofacil.observability import new_run_id, redact_secret
from impostofacil.simulator.calculator import calculate, generate_teaser
from impostofacil.simulator.common_mistakes import get_common_mistakes
from impostofacil.simulator.models import ClientProfile, CostType, Regime, RevenueBracket, Sector, SimulatorInput

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _choices(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


@click.group()
def cli() -> None:
    """Reform impact simulator and knowledge-base tooling."""


# -----------------------------------------------------------------------------
# Knowledge base
# -----------------------------------------------------------------------------
@cli.command("ingest")
@click.option("--dry-run", is_flag=True, help="Preview changes without writing to the database.")
@click.option("--force", is_flag=True, help="Re-ingest everything and ignore validation failures.")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed progress.")
@click.option(
    "--category",
    "-c",
    "categories",
    multiple=True,
    type=click.Choice(CATEGORIES),
    help="Only ingest this category (repeatable).",
)
@click.option(
    "--content-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Content root (defaults to IMPOSTOFACIL_CONTENT_DIR).",
)
def ingest(dry_run: bool, force: bool, verbose: bool, categories: Tuple[str, ...], content_dir: Optional[Path]) -> None:
    """Validate, chunk, embed and store knowledge-base articles."""

    _configure_logging(verbose)
    root = content_dir or config.content_dir()
    if not root.is_dir():
        raise click.ClickException(f"Content directory not found: {root}")

    database_url = config.database_url()
    api_key = config.openai_api_key()
    if not dry_run:
        missing = [name for name, value in (("DATABASE_URL", database_url), ("OPENAI_API_KEY", api_key)) if not value]
        if missing:
            raise click.ClickException("Missing required environment variables: " + ", ".join(missing))

    store = None
    if database_url:
        logger.info("Using chunk store at %s", redact_secret(database_url))
        store = SqlChunkStore(create_session_factory(create_db_engine(database_url)))
    provider = None
    if api_key:
        provider = CachedEmbeddingProvider(OpenAIEmbeddingProvider(api_key=api_key), TTLCache())

    if dry_run:
        click.echo("DRY RUN MODE - no changes will be made")

    ingestor = Ingestor(content_dir=root, store=store, provider=provider)
    try:
        report = ingestor.run(IngestionOptions(dry_run=dry_run, force=force, categories=tuple(categories)))
    except KnowledgeBaseError as exc:
        raise click.ClickException(f"Fatal error: {exc}") from exc

    click.echo(f"Found {len(report.files)} MDX files")
    if not report.files:
        click.echo("No files to process.")
        return

    if report.invalid_count or verbose:
        click.echo(format_validation_results(report.validation))
    if report.blocked:
        click.echo(
            f"{report.invalid_count} file(s) failed validation. Use --force to ingest anyway.",
            err=True,
        )
        raise SystemExit(1)
    if report.invalid_count:
        click.echo(f"Continuing despite {report.invalid_count} validation errors (--force)")

    if report.dry_run_chunks is not None:
        click.echo("Dry run statistics:")
        for path, chunks in report.dry_run_chunks.items():
            click.echo(f"   {path}: {chunks} chunks")
        click.echo(f"   Total chunks: {sum(report.dry_run_chunks.values())}")
        return

    click.echo(format_ingestion_summary(report))
    if dry_run:
        click.echo("Run without --dry-run to apply changes")


@cli.command("chunk-stats")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-tokens", type=click.IntRange(min=1), default=DEFAULT_CHUNKING_OPTIONS.max_tokens, show_default=True)
@click.option(
    "--overlap-tokens", type=click.IntRange(min=0), default=DEFAULT_CHUNKING_OPTIONS.overlap_tokens, show_default=True
)
@click.option("--no-preserve-sections", is_flag=True, help="Skip merging of small sections.")
def chunk_stats(file: Path, max_tokens: int, overlap_tokens: int, no_preserve_sections: bool) -> None:
    """Print chunking statistics for one article as JSON."""

    try:
        document = parse_document(file)
    except KnowledgeBaseError as exc:
        raise click.ClickException(str(exc)) from exc
    options = ChunkingOptions(
        max_tokens=max_tokens,
        overlap_tokens=overlap_tokens,
        preserve_sections=not no_preserve_sections,
    )
    payload = {
        "file": str(file),
        "content_hash": document.content_hash,
        **get_chunking_stats(document.body, options).to_dict(),
    }
    click.echo(json.dumps(payload, indent=2))


@cli.command("verify-sources")
@click.option("--check-urls", is_flag=True, help="Request stale source URLs and update the registry.")
@click.option("--report", "report_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--sources-file", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--verbose", "-v", is_flag=True)
def verify_sources_command(
    check_urls: bool, report_path: Optional[Path], sources_file: Optional[Path], verbose: bool
) -> None:
    """Check the freshness (and optionally reachability) of cited sources."""

    _configure_logging(verbose)
    new_run_id()
    path = sources_file or config.sources_file()
    registry = load_registry(path)
    if registry is None:
        click.echo(f"Source registry not found: {path}")
        return

    today = date.today()
    click.echo(f"Found {len(registry.sources)} sources (last updated {registry.last_updated})")
    results = verify_sources(registry, today, check_urls=check_urls)

    errors = count_by_status(results, "error")
    click.echo(f"   OK: {count_by_status(results, 'ok')}")
    click.echo(f"   Warnings: {count_by_status(results, 'warning')}")
    click.echo(f"   Errors: {errors}")

    if report_path is not None:
        report_path.write_text(build_verification_report(results, today), encoding="utf-8")
        click.echo(f"Report saved to: {report_path}")

    if check_urls:
        save_registry(path, update_registry(registry, results, today))
        click.echo("Registry updated with new check dates")

    if errors:
        raise SystemExit(1)


# -----------------------------------------------------------------------------
# Simulator
# -----------------------------------------------------------------------------
@cli.command("simulate")
@click.option("--sector", type=_choices(Sector), required=True)
@click.option("--regime", type=_choices(Regime), default=Regime.UNKNOWN.value, show_default=True)
@click.option("--bracket", type=_choices(RevenueBracket), default=None)
@click.option("--state", default="", help="Two-letter state code (UF).")
@click.option("--exact-revenue", type=click.FloatRange(min=0), default=None)
@click.option("--payroll-ratio", type=click.FloatRange(0, 100), default=None)
@click.option("--cost-type", type=_choices(CostType), default=None)
@click.option("--client-profile", type=_choices(ClientProfile), default=None)
@click.option("--b2b-percent", type=click.FloatRange(0, 100), default=None)
@click.option("--state-incentive", type=click.Choice(["sim", "nao", "nao_sei"]), default=None)
@click.option("--exports/--no-exports", "exports_services", default=None)
@click.option("--mistakes", "with_mistakes", is_flag=True, help="Include matched common mistakes.")
def simulate(
    sector: str,
    regime: str,
    bracket: Optional[str],
    state: str,
    exact_revenue: Optional[float],
    payroll_ratio: Optional[float],
    cost_type: Optional[str],
    client_profile: Optional[str],
    b2b_percent: Optional[float],
    state_incentive: Optional[str],
    exports_services: Optional[bool],
    with_mistakes: bool,
) -> None:
    """Simulate the reform impact for one profile and print JSON."""

    data = SimulatorInput(
        sector=sector,
        regime=regime,
        revenue_bracket=bracket,
        state=state,
        exact_revenue=exact_revenue,
        payroll_ratio=payroll_ratio,
        cost_type=cost_type,
        client_profile=client_profile,
        b2b_percent=b2b_percent,
        has_state_incentive=state_incentive,
        exports_services=exports_services,
    )
    result = calculate(data)
    payload = {
        "input": data.model_dump(mode="json"),
        "result": result.model_dump(mode="json"),
        "teaser": generate_teaser(result, data).model_dump(mode="json"),
    }
    if with_mistakes:
        payload["mistakes"] = [item.model_dump(mode="json") for item in get_common_mistakes(data, result)]
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
