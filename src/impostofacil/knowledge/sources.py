"""Freshness and reachability checks for the cited-source registry.

The registry is a JSON file (``sources.json``) listing every official
document the articles cite. A source is due for review once its
``lastChecked`` date is more than :data:`MAX_AGE_DAYS` old.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import List, Literal, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

MAX_AGE_DAYS = 30
USER_AGENT = "ImpostoFacil Source Verifier/1.0"

VerificationStatus = Literal["ok", "warning", "error"]


class SourceEntry(BaseModel):
    id: str
    name: str
    short_name: str = Field(alias="shortName")
    url: str = ""
    publish_date: str = Field(default="", alias="publishDate")
    last_checked: str = Field(alias="lastChecked")
    status: Literal["active", "outdated", "unavailable"] = "active"
    type: Literal["legislation", "regulation", "guidance", "official"] = "official"

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class SourceRegistry(BaseModel):
    version: str
    last_updated: str = Field(alias="lastUpdated")
    sources: List[SourceEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


@dataclass(frozen=True)
class UrlCheck:
    accessible: bool
    status: Optional[int] = None
    last_modified: Optional[str] = None


@dataclass(frozen=True)
class VerificationResult:
    source: SourceEntry
    status: VerificationStatus
    message: str
    http_status: Optional[int] = None
    last_modified: Optional[str] = None


def load_registry(path: Path) -> Optional[SourceRegistry]:
    """Read the registry, or ``None`` when the file does not exist."""

    if not path.exists():
        return None
    return SourceRegistry.model_validate(json.loads(path.read_text(encoding="utf-8")))


def save_registry(path: Path, registry: SourceRegistry) -> None:
    payload = registry.model_dump(mode="json", by_alias=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def needs_verification(entry: SourceEntry, today: date, max_age_days: int = MAX_AGE_DAYS) -> bool:
    try:
        last_checked = date.fromisoformat(entry.last_checked[:10])
    except ValueError:
        return True
    return last_checked < today - timedelta(days=max_age_days)


def check_url(client: httpx.Client, url: str) -> UrlCheck:
    try:
        response = client.head(url, headers={"User-Agent": USER_AGENT})
    except httpx.HTTPError as exc:
        logger.info("HEAD %s failed: %s", url, exc)
        return UrlCheck(accessible=False)
    return UrlCheck(
        accessible=response.is_success,
        status=response.status_code,
        last_modified=response.headers.get("last-modified"),
    )


def verify_sources(
    registry: SourceRegistry,
    today: date,
    check_urls: bool = False,
    client: Optional[httpx.Client] = None,
) -> List[VerificationResult]:
    """Classify every source as ok, stale (warning) or unreachable (error).

    URLs are only requested for stale sources and only when ``check_urls``.
    """

    owns_client = check_urls and client is None
    if owns_client:
        client = httpx.Client(follow_redirects=True, timeout=15.0)
    try:
        results: List[VerificationResult] = []
        for source in registry.sources:
            logger.info("Checking %s", source.short_name)
            if not needs_verification(source, today):
                results.append(VerificationResult(source=source, status="ok", message="Recently verified"))
                continue

            status: VerificationStatus = "warning"
            message = f"Last verified {source.last_checked} (more than {MAX_AGE_DAYS} days ago)"
            check = UrlCheck(accessible=True)
            if check_urls and source.url:
                check = check_url(client, source.url)
                if not check.accessible:
                    status = "error"
                    message = f"URL not accessible (HTTP {check.status or 'failed'})"
            results.append(
                VerificationResult(
                    source=source,
                    status=status,
                    message=message,
                    http_status=check.status,
                    last_modified=check.last_modified,
                )
            )
        return results
    finally:
        if owns_client:
            client.close()


def count_by_status(results: List[VerificationResult], status: VerificationStatus) -> int:
    return sum(1 for result in results if result.status == status)


def build_verification_report(results: List[VerificationResult], generated: date) -> str:
    lines = [
        "# Source Verification Report",
        "",
        f"Generated: {generated.isoformat()}",
        "",
        "## Summary",
        "",
        f"- Total sources: {len(results)}",
        f"- OK: {count_by_status(results, 'ok')}",
        f"- Warnings: {count_by_status(results, 'warning')}",
        f"- Errors: {count_by_status(results, 'error')}",
        "",
        "## Details",
        "",
    ]
    for heading, status in (("Errors", "error"), ("Warnings", "warning")):
        group = [result for result in results if result.status == status]
        if not group:
            continue
        lines.extend([f"### {heading}", ""])
        for result in group:
            lines.append(f"- **{result.source.name}**: {result.message}")
            lines.append(f"  - URL: {result.source.url}")
            lines.append(f"  - Last checked: {result.source.last_checked}")
            lines.append("")
    return "\n".join(lines)


def update_registry(registry: SourceRegistry, results: List[VerificationResult], today: date) -> SourceRegistry:
    """Return a copy with check dates and availability reflecting ``results``.

    Sources that were fine or answered HTTP 200 get ``lastChecked = today``;
    unreachable ones are marked ``unavailable``.
    """

    updated = registry.model_copy(deep=True)
    by_id = {source.id: source for source in updated.sources}
    stamp = today.isoformat()
    for result in results:
        source = by_id.get(result.source.id)
        if source is None:
            continue
        if result.status == "ok" or result.http_status == 200:
            source.last_checked = stamp
        if result.status == "error":
            source.status = "unavailable"
    updated.last_updated = stamp
    return updated
