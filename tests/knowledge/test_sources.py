from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from impostofacil.knowledge.sources import (
    SourceRegistry,
    build_verification_report,
    check_url,
    load_registry,
    needs_verification,
    save_registry,
    update_registry,
    verify_sources,
)

TODAY = date(2025, 7, 1)


def _registry():
    return SourceRegistry.model_validate(
        {
            "version": "1.0",
            "lastUpdated": "2025-06-01",
            "sources": [
                {
                    "id": "lc-214",
                    "name": "Lei Complementar 214/2025",
                    "shortName": "LC 214",
                    "url": "https://www.planalto.gov.br/lc214",
                    "publishDate": "2025-01-16",
                    "lastChecked": "2025-06-20",
                    "type": "legislation",
                },
                {
                    "id": "ec-132",
                    "name": "Emenda Constitucional 132/2023",
                    "shortName": "EC 132",
                    "url": "https://www.planalto.gov.br/ec132",
                    "lastChecked": "2025-04-01",
                },
                {
                    "id": "nt-fazenda",
                    "name": "Nota Técnica Ministério da Fazenda",
                    "shortName": "NT Fazenda",
                    "url": "https://www.gov.br/fazenda/nt",
                    "lastChecked": "2025-03-01",
                },
            ],
        }
    )


def _client(statuses):
    def handler(request):
        status = statuses[str(request.url)]
        if status is None:
            raise httpx.ConnectError("unreachable", request=request)
        return httpx.Response(status, headers={"Last-Modified": "Mon, 02 Jun 2025 10:00:00 GMT"})

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFreshness:
    @pytest.mark.parametrize(
        "checked, expected",
        [("2025-06-01", False), ("2025-05-31", True), ("2025-06-20T08:00:00Z", False), ("nunca", True)],
    )
    def test_needs_verification(self, checked, expected):
        entry = _registry().sources[0].model_copy(update={"last_checked": checked})

        assert needs_verification(entry, TODAY) is expected

    def test_without_url_checks_stale_sources_warn(self):
        results = verify_sources(_registry(), TODAY)

        assert [result.status for result in results] == ["ok", "warning", "warning"]
        assert results[0].message == "Recently verified"
        assert results[1].message == "Last verified 2025-04-01 (more than 30 days ago)"


class TestUrlChecks:
    def test_check_url_success(self):
        client = _client({"https://www.planalto.gov.br/lc214": 200})

        check = check_url(client, "https://www.planalto.gov.br/lc214")

        assert check.accessible
        assert check.status == 200
        assert check.last_modified == "Mon, 02 Jun 2025 10:00:00 GMT"

    def test_stale_sources_are_requested(self):
        client = _client({"https://www.planalto.gov.br/ec132": 200, "https://www.gov.br/fazenda/nt": 404})

        results = verify_sources(_registry(), TODAY, check_urls=True, client=client)

        assert [result.status for result in results] == ["ok", "warning", "error"]
        assert results[1].http_status == 200
        assert results[2].message == "URL not accessible (HTTP 404)"

    def test_network_failure(self):
        client = _client({"https://www.planalto.gov.br/ec132": None, "https://www.gov.br/fazenda/nt": 200})

        results = verify_sources(_registry(), TODAY, check_urls=True, client=client)

        assert results[1].status == "error"
        assert results[1].message == "URL not accessible (HTTP failed)"


class TestRegistryUpdates:
    def test_update_registry(self):
        registry = _registry()
        client = _client({"https://www.planalto.gov.br/ec132": 200, "https://www.gov.br/fazenda/nt": 500})
        results = verify_sources(registry, TODAY, check_urls=True, client=client)

        updated = update_registry(registry, results, TODAY)
        by_id = {source.id: source for source in updated.sources}

        assert by_id["lc-214"].last_checked == "2025-07-01"
        assert by_id["ec-132"].last_checked == "2025-07-01"
        assert by_id["nt-fazenda"].last_checked == "2025-03-01"
        assert by_id["nt-fazenda"].status == "unavailable"
        assert updated.last_updated == "2025-07-01"
        assert registry.sources[2].status == "active"

    def test_save_and_load_keep_camel_case(self, tmp_path):
        path = tmp_path / "sources.json"

        save_registry(path, _registry())

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["lastUpdated"] == "2025-06-01"
        assert raw["sources"][0]["shortName"] == "LC 214"
        assert path.read_text(encoding="utf-8").endswith("}\n")
        assert load_registry(path) == _registry()

    def test_missing_registry(self, tmp_path):
        assert load_registry(tmp_path / "nada.json") is None


class TestReport:
    def test_report_groups_errors_before_warnings(self):
        client = _client({"https://www.planalto.gov.br/ec132": 200, "https://www.gov.br/fazenda/nt": 404})
        results = verify_sources(_registry(), TODAY, check_urls=True, client=client)

        report = build_verification_report(results, TODAY)

        assert "Generated: 2025-07-01" in report
        assert "- Total sources: 3" in report
        assert "- Errors: 1" in report
        assert report.index("### Errors") < report.index("### Warnings")
        assert "- **Nota Técnica Ministério da Fazenda**: URL not accessible (HTTP 404)" in report
