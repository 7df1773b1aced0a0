from fastapi.testclient import TestClient

from impostofacil.api import app as app_module
from impostofacil.api.app import create_app
from impostofacil.simulator.snapshots import SnapshotCache

GOLDEN = {"sector": "servicos", "regime": "lucro_presumido", "revenue_bracket": "360k_4.8m", "state": "SP"}

client = TestClient(create_app(SnapshotCache(ttl_hours=1)))


def test_health_and_info() -> None:
    assert client.get("/v1/health").json() == {"ok": True, "status": "ok"}

    info = client.get("/v1/info").json()
    assert info["tax_data_last_updated"] == "2025-06-30"
    assert info["version"]


def test_options() -> None:
    response = client.get("/v1/simulator/options")

    assert response.status_code == 200
    body = response.json()
    assert {option["value"] for option in body["regimes"]} == {"simples", "lucro_presumido", "lucro_real", "nao_sei"}
    assert len(body["states"]) == 27


def test_simulate_returns_result_and_teaser() -> None:
    response = client.post("/v1/simulator/simulate", json=GOLDEN)

    assert response.status_code == 200
    body = response.json()
    assert body["result"]["annual_impact"] == {"min": 157500, "max": 290250, "percent": 129}
    assert body["result"]["risk_level"] == "critico"
    assert body["teaser"]["cta_text"] == "Ver relatório de emergência →"
    assert body["snapshot_key"] is None


def test_simulate_rejects_unknown_fields() -> None:
    response = client.post("/v1/simulator/simulate", json={**GOLDEN, "cnpj": "00.000.000/0001-00"})

    assert response.status_code == 422


def test_snapshot_round_trip() -> None:
    saved = client.post("/v1/simulator/simulate", params={"snapshot_key": "visitante-1"}, json=GOLDEN)
    assert saved.json()["snapshot_key"] == "visitante-1"

    snapshot = client.get("/v1/simulator/snapshots/visitante-1")
    assert snapshot.status_code == 200
    assert snapshot.json()["input"]["sector"] == "servicos"
    assert snapshot.json()["teaser"]["risk_level"] == "critico"

    assert client.get("/v1/simulator/snapshots/desconhecido").status_code == 404


def test_module_app_has_no_snapshot_cache_until_startup() -> None:
    assert app_module.app.state.snapshots is None


def test_startup_builds_in_memory_snapshot_cache(monkeypatch) -> None:
    monkeypatch.delenv("REDIS_URL", raising=False)
    application = create_app()

    with TestClient(application) as started:
        assert isinstance(application.state.snapshots, SnapshotCache)
        started.post("/v1/simulator/simulate", params={"snapshot_key": "inicio"}, json=GOLDEN)
        assert started.get("/v1/simulator/snapshots/inicio").status_code == 200

    assert application.state.snapshots is None


def test_snapshot_routes_before_startup_are_unavailable() -> None:
    unstarted = TestClient(create_app())

    assert unstarted.get("/v1/simulator/snapshots/inicio").status_code == 503


def test_common_mistakes() -> None:
    response = client.post("/v1/simulator/common-mistakes", json={"input": GOLDEN, "max_items": 3})

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["mistakes"]] == [
        "regime_errado_lp",
        "nao_reprecificar_servicos",
        "nao_planejar_fluxo_caixa",
    ]
    assert body["chat_context"].startswith("## Erros Comuns do Perfil deste Usuario")


def test_common_mistakes_bounds_max_items() -> None:
    response = client.post("/v1/simulator/common-mistakes", json={"input": GOLDEN, "max_items": 50})

    assert response.status_code == 422


def test_steps_flow() -> None:
    response = client.post(
        "/v1/simulator/steps",
        json={"answers": {"sector": "servicos", "state": "GO"}, "current_step": "uf"},
    )

    assert response.status_code == 200
    body = response.json()
    assert [step["id"] for step in body["steps"]] == [
        "setor",
        "uf",
        "icms",
        "regime",
        "faturamento",
        "folha",
        "custo",
        "clientes",
        "exporta",
    ]
    assert body["progress"] == {"current": 2, "total": 9}
    assert body["insight"]["headline"].startswith("Goias")
    assert body["steps"][0]["contextualizer"]


def test_steps_inactive_current_step_has_no_progress() -> None:
    body = client.post("/v1/simulator/steps", json={"answers": {"state": "SP"}, "current_step": "icms"}).json()

    assert body["progress"] is None
    assert body["insight"] is None


def test_steps_unknown_current_step() -> None:
    response = client.post("/v1/simulator/steps", json={"current_step": "cpf"})

    assert response.status_code == 404


def test_contextualizer_endpoint() -> None:
    response = client.get("/v1/simulator/steps/folha/contextualizer")

    assert response.status_code == 200
    assert response.json()["step_id"] == "folha"
    assert client.get("/v1/simulator/steps/cpf/contextualizer").status_code == 404


def test_simulate_without_snapshot_works_before_startup() -> None:
    unstarted = TestClient(create_app())

    assert unstarted.post("/v1/simulator/simulate", json=GOLDEN).status_code == 200
