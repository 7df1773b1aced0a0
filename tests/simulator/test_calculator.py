"""Calculator behaviour on golden profiles and edge cases."""

from __future__ import annotations

import pytest

from impostofacil.simulator.calculator import (
    FULL_CHECKLIST,
    build_state_icms_adjustment,
    calculate,
    classify_risk,
    compute_impact,
    formalization_pressure,
    generate_teaser,
    resolve_bracket,
    score_profile_confidence,
)
from impostofacil.simulator.models import Regime, RevenueBracket, Sector, SimulatorInput


def _services_presumed(**overrides) -> SimulatorInput:
    payload = {
        "regime": "lucro_presumido",
        "sector": "servicos",
        "revenue_bracket": "360k_4.8m",
        "state": "SP",
    }
    payload.update(overrides)
    return SimulatorInput(**payload)


# =====================================================================
# Impact figures
# =====================================================================
class TestImpact:
    def test_services_presumed_epp_golden(self):
        result = calculate(_services_presumed())

        assert result.annual_impact.min == 157_500
        assert result.annual_impact.max == 290_250
        assert result.annual_impact.percent == 129
        assert result.risk_level == "critico"

    def test_deltas_pair_best_and_worst_case_crosswise(self):
        impact = compute_impact(_services_presumed())

        # new.min - current.max, not new.min - current.min (245_250)
        assert impact.delta_min == 375_000 - 217_500
        assert impact.delta_max == 420_000 - 129_750
        assert impact.delta_min <= impact.delta_max

    def test_exact_revenue_overrides_bracket_midpoint(self):
        impact = compute_impact(_services_presumed(exact_revenue=1_000_000))

        assert impact.revenue == 1_000_000
        assert impact.delta_min == 250_000 - 145_000

    def test_missing_bracket_derives_from_exact_revenue(self):
        data = SimulatorInput(sector="comercio", regime="simples", exact_revenue=50_000)

        assert resolve_bracket(data) is RevenueBracket.MEI

    def test_missing_bracket_and_revenue_falls_back_to_epp(self):
        data = SimulatorInput(sector="comercio", regime="lucro_real")
        result = calculate(data)

        assert resolve_bracket(data) is RevenueBracket.EPP
        assert any("faixa EPP" in item for item in result.methodology.limitations)

    def test_simplified_regime_scales_new_burden(self):
        impact = compute_impact(SimulatorInput(sector="comercio", regime="simples", revenue_bracket="81k_360k"))

        assert impact.adjustment == pytest.approx(0.4)
        # 200k * 24% * 0.4 - 200k * 11.5%
        assert impact.delta_min == 19_200 - 23_000

    def test_unknown_values_degrade_instead_of_failing(self):
        data = SimulatorInput(sector="mineracao", regime="mei", revenue_bracket="bilhoes")

        assert data.sector is Sector.OTHER
        assert data.regime is Regime.UNKNOWN
        assert data.revenue_bracket is None
        assert calculate(data).methodology.confidence == "baixa"


# =====================================================================
# Risk, alerts and narrative content
# =====================================================================
class TestNarrative:
    @pytest.mark.parametrize(
        "percent, sector, regime, expected",
        [
            (51, Sector.SERVICES, Regime.PRESUMED_PROFIT, "critico"),
            (51, Sector.COMMERCE, Regime.PRESUMED_PROFIT, "alto"),
            (101, Sector.COMMERCE, Regime.REAL_PROFIT, "critico"),
            (21, Sector.COMMERCE, Regime.REAL_PROFIT, "medio"),
            (20, Sector.COMMERCE, Regime.REAL_PROFIT, "baixo"),
            (-40, Sector.HEALTH, Regime.REAL_PROFIT, "baixo"),
        ],
    )
    def test_classify_risk(self, percent, sector, regime, expected):
        assert classify_risk(percent, sector, regime) == expected

    def test_alerts_always_end_with_timeline_reminders(self):
        alerts = calculate(_services_presumed()).alerts

        assert alerts[0].startswith("⚠️ Setor de serviços em Lucro Presumido")
        assert any("migração para Lucro Real" in alert for alert in alerts)
        assert alerts[-2].startswith("⏰ 2026")
        assert alerts[-1].startswith("💳 Split payment")

    def test_agribusiness_gets_icms_credit_date_first(self):
        result = calculate(SimulatorInput(sector="agronegocio", regime="lucro_real", revenue_bracket="4.8m_78m"))

        assert result.key_dates[0].date == "2026-2027"
        assert result.key_dates[0].urgency == "danger"
        assert len(result.key_dates) == 5

    def test_gated_content_always_present(self):
        result = calculate(SimulatorInput(sector="comercio", regime="simples", revenue_bracket="ate_81k"))
        gated = result.gated_content

        assert gated.full_checklist == list(FULL_CHECKLIST)
        assert gated.regime_comparison is False
        assert [row.year for row in gated.yearly_projection] == list(range(2026, 2034))
        assert gated.regime_analysis.suggested_regime is None


# =====================================================================
# Gated analyses
# =====================================================================
class TestGatedAnalyses:
    def test_presumed_profit_migration_suggestion(self):
        analysis = calculate(_services_presumed()).gated_content.regime_analysis

        assert analysis.current_regime == "Lucro Presumido"
        assert analysis.suggested_regime == "Lucro Real"
        assert analysis.estimated_savings == 99_375
        assert "99.375" in analysis.justification

    def test_no_migration_below_threshold(self):
        data = SimulatorInput(sector="saude", regime="lucro_presumido", revenue_bracket="360k_4.8m")
        analysis = calculate(data).gated_content.regime_analysis

        assert analysis.suggested_regime is None
        assert analysis.estimated_savings is None
        assert "manter regime atual" in analysis.factors[3]

    def test_projection_converges_to_full_new_burden(self):
        projection = calculate(_services_presumed()).gated_content.yearly_projection

        final = projection[-1]
        assert final.year == 2033
        assert final.estimated_burden == 397_500
        assert final.difference_vs_current == 397_500 - 173_625
        assert projection[0].estimated_burden < final.estimated_burden

    def test_tax_effectiveness_split(self):
        effectiveness = calculate(_services_presumed()).gated_content.tax_effectiveness

        assert effectiveness.effectiveness_factor == pytest.approx(0.75)
        assert effectiveness.statutory_burden_pct == pytest.approx(11.58, abs=0.01)
        assert effectiveness.effective_burden_pct == pytest.approx(8.68)
        assert effectiveness.rate_change_impact == 223_875
        assert effectiveness.formalization_impact == 43_406
        assert effectiveness.total_estimated_impact == 223_875 + 43_406
        assert effectiveness.formalization_pressure == "alta"

    @pytest.mark.parametrize(
        "factor, expected",
        [(0.95, "baixa"), (0.85, "moderada"), (0.75, "alta"), (0.60, "muito_alta")],
    )
    def test_formalization_pressure_tiers(self, factor, expected):
        assert formalization_pressure(factor) == expected


# =====================================================================
# State ICMS adjustment and profile confidence
# =====================================================================
class TestEnrichment:
    def test_icms_adjustment_for_goods_sector(self):
        adjustment = build_state_icms_adjustment(
            SimulatorInput(sector="comercio", regime="lucro_real", state="RJ")
        )

        assert adjustment is not None
        assert adjustment.state_rate == 22
        assert adjustment.reference_rate == 19
        assert adjustment.adjustment_pp == pytest.approx(0.9)
        assert adjustment.direction == "favoravel"

    def test_icms_adjustment_negative_gap(self):
        adjustment = build_state_icms_adjustment(
            SimulatorInput(sector="comercio", regime="lucro_presumido", state="sp")
        )

        assert adjustment.direction == "desfavoravel"
        assert adjustment.adjustment_pp == pytest.approx(-0.3)

    @pytest.mark.parametrize(
        "payload",
        [
            {"sector": "comercio", "regime": "simples", "state": "RJ"},
            {"sector": "servicos", "regime": "lucro_real", "state": "RJ"},
            {"sector": "comercio", "regime": "lucro_real", "state": ""},
            {"sector": "comercio", "regime": "lucro_real", "state": "XX"},
        ],
    )
    def test_icms_adjustment_not_applicable(self, payload):
        assert build_state_icms_adjustment(SimulatorInput(**payload)) is None

    def test_profile_confidence_full_and_empty(self):
        full = SimulatorInput(
            sector="industria",
            regime="lucro_real",
            revenue_bracket="4.8m_78m",
            state="GO",
            exact_revenue=10_000_000,
            payroll_ratio=25,
            cost_type="materiais",
            client_profile="b2b",
            has_state_incentive="sim",
        )

        assert score_profile_confidence(full) == 100
        assert score_profile_confidence(SimulatorInput()) == 0

    def test_client_profile_implies_b2b_share(self):
        assert SimulatorInput(client_profile="b2c").effective_b2b_percent() == 15
        assert SimulatorInput(client_profile="b2c", b2b_percent=42).effective_b2b_percent() == 42


# =====================================================================
# Methodology and teaser
# =====================================================================
class TestMethodologyAndTeaser:
    def test_methodology_sources_are_unique(self):
        methodology = calculate(_services_presumed(state="GO")).methodology

        assert len(methodology.sources) == len(set(methodology.sources))
        assert "EC 132/2023, ADCT art. 133 + Lei Estadual GO 13.591/2000" in methodology.sources
        assert methodology.last_updated == "2025-06-30"

    def test_teaser_for_increase(self):
        teaser = generate_teaser(calculate(_services_presumed()))

        assert teaser.impact_summary == "Sua empresa pode pagar até R$ 290.250 a mais por ano"
        assert teaser.risk_level == "critico"
        assert teaser.cta_text == "Ver relatório de emergência →"
        assert teaser.main_alert.startswith("⚠️")

    def test_teaser_for_saving(self):
        result = calculate(SimulatorInput(sector="saude", regime="simples", revenue_bracket="ate_81k"))
        teaser = generate_teaser(result)

        assert result.annual_impact.max <= 0
        assert teaser.impact_summary == "Sua empresa pode economizar até R$ 6.900 por ano"
        assert teaser.main_alert.startswith("📋")

    def test_teaser_accepts_the_input(self):
        data = _services_presumed()
        result = calculate(data)

        assert generate_teaser(result, data) == generate_teaser(result)

    def test_calculation_is_deterministic(self):
        data = _services_presumed(payroll_ratio=40, client_profile="misto")

        assert calculate(data) == calculate(data)
