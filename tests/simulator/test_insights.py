from __future__ import annotations

import pytest

from impostofacil.simulator.insights import (
    DEFAULT_STATE_INSIGHT,
    get_client_profile_insight,
    get_contextualizer,
    get_payroll_insight,
    get_regime_insight,
    get_revenue_insight,
    get_state_insight,
    get_step_insight,
)
from impostofacil.simulator.models import ClientProfile, Regime, Sector
from impostofacil.simulator.steps import STEP_IDS, StepAnswers
from impostofacil.simulator.tax_data import STATE_INCENTIVE_PROGRAMS


class TestContextualizers:
    def test_every_step_has_one(self):
        for step_id in STEP_IDS:
            assert get_contextualizer(step_id)

    def test_unknown_step_is_empty(self):
        assert get_contextualizer("nao_existe") == ""


class TestStepInsights:
    def test_unanswered_step_has_no_insight(self):
        assert get_step_insight("setor", StepAnswers()) is None
        assert get_step_insight("nao_existe", StepAnswers(sector="servicos")) is None

    def test_sector_insight(self):
        insight = get_step_insight("setor", StepAnswers(sector="servicos"))

        assert insight.headline == "Servicos: o setor mais impactado"
        assert insight.duration_ms == 3500

    def test_state_without_program_gets_default(self):
        assert get_step_insight("uf", StepAnswers(state="SP")) == DEFAULT_STATE_INSIGHT
        assert get_step_insight("uf", StepAnswers(state="am")).headline.startswith("Zona Franca")

    def test_regime_insight_depends_on_sector(self):
        services = get_regime_insight(Regime.PRESUMED_PROFIT, Sector.SERVICES)
        commerce = get_regime_insight(Regime.PRESUMED_PROFIT, Sector.COMMERCE)

        assert services.headline == commerce.headline
        assert "3,65%" in services.detail
        assert services.detail != commerce.detail

    def test_simples_b2b_client_warning(self):
        warning = get_client_profile_insight(ClientProfile.B2B, Regime.SIMPLIFIED)
        plain = get_client_profile_insight(ClientProfile.B2B, Regime.REAL_PROFIT)

        assert warning.emoji == "⚠️"
        assert plain.emoji == "🏢"

    @pytest.mark.parametrize(
        "amount, headline",
        [
            (81_000, "Na faixa MEI"),
            (81_001, "Faixa Microempresa"),
            (4_800_000, "Pequena empresa"),
            (78_000_000, "Media empresa"),
            (78_000_001, "Grande empresa"),
        ],
    )
    def test_revenue_boundaries(self, amount, headline):
        assert get_revenue_insight(amount).headline == headline

    @pytest.mark.parametrize(
        "ratio, headline",
        [(60, "Folha alta = menos creditos"), (50, "Folha moderada"), (25, "Folha baixa = mais creditos")],
    )
    def test_payroll_boundaries(self, ratio, headline):
        assert get_payroll_insight(ratio).headline == headline

    def test_export_answer_false_still_has_insight(self):
        insight = get_step_insight("exporta", StepAnswers(exports_services=False))

        assert insight.headline == "Mercado interno"


def test_every_incentive_state_has_its_own_insight():
    for state in STATE_INCENTIVE_PROGRAMS:
        assert get_state_insight(state) is not DEFAULT_STATE_INSIGHT
