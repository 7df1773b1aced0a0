"""Reform impact calculator.

Compares the current tax burden of a business profile with the projected
IBS/CBS burden:

  current = revenue * current% (regime, sector)
  new     = revenue * new% (sector) * regime_adjustment (regime)

Best/worst-case deltas are paired crosswise (new.min - current.max and
new.max - current.min) to produce a conservative spread, while the
percentage change compares the averages. Everything is deterministic: no
clock, no randomness, no I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from impostofacil.simulator import tax_data
from impostofacil.simulator.models import (
    DEFAULT_REVENUE_BRACKET,
    AnnualImpactModel,
    FormalizationPressure,
    GatedContentModel,
    KeyDateModel,
    MethodologyModel,
    Regime,
    RegimeAnalysisModel,
    RevenueBracket,
    RiskLevel,
    Sector,
    SimulatorInput,
    SimulatorResult,
    SimulatorTeaser,
    StateIcmsAdjustmentModel,
    TaxEffectivenessModel,
    YearProjectionModel,
)
from impostofacil.simulator.options import (
    REGIME_LABELS,
    SECTOR_LABELS,
    derive_revenue_bracket,
    format_brl,
    round_half_up,
)

logger = logging.getLogger(__name__)

# Migration to real profit is suggested above this percentage change.
REGIME_MIGRATION_THRESHOLD_PCT = 30
# ... and only when the saving exceeds this share of revenue.
REGIME_MIGRATION_MIN_SAVING_SHARE = 0.01

FULL_CHECKLIST = (
    "Atualizar sistema de emissão de NF-e para incluir campos IBS e CBS",
    "Revisar todos os contratos de longo prazo para cláusulas de reajuste tributário",
    "Mapear produtos/serviços e identificar alíquotas diferenciadas aplicáveis",
    "Simular fluxo de caixa com split payment (retenção automática na liquidação)",
    "Configurar sistema contábil para apuração dual (período de transição)",
)

DETAILED_ANALYSIS = "Análise completa do impacto por linha de produto/serviço"

_CTA_BY_RISK = {
    "critico": "Ver relatório de emergência →",
    "alto": "Ver relatório completo →",
    "medio": "Ver análise detalhada →",
    "baixo": "Ver oportunidades →",
}

_NO_BRACKET_LIMITATION = "Faixa de faturamento não informada: simulação usa a faixa EPP como referência"


@dataclass(frozen=True)
class ImpactFigures:
    revenue: float
    current: tax_data.BurdenRange
    new: tax_data.BurdenRange
    adjustment: float
    delta_min: int
    delta_max: int
    percent: int


def resolve_bracket(data: SimulatorInput) -> RevenueBracket:
    if data.revenue_bracket is not None:
        return data.revenue_bracket
    if data.exact_revenue:
        return derive_revenue_bracket(data.exact_revenue)
    return DEFAULT_REVENUE_BRACKET


def resolve_revenue(data: SimulatorInput) -> float:
    """Exact revenue when supplied, else the cited midpoint of the bracket."""

    if data.exact_revenue:
        return float(data.exact_revenue)
    return float(tax_data.revenue_midpoint(resolve_bracket(data)).value)


def compute_impact(data: SimulatorInput) -> ImpactFigures:
    revenue = resolve_revenue(data)
    current: tax_data.BurdenRange = tax_data.current_burden(data.regime, data.sector).value
    new: tax_data.BurdenRange = tax_data.new_burden(data.sector).value
    adjustment = float(tax_data.regime_adjustment(data.regime).value)

    current_min = revenue * current.min / 100
    current_max = revenue * current.max / 100
    current_avg = (current_min + current_max) / 2

    new_min = revenue * new.min / 100 * adjustment
    new_max = revenue * new.max / 100 * adjustment
    new_avg = (new_min + new_max) / 2

    delta_min = new_min - current_max
    delta_max = new_max - current_min
    percent = (new_avg - current_avg) / current_avg * 100 if current_avg > 0 else 0.0

    return ImpactFigures(
        revenue=revenue,
        current=current,
        new=new,
        adjustment=adjustment,
        delta_min=round_half_up(delta_min),
        delta_max=round_half_up(delta_max),
        percent=round_half_up(percent),
    )


def classify_risk(percent: float, sector: Sector, regime: Regime) -> RiskLevel:
    if sector is Sector.SERVICES and regime is Regime.PRESUMED_PROFIT and percent > 50:
        return "critico"
    if percent > 100:
        return "critico"
    if percent > 50:
        return "alto"
    if percent > 20:
        return "medio"
    return "baixo"


def build_alerts(data: SimulatorInput, percent: float) -> List[str]:
    alerts: List[str] = []
    if data.sector is Sector.SERVICES and data.regime is Regime.PRESUMED_PROFIT:
        alerts.append("⚠️ Setor de serviços em Lucro Presumido: você está no grupo de maior impacto negativo")
    if data.sector is Sector.AGRIBUSINESS:
        alerts.append("🌾 Verifique seus créditos de ICMS acumulados antes que o imposto seja extinto")
    if data.regime is Regime.SIMPLIFIED:
        alerts.append(
            "📋 Empresas do Simples podem perder competitividade em vendas B2B (clientes não aproveitam crédito)"
        )
    if data.regime is Regime.PRESUMED_PROFIT and percent > REGIME_MIGRATION_THRESHOLD_PCT:
        alerts.append("🔄 Considere avaliar migração para Lucro Real: pode gerar economia com a reforma")
    alerts.append("⏰ 2026 é o ano de teste: aproveite para adaptar seus sistemas sem penalidades severas")
    alerts.append("💳 Split payment começa em 2027: prepare seu fluxo de caixa")
    return alerts


def build_key_dates(data: SimulatorInput) -> List[KeyDateModel]:
    dates = [
        KeyDateModel(
            date="2026",
            description="Ano de teste: CBS 0,9% e IBS 0,1% destacados em NF (sem recolhimento efetivo)",
            urgency="warning",
        ),
        KeyDateModel(
            date="Janeiro 2027",
            description="CBS entra em vigor definitivamente + Split Payment + Extinção do PIS/Cofins",
            urgency="danger",
        ),
        KeyDateModel(date="2029", description="Início da extinção gradual do ICMS e ISS", urgency="info"),
        KeyDateModel(date="2033", description="Sistema novo totalmente implementado", urgency="info"),
    ]
    if data.sector is Sector.AGRIBUSINESS:
        dates.insert(
            0,
            KeyDateModel(
                date="2026-2027",
                description="Prazo para recuperar créditos de ICMS acumulados",
                urgency="danger",
            ),
        )
    return dates


def build_actions(data: SimulatorInput) -> List[str]:
    actions = [
        "Atualizar sistema de emissão de notas fiscais para novos campos (IBS, CBS)",
        "Simular fluxo de caixa considerando split payment em 2027",
        "Revisar contratos de longo prazo para cláusulas de reajuste tributário",
        "Mapear produtos e serviços com alíquotas diferenciadas",
    ]
    if data.regime is Regime.PRESUMED_PROFIT:
        actions.append("Avaliar comparativo Lucro Presumido vs Lucro Real no novo sistema")
    if data.sector is Sector.SERVICES:
        actions.append("Revisar estrutura de custos: folha de pagamento não gerará crédito")
        actions.append("Considerar estratégias de precificação com nova carga tributária")
    if data.regime is Regime.SIMPLIFIED:
        actions.append("Avaliar impacto em vendas B2B: clientes podem preferir fornecedores fora do Simples")
    return actions


def build_yearly_projection(data: SimulatorInput, impact: ImpactFigures) -> List[YearProjectionModel]:
    """Blend old and new burdens by the share of IBS+CBS already phased in."""

    full_rate = float(tax_data.REFERENCE_COMBINED_RATE.value)
    current_avg = impact.current.average
    new_avg = impact.new.average * impact.adjustment
    current_tax = impact.revenue * current_avg / 100

    projection = []
    for entry in tax_data.TRANSITION_TIMELINE:
        share = min((entry.ibs_pct + entry.cbs_pct) / full_rate, 1.0)
        blended = current_avg * (1 - share) + new_avg * share
        estimated = impact.revenue * blended / 100
        projection.append(
            YearProjectionModel(
                year=entry.year,
                ibs_rate=entry.ibs_pct,
                cbs_rate=entry.cbs_pct,
                estimated_burden=round_half_up(estimated),
                difference_vs_current=round_half_up(estimated - current_tax),
                description=entry.description,
            )
        )
    return projection


def build_regime_analysis(data: SimulatorInput, impact: ImpactFigures) -> RegimeAnalysisModel:
    if data.regime is Regime.SIMPLIFIED:
        return RegimeAnalysisModel(
            current_regime=REGIME_LABELS[Regime.SIMPLIFIED],
            justification=(
                "O Simples Nacional mantém regime próprio na reforma. A principal preocupação é a perda de "
                "competitividade em vendas B2B, já que clientes não poderão aproveitar créditos de IBS/CBS "
                "nas compras do Simples."
            ),
            factors=[
                "Simples mantém regime diferenciado na reforma",
                "Clientes PJ não aproveitam créditos em compras do Simples",
                "Pode perder vendas B2B para concorrentes no regime normal",
                "Avalie se o faturamento justifica migração para regime normal",
            ],
        )

    if data.regime is Regime.PRESUMED_PROFIT:
        presumed = tax_data.current_burden(Regime.PRESUMED_PROFIT, data.sector).value
        real = tax_data.current_burden(Regime.REAL_PROFIT, data.sector).value
        new_avg_share = impact.new.average / 100
        presumed_cost = impact.revenue * new_avg_share * tax_data.regime_adjustment(Regime.PRESUMED_PROFIT).value
        real_cost = impact.revenue * new_avg_share * tax_data.regime_adjustment(Regime.REAL_PROFIT).value
        saving = round_half_up(presumed_cost - real_cost)
        migrate = (
            impact.percent > REGIME_MIGRATION_THRESHOLD_PCT
            and saving > impact.revenue * REGIME_MIGRATION_MIN_SAVING_SHARE
        )
        if migrate:
            justification = (
                "Com a reforma, o Lucro Real permite aproveitamento pleno de créditos de IBS/CBS. Para seu "
                f"perfil, a economia estimada seria de R$ {format_brl(saving)}/ano."
            )
        else:
            justification = (
                "Para seu perfil, a diferença entre os regimes é pequena no novo sistema. Mantenha o Lucro "
                "Presumido pela simplicidade operacional."
            )
        return RegimeAnalysisModel(
            current_regime=REGIME_LABELS[Regime.PRESUMED_PROFIT],
            suggested_regime=REGIME_LABELS[Regime.REAL_PROFIT] if migrate else None,
            estimated_savings=saving if migrate else None,
            justification=justification,
            factors=[
                "Lucro Real permite crédito pleno de IBS e CBS",
                f"Carga atual estimada: {presumed.average:.1f}%",
                f"Carga no Lucro Real: {real.average:.1f}%",
                "Recomendação: avalie migração com seu contador" if migrate else "Recomendação: manter regime atual",
                "Lucro Real exige escrituração contábil completa",
            ],
        )

    if data.regime is Regime.REAL_PROFIT:
        return RegimeAnalysisModel(
            current_regime=REGIME_LABELS[Regime.REAL_PROFIT],
            justification=(
                "O Lucro Real é o regime que mais se beneficia da reforma por permitir aproveitamento pleno de "
                "créditos. Mantenha o foco em documentar bem todos os insumos para maximizar os créditos de "
                "IBS e CBS."
            ),
            factors=[
                "Lucro Real já é o regime mais vantajoso para créditos",
                "Foco deve ser em maximizar documentação de insumos",
                "Split payment automatiza parte da apuração",
                "Transição tende a ser mais suave neste regime",
            ],
        )

    return RegimeAnalysisModel(
        current_regime=REGIME_LABELS[Regime.UNKNOWN],
        justification=(
            "Sem informação do regime atual, não é possível fazer uma comparação precisa. Recomendamos que "
            "consulte seu contador para identificar seu regime e simule novamente."
        ),
        factors=[
            "Identifique seu regime tributário atual com seu contador",
            "Refaça a simulação com o regime correto para resultados precisos",
            "Cada regime tem impacto diferente na reforma",
        ],
    )


def formalization_pressure(factor: float) -> FormalizationPressure:
    gap = 1 - factor
    if gap >= 0.35:
        return "muito_alta"
    if gap >= 0.25:
        return "alta"
    if gap >= 0.15:
        return "moderada"
    return "baixa"


def build_tax_effectiveness(data: SimulatorInput, impact: ImpactFigures) -> TaxEffectivenessModel:
    """Split the projected delta into rate change and formalization.

    The current burden ranges reflect what the sector declares on average.
    Split payment withholds tax at settlement, so the collected share moves
    towards the statutory burden; that catch-up is the formalization impact.
    """

    factor = tax_data.effectiveness_factor(data.regime, data.sector).value.average
    statutory = impact.current.average
    effective = statutory * factor
    new_avg = impact.new.average * impact.adjustment

    rate_change = round_half_up(impact.revenue * (new_avg - statutory) / 100)
    formalization = round_half_up(impact.revenue * (statutory - effective) / 100)
    return TaxEffectivenessModel(
        effectiveness_factor=factor,
        effective_burden_pct=round(effective, 2),
        statutory_burden_pct=round(statutory, 2),
        rate_change_impact=rate_change,
        formalization_impact=formalization,
        total_estimated_impact=rate_change + formalization,
        formalization_pressure=formalization_pressure(factor),
    )


def build_state_icms_adjustment(data: SimulatorInput) -> Optional[StateIcmsAdjustmentModel]:
    """ICMS gap of the state vs the national reference, for goods sectors.

    Informational only: the delta ranges already average across states.
    """

    if data.regime is Regime.SIMPLIFIED:
        return None
    margin = tax_data.GOODS_SECTOR_MARGINS.get(data.sector)
    state_rate = tax_data.state_icms_rate(data.state)
    if margin is None or state_rate is None:
        return None

    reference = float(tax_data.ICMS_REFERENCE_RATE.value)
    adjustment = round((float(state_rate.value) - reference) * margin.value, 2)
    if adjustment > 0:
        direction = "favoravel"
    elif adjustment < 0:
        direction = "desfavoravel"
    else:
        direction = "neutro"
    return StateIcmsAdjustmentModel(
        state_rate=float(state_rate.value),
        reference_rate=reference,
        estimated_margin=margin.value,
        adjustment_pp=adjustment,
        direction=direction,
        state_source=state_rate.source,
    )


def score_profile_confidence(data: SimulatorInput) -> int:
    """0-100 completeness score over the fields that sharpen the estimate."""

    score = 0
    if data.regime is not Regime.UNKNOWN:
        score += 20
    if data.sector is not Sector.OTHER:
        score += 15
    if data.revenue_bracket is not None:
        score += 15
    if data.state:
        score += 10
    if data.exact_revenue:
        score += 10
    if data.payroll_ratio is not None:
        score += 10
    if data.cost_type is not None:
        score += 8
    if data.effective_b2b_percent() is not None:
        score += 8
    if data.has_state_incentive is not None:
        score += 4
    return score


def build_methodology(data: SimulatorInput, bracket: RevenueBracket) -> MethodologyModel:
    limitations = tax_data.collect_limitations(data.regime, data.sector)
    if data.revenue_bracket is None and not data.exact_revenue:
        limitations.append(_NO_BRACKET_LIMITATION)
    summary = (
        f"Carga atual estimada para {SECTOR_LABELS[data.sector]} no regime "
        f"{REGIME_LABELS[data.regime]} comparada à carga projetada de IBS/CBS após a transição "
        "(2026-2033), com ajuste pelo aproveitamento de créditos de cada regime."
    )
    return MethodologyModel(
        summary=summary,
        confidence=tax_data.determine_confidence(data.regime, data.sector),
        sources=tax_data.collect_sources(data.regime, data.sector, bracket, data.state or None),
        limitations=limitations,
        last_updated=tax_data.REGISTRY_LAST_UPDATED,
    )


def calculate(data: SimulatorInput) -> SimulatorResult:
    """Simulate the reform impact for one profile."""

    bracket = resolve_bracket(data)
    impact = compute_impact(data)
    risk = classify_risk(impact.percent, data.sector, data.regime)
    logger.debug(
        "Simulated %s/%s/%s: percent=%s risk=%s", data.regime.value, data.sector.value, bracket.value, impact.percent, risk
    )

    return SimulatorResult(
        annual_impact=AnnualImpactModel(min=impact.delta_min, max=impact.delta_max, percent=impact.percent),
        risk_level=risk,
        alerts=build_alerts(data, impact.percent),
        key_dates=build_key_dates(data),
        recommended_actions=build_actions(data),
        methodology=build_methodology(data, bracket),
        profile_confidence=score_profile_confidence(data),
        state_icms_adjustment=build_state_icms_adjustment(data),
        gated_content=GatedContentModel(
            full_checklist=list(FULL_CHECKLIST),
            detailed_analysis=DETAILED_ANALYSIS,
            regime_comparison=data.regime is not Regime.SIMPLIFIED,
            yearly_projection=build_yearly_projection(data, impact),
            regime_analysis=build_regime_analysis(data, impact),
            tax_effectiveness=build_tax_effectiveness(data, impact),
        ),
    )


def generate_teaser(result: SimulatorResult, data: Optional[SimulatorInput] = None) -> SimulatorTeaser:
    """One-line summary and call to action for ``result``.

    ``data`` is accepted so callers can pass the input alongside the result;
    the teaser is derived from the result alone.
    """

    impact = result.annual_impact
    if impact.max > 0:
        summary = f"Sua empresa pode pagar até R$ {format_brl(abs(impact.max))} a mais por ano"
    else:
        summary = f"Sua empresa pode economizar até R$ {format_brl(abs(impact.min))} por ano"
    main_alert = result.alerts[0] if result.alerts else "A reforma tributária vai impactar sua empresa"
    return SimulatorTeaser(
        impact_summary=summary,
        risk_level=result.risk_level,
        main_alert=main_alert,
        cta_text=_CTA_BY_RISK[result.risk_level],
    )
