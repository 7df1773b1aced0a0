"""Contextualizers ("why we ask") and post-answer insights for the question flow.

Plain Portuguese, no jargon. Facts quoted here must agree with
:mod:`impostofacil.simulator.tax_data`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from impostofacil.simulator.models import ClientProfile, CostType, Regime, Sector
from impostofacil.simulator.steps import StepAnswers


@dataclass(frozen=True)
class Insight:
    emoji: str
    headline: str
    detail: str
    duration_ms: int = 3500


# ---------------------------------------------------------------------------
# Contextualizers
# ---------------------------------------------------------------------------

CONTEXTUALIZERS: Dict[str, str] = {
    "setor": "O setor define quanto imposto voce paga, e quanto vai pagar",
    "uf": "A localizacao influencia incentivos fiscais que podem acabar com a reforma",
    "icms": "Saber se voce tem incentivo ajuda a calcular o impacto da extincao deles",
    "regime": "O regime tributario muda completamente como a reforma te afeta",
    "faturamento": "O valor exato da receita torna o calculo mais preciso",
    "folha": "Salarios nao geram credito no novo sistema, e isso pesa na conta",
    "custo": "Custos com materiais geram credito; com pessoas, nao",
    "clientes": "Quem compra de voce define se o credito tributario funciona na cadeia",
    "exporta": "Exportacao de servicos tem imposto zero no novo sistema",
}


def get_contextualizer(step_id: str) -> str:
    return CONTEXTUALIZERS.get(step_id, "")


# ---------------------------------------------------------------------------
# Sector
# ---------------------------------------------------------------------------

SECTOR_INSIGHTS: Dict[Sector, Insight] = {
    Sector.SERVICES: Insight(
        "💼",
        "Servicos: o setor mais impactado",
        "A aliquota pode mais que dobrar. Mas o impacto real depende do seu perfil completo.",
    ),
    Sector.COMMERCE: Insight(
        "🛒",
        "Comercio: creditos a seu favor",
        "A nova base de creditos sobre mercadorias pode compensar boa parte do aumento.",
    ),
    Sector.INDUSTRY: Insight(
        "🏭",
        "Industria: creditos amplos",
        "Com creditos sobre todos os insumos, a industria tende a ter transicao mais suave.",
    ),
    Sector.TECHNOLOGY: Insight(
        "💻",
        "Tecnologia: atencao a folha",
        "Se a maior parte do custo e com pessoas, os creditos serao limitados.",
    ),
    Sector.HEALTH: Insight(
        "🏥",
        "Saude: aliquota reduzida em 60%",
        "Vamos verificar se o seu perfil se qualifica para essa reducao.",
    ),
    Sector.EDUCATION: Insight(
        "📚",
        "Educacao: aliquota reduzida em 60%",
        "Instituicoes de ensino tem tratamento especial na reforma.",
    ),
    Sector.AGRIBUSINESS: Insight(
        "🌾",
        "Agro: regime diferenciado",
        "Produtos agropecuarios tem reducao de 60% na aliquota. Mas ha detalhes importantes.",
    ),
    Sector.CONSTRUCTION: Insight(
        "🏗️",
        "Construcao: atencao a formalizacao",
        "Um dos setores com maior pressao. A reforma cobra automaticamente a partir de 2027.",
    ),
    Sector.FINANCE: Insight(
        "🏦",
        "Financeiro: regime especifico",
        "Bancos e seguradoras terao regras proprias. A base de calculo muda.",
    ),
    Sector.OTHER: Insight(
        "📦",
        "Vamos calcular seu impacto",
        "Mesmo sem setor especifico, conseguimos estimar o efeito da reforma.",
    ),
}


def get_sector_insight(sector: Sector) -> Insight:
    return SECTOR_INSIGHTS[sector]


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

STATE_INSIGHTS: Dict[str, Insight] = {
    "AM": Insight(
        "🌳",
        "Zona Franca: protecao ate 2073",
        "Empresas na Zona Franca de Manaus tem tratamento especial, uma vantagem unica no Brasil.",
    ),
    "GO": Insight(
        "📍",
        "Goias: incentivos em extincao",
        "Programas como PRODUZIR serao extintos ate 2032. Isso afeta diretamente o calculo.",
    ),
    "BA": Insight(
        "📍",
        "Bahia: DESENVOLVE em transicao",
        "Os incentivos de ICMS serao extintos gradualmente. Ha compensacao federal prevista.",
    ),
    "CE": Insight(
        "📍",
        "Ceara: incentivos em transicao",
        "O FDI e outros incentivos de ICMS serao extintos gradualmente ate 2032.",
    ),
    "PE": Insight(
        "📍",
        "Pernambuco: PRODEPE em transicao",
        "Os incentivos fiscais serao compensados pelo Fundo federal, mas exigem planejamento.",
    ),
    "SC": Insight(
        "📍",
        "Santa Catarina: TTD em transicao",
        "Os programas de ICMS terao sunset com a reforma. Planeje a transicao.",
    ),
    "ES": Insight(
        "📍",
        "Espirito Santo: INVEST-ES em transicao",
        "Incentivos de comercio exterior e industria serao extintos gradualmente.",
    ),
    "MG": Insight(
        "📍",
        "Minas Gerais: incentivos industriais em transicao",
        "Os incentivos de ICMS de Minas serao extintos progressivamente ate 2032.",
    ),
}

DEFAULT_STATE_INSIGHT = Insight(
    "📍",
    "Sem incentivos em risco",
    "Sua transicao e mais direta, com menos variaveis para calcular.",
)


def get_state_insight(state: str) -> Insight:
    return STATE_INSIGHTS.get(state.upper(), DEFAULT_STATE_INSIGHT)


# ---------------------------------------------------------------------------
# ICMS incentive
# ---------------------------------------------------------------------------

ICMS_INSIGHTS: Dict[str, Insight] = {
    "sim": Insight(
        "⚠️",
        "Incentivo confirmado",
        "Esses beneficios serao extintos ate 2032. Vamos incluir isso no calculo.",
    ),
    "nao": Insight(
        "✅",
        "Sem incentivo de ICMS",
        "Menos uma variavel, e seu calculo fica mais direto.",
    ),
    "nao_sei": Insight(
        "🤔",
        "Tudo bem, vamos estimar",
        "Usaremos a media do seu estado. Confirme com seu contador depois.",
    ),
}


def get_icms_insight(answer: str) -> Insight:
    return ICMS_INSIGHTS[answer]


# ---------------------------------------------------------------------------
# Regime (sector-aware)
# ---------------------------------------------------------------------------

_B2B_HEAVY = (Sector.TECHNOLOGY, Sector.INDUSTRY)
_SERVICE_LIKE = (Sector.SERVICES, Sector.TECHNOLOGY, Sector.EDUCATION, Sector.HEALTH)


def get_regime_insight(regime: Regime, sector: Optional[Sector]) -> Insight:
    if regime is Regime.SIMPLIFIED:
        if sector in _B2B_HEAVY:
            detail = "Seus clientes PJ nao aproveitam creditos. A partir de set/2026, existe o Simples Hibrido."
        else:
            detail = "O Simples continua existindo. O impacto maior e nos precos dos fornecedores."
        return Insight("📋", "Simples: impacto indireto", detail)
    if regime is Regime.PRESUMED_PROFIT:
        if sector in _SERVICE_LIKE:
            detail = "Voce sai de PIS/Cofins de 3,65% para aliquota cheia. E folha nao gera credito."
        else:
            detail = "A mudanca de cumulativo para nao-cumulativo e grande. Mas creditos sobre compras ajudam."
        return Insight("⚠️", "Lucro Presumido: maior impacto", detail)
    if regime is Regime.REAL_PROFIT:
        return Insight(
            "✅",
            "Boa noticia para Lucro Real",
            "Voce ja usa nao-cumulativo. A reforma amplia seus creditos, com transicao mais suave.",
        )
    return Insight(
        "🤔",
        "Sem regime definido",
        "Vamos estimar com uma media. Descubra seu regime com seu contador para resultado exato.",
    )


# ---------------------------------------------------------------------------
# Revenue, payroll and cost mix
# ---------------------------------------------------------------------------

def get_revenue_insight(amount: float) -> Insight:
    if amount <= 81_000:
        return Insight(
            "📊",
            "Na faixa MEI",
            "O custo contabil adicional (R$50-150/mes) pode pesar mais que a mudanca de aliquota.",
        )
    if amount <= 360_000:
        return Insight("📊", "Faixa Microempresa", "Nessa faixa, o impacto depende muito do regime e do tipo de custo.")
    if amount <= 4_800_000:
        return Insight(
            "📊",
            "Pequena empresa",
            "Faixa com mais opcoes de regime. Vale comparar Simples vs Lucro Presumido vs Real.",
        )
    if amount <= 78_000_000:
        return Insight(
            "📊",
            "Media empresa",
            "Nesse porte, a estrutura de creditos faz toda a diferenca no resultado final.",
        )
    return Insight(
        "📊",
        "Grande empresa",
        "O impacto em valor absoluto e significativo. Cada ponto percentual conta.",
    )


def get_payroll_insight(payroll_ratio: float) -> Insight:
    if payroll_ratio > 50:
        return Insight(
            "💰",
            "Folha alta = menos creditos",
            "A maior parte dos seus custos nao gera credito no novo sistema. Isso aumenta a carga.",
        )
    if payroll_ratio > 25:
        return Insight(
            "💰",
            "Folha moderada",
            "Parte dos custos gera credito, parte nao. O impacto depende dos outros fatores.",
        )
    return Insight(
        "💰",
        "Folha baixa = mais creditos",
        "Com menos gastos em pessoal, voce aproveita mais creditos sobre outros custos.",
    )


COST_TYPE_INSIGHTS: Dict[CostType, Insight] = {
    CostType.MATERIALS: Insight(
        "📦",
        "Materiais geram credito total",
        "Cada compra de insumo vira credito de IBS/CBS. Boa noticia para sua empresa.",
    ),
    CostType.SERVICES: Insight(
        "🔧",
        "Servicos terceirizados: credito parcial",
        "Servicos geram credito, mas depende de como o fornecedor emite a nota.",
    ),
    CostType.PAYROLL: Insight(
        "👥",
        "Folha nao gera credito",
        "Salarios e encargos ficam fora do sistema de creditos. Isso pesa na conta final.",
    ),
    CostType.MIXED: Insight(
        "⚖️",
        "Custos equilibrados",
        "A parte de materiais gera credito; a de pessoal, nao. Resultado intermediario.",
    ),
}


def get_cost_type_insight(cost_type: CostType) -> Insight:
    return COST_TYPE_INSIGHTS[cost_type]


# ---------------------------------------------------------------------------
# Clients (regime-aware) and exports
# ---------------------------------------------------------------------------

def get_client_profile_insight(profile: ClientProfile, regime: Optional[Regime]) -> Insight:
    if profile is ClientProfile.B2B and regime is Regime.SIMPLIFIED:
        return Insight(
            "⚠️",
            "Atencao: creditos B2B",
            "No Simples, seus clientes PJ nao aproveitam creditos. Avalie o Simples Hibrido.",
        )
    if profile is ClientProfile.B2B:
        return Insight(
            "🏢",
            "Vendas B2B: cadeia de creditos",
            "Seus clientes vao querer credito. Estar fora do Simples e vantagem aqui.",
        )
    if profile is ClientProfile.B2C:
        return Insight(
            "👤",
            "Vendas ao consumidor final",
            "O consumidor nao usa credito. Seu impacto depende mais da aliquota do que da cadeia.",
        )
    return Insight(
        "🔄",
        "Publico misto",
        "A parte B2B exige atencao aos creditos. A parte B2C depende mais da aliquota.",
    )


def get_export_insight(exports: bool) -> Insight:
    if exports:
        return Insight(
            "🌍",
            "Exportacao = imposto zero",
            "Servicos exportados tem aliquota zero de IBS/CBS. Oportunidade de expansao.",
        )
    return Insight("🏠", "Mercado interno", "Sem exportacao, a aliquota padrao se aplica integralmente.")


def get_step_insight(step_id: str, answers: StepAnswers) -> Optional[Insight]:
    """Insight for the answer just given on ``step_id``, or None if unanswered."""

    if step_id == "setor" and answers.sector is not None:
        return get_sector_insight(answers.sector)
    if step_id == "uf" and answers.state:
        return get_state_insight(answers.state)
    if step_id == "icms" and answers.has_state_incentive is not None:
        return get_icms_insight(answers.has_state_incentive)
    if step_id == "regime" and answers.regime is not None:
        return get_regime_insight(answers.regime, answers.sector)
    if step_id == "faturamento" and answers.exact_revenue is not None:
        return get_revenue_insight(answers.exact_revenue)
    if step_id == "folha" and answers.payroll_ratio is not None:
        return get_payroll_insight(answers.payroll_ratio)
    if step_id == "custo" and answers.cost_type is not None:
        return get_cost_type_insight(answers.cost_type)
    if step_id == "clientes" and answers.client_profile is not None:
        return get_client_profile_insight(answers.client_profile, answers.regime)
    if step_id == "exporta" and answers.exports_services is not None:
        return get_export_insight(answers.exports_services)
    return None
