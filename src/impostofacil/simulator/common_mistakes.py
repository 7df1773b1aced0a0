"""Common mistakes matched against a simulated profile.

Each catalog rule is a pure function of :class:`ProfileContext`; the matcher
filters the catalog, computes severities, sorts high to low (ties keep
catalog order) and truncates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from impostofacil.simulator.calculator import resolve_bracket
from impostofacil.simulator.models import (
    FormalizationPressure,
    Regime,
    RevenueBracket,
    Sector,
    SimulatorInput,
    SimulatorResult,
)

Severity = Literal["alta", "media", "baixa"]

_SEVERITY_ORDER: Dict[str, int] = {"alta": 0, "media": 1, "baixa": 2}

DEFAULT_MAX_ITEMS = 5
CHAT_MAX_ITEMS = 4


class CommonMistake(BaseModel):
    id: str
    title: str
    description: str
    severity: Severity
    article_url: Optional[str] = None
    suggested_question: str

    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class ProfileContext:
    sector: Sector
    regime: Regime
    revenue_bracket: Optional[RevenueBracket]
    state: str
    pressure: FormalizationPressure
    b2b_percent: Optional[float]
    effectiveness_factor: float
    impact_percent: int
    has_incentive: Optional[str]

    @property
    def b2b(self) -> float:
        return self.b2b_percent or 0


@dataclass(frozen=True)
class _MistakeText:
    title: str
    description: str
    article_url: Optional[str]
    suggested_question: str


@dataclass(frozen=True)
class MistakeRule:
    id: str
    match: Callable[[ProfileContext], bool]
    severity: Callable[[ProfileContext], Severity]
    build: Callable[[ProfileContext], _MistakeText]


def build_context(data: SimulatorInput, result: SimulatorResult) -> ProfileContext:
    effectiveness = result.gated_content.tax_effectiveness
    return ProfileContext(
        sector=data.sector,
        regime=data.regime,
        revenue_bracket=resolve_bracket(data),
        state=data.state,
        pressure=effectiveness.formalization_pressure,
        b2b_percent=data.effective_b2b_percent(),
        effectiveness_factor=effectiveness.effectiveness_factor,
        impact_percent=result.annual_impact.percent,
        has_incentive=data.has_state_incentive,
    )


def _fmt_pct(value: float) -> str:
    return f"{value:g}"


def _always(severity: Severity) -> Callable[[ProfileContext], Severity]:
    return lambda ctx: severity


def _cash_flow_severity(ctx: ProfileContext) -> Severity:
    if ctx.revenue_bracket is RevenueBracket.MEI:
        return "baixa"
    if ctx.revenue_bracket is RevenueBracket.ME:
        return "media"
    return "alta"


def _high_pressure(ctx: ProfileContext) -> bool:
    return ctx.pressure in ("alta", "muito_alta")


_SERVICE_LIKE = (Sector.SERVICES, Sector.TECHNOLOGY, Sector.HEALTH, Sector.EDUCATION)
_LONG_CONTRACT = (Sector.SERVICES, Sector.EDUCATION, Sector.HEALTH, Sector.CONSTRUCTION, Sector.TECHNOLOGY)
_SMALL = (RevenueBracket.MEI, RevenueBracket.ME)


CATALOG: List[MistakeRule] = [
    # regime
    MistakeRule(
        id="regime_errado_lp",
        match=lambda ctx: ctx.regime is Regime.PRESUMED_PROFIT and ctx.impact_percent > 30,
        severity=_always("alta"),
        build=lambda ctx: _MistakeText(
            "Ficar no Lucro Presumido sem reavaliar",
            "Com a reforma, o Lucro Real permite aproveitamento pleno de créditos de IBS/CBS. "
            "Para seu perfil, a diferença pode ser significativa. "
            "A escolha de regime é anual — errar significa pagar mais o ano inteiro.",
            "/conhecimento/regimes/lucro-real",
            "Vale a pena migrar do Lucro Presumido para o Lucro Real com a reforma?",
        ),
    ),
    MistakeRule(
        id="simples_hibrido_ignorado",
        match=lambda ctx: ctx.regime is Regime.SIMPLIFIED and ctx.b2b > 40,
        severity=lambda ctx: "alta" if ctx.b2b > 60 else "media",
        build=lambda ctx: _MistakeText(
            "Ignorar a opção do Simples Híbrido",
            f"{_fmt_pct(ctx.b2b)}% das suas vendas são para outras empresas (B2B). "
            "No Simples convencional, seus clientes PJ não aproveitam crédito integral de IBS/CBS. "
            "A opção híbrida (disponível a partir de 2027) resolve isso — mas exige mais controle contábil.",
            "/conhecimento/faq/simples-hibrido-decisao",
            "Como funciona o Simples Híbrido e quando vale a pena para minha empresa?",
        ),
    ),
    MistakeRule(
        id="regime_nao_sei",
        match=lambda ctx: ctx.regime is Regime.UNKNOWN,
        severity=_always("alta"),
        build=lambda ctx: _MistakeText(
            "Não saber seu regime tributário",
            "Cada regime é afetado de forma diferente pela reforma. "
            "Sem saber seu regime, é impossível planejar a transição. "
            "Consulte seu contador ou verifique no cartão CNPJ da Receita Federal.",
            "/conhecimento/regimes/simples-nacional",
            "Como descubro meu regime tributário e por que isso importa na reforma?",
        ),
    ),
    MistakeRule(
        id="lucro_real_documentar_insumos",
        match=lambda ctx: ctx.regime is Regime.REAL_PROFIT,
        severity=_always("media"),
        build=lambda ctx: _MistakeText(
            "Não documentar insumos para aproveitar o crédito pleno",
            "No Lucro Real, todo IBS/CBS pago nas compras vira crédito, desde que destacado em documento "
            "fiscal válido. Notas sem os novos campos ou fornecedores irregulares fazem o crédito se perder.",
            "/conhecimento/regimes/lucro-real",
            "Quais compras vão gerar crédito de IBS e CBS no Lucro Real?",
        ),
    ),
    # pricing and contracts
    MistakeRule(
        id="nao_reprecificar_servicos",
        match=lambda ctx: ctx.sector in _SERVICE_LIKE and ctx.impact_percent > 15,
        severity=lambda ctx: "alta" if ctx.impact_percent > 50 else "media",
        build=lambda ctx: _MistakeText(
            "Não reprecificar para a nova carga tributária",
            f"O setor de {ctx.sector.value} deve ter aumento de carga de até {ctx.impact_percent}%. "
            "Sem ajuste de preços, a margem é consumida silenciosamente. "
            "Contratos sem cláusula de reajuste tributário são os mais vulneráveis.",
            "/conhecimento/faq/precificacao-reforma",
            "Quanto preciso ajustar meus preços para compensar a reforma tributária?",
        ),
    ),
    MistakeRule(
        id="contratos_sem_clausula",
        match=lambda ctx: ctx.sector in _LONG_CONTRACT and ctx.impact_percent > 10,
        severity=_always("media"),
        build=lambda ctx: _MistakeText(
            "Contratos de longo prazo sem cláusula tributária",
            "Contratos de serviço, aluguel e fornecimento firmados antes da reforma "
            "podem não ter previsão de reajuste por mudança tributária. "
            f"No setor de {ctx.sector.value}, isso pode significar anos absorvendo o aumento.",
            "/conhecimento/faq/contratos-precificacao",
            "Como revisar meus contratos para incluir cláusula de reajuste tributário?",
        ),
    ),
    # cash flow, applies to everyone
    MistakeRule(
        id="nao_planejar_fluxo_caixa",
        match=lambda ctx: True,
        severity=_cash_flow_severity,
        build=lambda ctx: _MistakeText(
            "Não planejar o fluxo de caixa para a retenção automática",
            "A partir de 2027, o imposto é retido na hora da venda — antes de chegar na sua conta. "
            "Hoje, esse dinheiro fica disponível por ~40 dias. "
            "Sem planejamento, sua empresa pode ficar sem caixa para pagar fornecedores e folha.",
            "/conhecimento/faq/fluxo-caixa-split-payment",
            "Como planejar meu fluxo de caixa para a retenção automática de impostos em 2027?",
        ),
    ),
    # MEI
    MistakeRule(
        id="mei_cpf_cnpj",
        match=lambda ctx: ctx.revenue_bracket is RevenueBracket.MEI,
        severity=_always("alta"),
        build=lambda ctx: _MistakeText(
            "Misturar finanças pessoais e do negócio",
            "A Receita Federal cruza dados de Pix e cartão com o faturamento declarado do MEI. "
            "Receber pagamentos do negócio na conta pessoal (CPF) pode gerar alerta fiscal. "
            "Renda pessoal também conta no limite de R$81.000/ano do MEI.",
            "/conhecimento/faq/mei-reforma",
            "Como MEI, preciso separar minhas contas pessoais das do negócio?",
        ),
    ),
    MistakeRule(
        id="mei_nanoempreendedor",
        match=lambda ctx: ctx.revenue_bracket is RevenueBracket.MEI,
        severity=_always("baixa"),
        build=lambda ctx: _MistakeText(
            "Não saber sobre a categoria de nanoempreendedor",
            "A reforma cria o nanoempreendedor: quem fatura até R$40.500/ano é isento de IBS e CBS, "
            "sem precisar se formalizar. Motoristas de app têm limite especial de R$162.000/ano. "
            "Se você se enquadra, pode ter menos obrigações do que imagina.",
            "/conhecimento/faq/mei-reforma",
            "O que é o nanoempreendedor e como saber se me enquadro?",
        ),
    ),
    # formalization pressure
    MistakeRule(
        id="formalizacao_alta_pressao",
        match=_high_pressure,
        severity=lambda ctx: "alta" if ctx.pressure == "muito_alta" else "media",
        build=lambda ctx: _MistakeText(
            "Subestimar o custo da cobrança mais rigorosa",
            f"No setor de {ctx.sector.value}, a diferença entre o que se paga e o que a lei exige é uma das maiores. "
            "Com a retenção automática a partir de 2027, essa diferença vai a zero. "
            "O impacto da cobrança mais rigorosa pode ser maior que a própria mudança de alíquotas.",
            "/conhecimento/faq/carga-efetiva-vs-legal",
            "O que significa a cobrança mais rigorosa para meu setor e como me preparar?",
        ),
    ),
    MistakeRule(
        id="regularizacao_pendencias",
        match=_high_pressure,
        severity=_always("media"),
        build=lambda ctx: _MistakeText(
            "Não verificar pendências fiscais antes da reforma",
            "Antes de 2027, existem programas de parcelamento com condições facilitadas (PGFN). "
            "Depois que a cobrança automática começar, regularizar fica mais difícil e caro. "
            "Verifique sua situação no e-CAC da Receita Federal.",
            "/conhecimento/faq/regularizacao-debitos",
            "Como verificar se tenho pendências fiscais e quais programas de regularização existem?",
        ),
    ),
    # state incentives
    MistakeRule(
        id="incentivos_vao_acabar",
        match=lambda ctx: ctx.has_incentive == "sim",
        severity=_always("alta"),
        build=lambda ctx: _MistakeText(
            "Planejar com base em incentivos fiscais que vão acabar",
            f"Você confirmou ter incentivo fiscal em {ctx.state}. "
            "Esses benefícios são mantidos até 2028, mas começam a ser reduzidos em 2029 "
            "e chegam a zero em 2033. Se seu negócio depende deles, é hora de diversificar.",
            "/conhecimento/transicao/beneficios-fiscais",
            "Quando exatamente meus incentivos fiscais vão acabar e como me preparar?",
        ),
    ),
    MistakeRule(
        id="zfm_regras_proprias",
        match=lambda ctx: ctx.state == "AM",
        severity=_always("media"),
        build=lambda ctx: _MistakeText(
            "Aplicar as regras gerais sem considerar a Zona Franca de Manaus",
            "A Zona Franca de Manaus mantém tratamento diferenciado até 2073 (EC 132/2023, ADCT art. 92-A). "
            "Créditos presumidos e alíquotas reduzidas dependem do enquadramento do produto e do "
            "estabelecimento. Simulações genéricas podem superestimar a carga.",
            "/conhecimento/transicao/zona-franca-manaus",
            "Como a Zona Franca de Manaus fica depois da reforma tributária?",
        ),
    ),
    # sector specific
    MistakeRule(
        id="construcao_subcontratados",
        match=lambda ctx: ctx.sector is Sector.CONSTRUCTION,
        severity=_always("alta"),
        build=lambda ctx: _MistakeText(
            "Não formalizar a cadeia de subcontratados",
            "A construção civil tem a maior pressão de formalização entre todos os setores. "
            "Subcontratados sem contrato formal não geram créditos de IBS/CBS. "
            "Mapeie sua cadeia e formalize antes de 2027.",
            "/conhecimento/setores/construcao",
            "Como devo formalizar meus subcontratados para aproveitar créditos na reforma?",
        ),
    ),
    MistakeRule(
        id="agro_creditos_icms",
        match=lambda ctx: ctx.sector is Sector.AGRIBUSINESS,
        severity=_always("alta"),
        build=lambda ctx: _MistakeText(
            "Não recuperar créditos de ICMS acumulados",
            "O ICMS será extinto gradualmente até 2033. Créditos acumulados hoje "
            "precisam ser recuperados ou compensados antes disso. "
            "O prazo para planejar a recuperação é 2026-2027.",
            "/conhecimento/faq/creditos-acumulados",
            "Como recuperar meus créditos de ICMS acumulados antes que o imposto seja extinto?",
        ),
    ),
    MistakeRule(
        id="educacao_reducao_60",
        match=lambda ctx: ctx.sector is Sector.EDUCATION,
        severity=_always("media"),
        build=lambda ctx: _MistakeText(
            "Não verificar o enquadramento na redução de 60%",
            "Serviços educacionais têm direito a redução de 60% na alíquota de IBS/CBS "
            "(LC 214/2025, art. 259). Mas é preciso verificar se sua atividade se enquadra "
            "nos critérios — nem todo serviço educacional é elegível.",
            "/conhecimento/setores/educacao",
            "Minha empresa de educação tem direito à redução de 60% na alíquota?",
        ),
    ),
    MistakeRule(
        id="saude_reducao_60",
        match=lambda ctx: ctx.sector is Sector.HEALTH,
        severity=_always("media"),
        build=lambda ctx: _MistakeText(
            "Presumir que toda atividade de saúde tem redução de 60%",
            "A redução de 60% (LC 214/2025, art. 259) vale para os serviços e dispositivos listados "
            "na lei. Atividades acessórias, como estética ou venda de produtos não listados, "
            "seguem a alíquota padrão.",
            "/conhecimento/setores/saude",
            "Quais serviços de saúde têm direito à redução de 60% no IBS e na CBS?",
        ),
    ),
    MistakeRule(
        id="financeiro_regime_especifico",
        match=lambda ctx: ctx.sector is Sector.FINANCE,
        severity=_always("media"),
        build=lambda ctx: _MistakeText(
            "Aplicar a alíquota padrão a serviços financeiros",
            "Serviços financeiros têm regime específico (LC 214/2025, arts. 239-247), com base de cálculo "
            "e alíquotas próprias. Usar a regra geral distorce preços e provisões.",
            "/conhecimento/setores/financeiro",
            "Como funciona o regime específico de IBS/CBS para serviços financeiros?",
        ),
    ),
    MistakeRule(
        id="simples_b2b_competitividade",
        match=lambda ctx: ctx.regime is Regime.SIMPLIFIED and 0 < ctx.b2b <= 40,
        severity=_always("baixa"),
        build=lambda ctx: _MistakeText(
            "Perda de competitividade em vendas B2B no Simples",
            "Mesmo com percentual menor de vendas B2B, seus clientes empresariais "
            "podem começar a preferir fornecedores fora do Simples que geram créditos completos. "
            "Monitore se esse perfil de cliente muda com a reforma.",
            "/conhecimento/regimes/simples-nacional",
            "Meus clientes PJ podem me trocar por fornecedores fora do Simples?",
        ),
    ),
    MistakeRule(
        id="contabilidade_mais_cara",
        match=lambda ctx: ctx.revenue_bracket in _SMALL,
        severity=_always("baixa"),
        build=lambda ctx: _MistakeText(
            "Não prever aumento de custos contábeis",
            "Durante a transição (2026-2033), sua empresa vai operar com dois sistemas tributários "
            "simultâneos. Isso aumenta a complexidade e o custo da contabilidade. "
            f"Para empresas do porte {'MEI' if ctx.revenue_bracket is RevenueBracket.MEI else 'ME'}, "
            "planejar esse custo é essencial.",
            "/conhecimento/faq/obrigacoes-acessorias-novas",
            "Quanto meus custos contábeis devem aumentar durante a transição da reforma?",
        ),
    ),
]


def get_common_mistakes(
    data: SimulatorInput,
    result: SimulatorResult,
    max_items: int = DEFAULT_MAX_ITEMS,
) -> List[CommonMistake]:
    """Return the most relevant mistakes for the profile, highest severity first."""

    ctx = build_context(data, result)
    matched: List[CommonMistake] = []
    for rule in CATALOG:
        if not rule.match(ctx):
            continue
        text = rule.build(ctx)
        matched.append(
            CommonMistake(
                id=rule.id,
                title=text.title,
                description=text.description,
                severity=rule.severity(ctx),
                article_url=text.article_url,
                suggested_question=text.suggested_question,
            )
        )
    # sorted() is stable, so ties keep catalog order
    matched = sorted(matched, key=lambda item: _SEVERITY_ORDER[item.severity])
    return matched[: max(max_items, 0)]


def format_mistakes_for_chat(data: SimulatorInput, result: SimulatorResult) -> str:
    """Compact numbered text injected into the chat assistant's system prompt.

    Returns an empty string when nothing matches. The wording is consumed by
    an LLM, so it must stay stable.
    """

    mistakes = get_common_mistakes(data, result, CHAT_MAX_ITEMS)
    if not mistakes:
        return ""
    lines = [
        f"{index}. [{item.severity.upper()}] {item.title}: {item.description}"
        for index, item in enumerate(mistakes, start=1)
    ]
    pressure = result.gated_content.tax_effectiveness.formalization_pressure
    return (
        "## Erros Comuns do Perfil deste Usuario\n"
        f"Baseado no setor ({data.sector.value}), regime ({data.regime.value}), "
        f"e pressao de formalizacao ({pressure}):\n"
        + "\n".join(lines)
        + "\n\nQuando relevante, alerte proativamente o usuario sobre esses erros. Use linguagem "
        'nao-acusatoria ("empresas do setor costumam..." em vez de "voce esta errando").'
    )
