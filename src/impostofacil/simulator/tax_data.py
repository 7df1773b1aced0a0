"""Cited tax data registry for the IBS/CBS reform simulator.

Every figure the calculator uses is wrapped in a :class:`CitedValue` carrying
the legal or statistical source, a confidence tier and an optional note:

* ``legislada`` - enacted law (EC 132/2023, LC 214/2025, LC 123/2006 ...)
* ``estimativa_oficial`` - Ministry of Finance projection
* ``derivada`` - derived from other values or public statistics

Tables are keyed by the closed :class:`Regime`, :class:`Sector` and
:class:`RevenueBracket` enums and are exhaustive over them, so lookups never
miss for validated input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from impostofacil.simulator.models import ConfidenceLevel, Regime, RevenueBracket, Sector

Confidence = Literal["legislada", "estimativa_oficial", "derivada"]

REGISTRY_LAST_UPDATED = "2025-06-30"


@dataclass(frozen=True)
class CitedValue:
    value: Any
    source: str
    confidence: Confidence
    notes: Optional[str] = None


@dataclass(frozen=True)
class BurdenRange:
    """Tax burden as a percentage of revenue."""

    min: float
    max: float
    reduction: Optional[str] = None

    @property
    def average(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class EffectivenessRange:
    """Share of the statutory burden that is actually collected."""

    average: float
    min: float
    max: float


@dataclass(frozen=True)
class TransitionEntry:
    year: int
    ibs_pct: float
    cbs_pct: float
    description: str
    source: str
    confidence: Confidence


# ---------------------------------------------------------------------------
# Representative revenue per bracket
# ---------------------------------------------------------------------------

REVENUE_MIDPOINTS: Mapping[RevenueBracket, CitedValue] = {
    RevenueBracket.MEI: CitedValue(
        60_000,
        "LC 123/2006, art. 18-A (limite MEI R$81.000/ano)",
        "derivada",
        "Ponto médio estimado da faixa de faturamento MEI (R$0 a R$81.000)",
    ),
    RevenueBracket.ME: CitedValue(
        200_000,
        "LC 123/2006, art. 3º, I (limite ME R$360.000/ano)",
        "derivada",
        "Ponto médio estimado da faixa ME (R$81.000 a R$360.000)",
    ),
    RevenueBracket.EPP: CitedValue(
        1_500_000,
        "LC 123/2006, art. 3º, II (limite EPP R$4.800.000/ano)",
        "derivada",
        "Ponto médio estimado da faixa EPP (R$360.000 a R$4.800.000)",
    ),
    RevenueBracket.MEDIUM: CitedValue(
        20_000_000,
        "Lei 11.638/2007 e critérios BNDES para porte médio",
        "derivada",
        "Ponto médio estimado para empresas de médio porte (R$4.8M a R$78M)",
    ),
    RevenueBracket.LARGE: CitedValue(
        150_000_000,
        "Estimativa baseada em dados de receita de grandes empresas",
        "derivada",
        "Valor representativo para empresas acima de R$78M; impacto varia muito",
    ),
}


# ---------------------------------------------------------------------------
# Current burden per regime and sector (% of revenue)
# ---------------------------------------------------------------------------

_AVG_ACROSS_REGIMES = "Média ponderada entre regimes"

CURRENT_BURDEN: Mapping[Regime, Mapping[Sector, CitedValue]] = {
    Regime.SIMPLIFIED: {
        Sector.COMMERCE: CitedValue(
            BurdenRange(4, 11.5),
            "LC 123/2006, Anexo I (Comércio)",
            "legislada",
            "Alíquotas efetivas do Simples Nacional Anexo I, variando por faixa de faturamento",
        ),
        Sector.INDUSTRY: CitedValue(
            BurdenRange(4.5, 12),
            "LC 123/2006, Anexo II (Indústria)",
            "legislada",
            "Alíquotas efetivas do Simples Nacional Anexo II",
        ),
        Sector.SERVICES: CitedValue(
            BurdenRange(6, 17.5),
            "LC 123/2006, Anexos III, IV e V (Serviços)",
            "legislada",
            "Varia conforme tipo de serviço e fator r (folha/receita). Anexo V pode chegar a 17,5%",
        ),
        Sector.AGRIBUSINESS: CitedValue(
            BurdenRange(4, 10),
            "LC 123/2006, Anexos I e II",
            "derivada",
            "Agronegócio no Simples utiliza Anexo I (comércio) ou II (indústria) conforme atividade",
        ),
        Sector.TECHNOLOGY: CitedValue(
            BurdenRange(6, 15.5),
            "LC 123/2006, Anexos III e V (TI/Software)",
            "legislada",
            "Desenvolvimento de software: Anexo III (fator r > 28%) ou V (fator r < 28%)",
        ),
        Sector.HEALTH: CitedValue(
            BurdenRange(6, 15.5),
            "LC 123/2006, Anexos III e V (Saúde)",
            "legislada",
            "Serviços de saúde: Anexo III ou V dependendo do fator r",
        ),
        Sector.EDUCATION: CitedValue(
            BurdenRange(6, 15.5),
            "LC 123/2006, Anexo III (Educação)",
            "legislada",
            "Serviços de educação geralmente enquadrados no Anexo III",
        ),
        Sector.CONSTRUCTION: CitedValue(
            BurdenRange(4.5, 12),
            "LC 123/2006, Anexo IV (Construção Civil)",
            "legislada",
            "Anexo IV não inclui CPP (INSS recolhido à parte)",
        ),
        Sector.FINANCE: CitedValue(
            BurdenRange(6, 17.5),
            "LC 123/2006, Anexos III e V",
            "legislada",
            "Serviços financeiros diversos; alíquota depende do fator r",
        ),
        Sector.OTHER: CitedValue(
            BurdenRange(5, 14),
            "LC 123/2006, média dos Anexos III-V",
            "derivada",
            "Média estimada para setores não classificados",
        ),
    },
    Regime.PRESUMED_PROFIT: {
        Sector.COMMERCE: CitedValue(
            BurdenRange(5.93, 8.5),
            "Lei 9.718/1998 (PIS 0,65% + Cofins 3%) + ISS/ICMS variável",
            "legislada",
            "PIS/Cofins cumulativo (3,65%) + ICMS médio (2-5%) sobre receita de comércio",
        ),
        Sector.INDUSTRY: CitedValue(
            BurdenRange(5.93, 8.5),
            "Lei 9.718/1998 + regulamentação ICMS/IPI estadual",
            "legislada",
            "PIS/Cofins cumulativo + ICMS + IPI variável por produto",
        ),
        Sector.SERVICES: CitedValue(
            BurdenRange(8.65, 14.5),
            "Lei 9.718/1998 (PIS/Cofins) + LC 116/2003 (ISS 2-5%)",
            "legislada",
            "PIS/Cofins cumulativo 3,65% + ISS 2-5% + IRPJ/CSLL sobre presunção de 32%",
        ),
        Sector.AGRIBUSINESS: CitedValue(
            BurdenRange(4.5, 7),
            "Lei 9.718/1998 + isenções agro específicas",
            "derivada",
            "Agronegócio conta com diversas isenções de PIS/Cofins e redução de ICMS",
        ),
        Sector.TECHNOLOGY: CitedValue(
            BurdenRange(8.65, 14.5),
            "Lei 9.718/1998 + LC 116/2003",
            "legislada",
            "Similar a serviços; software pode ter ISS de 2-5% conforme município",
        ),
        Sector.HEALTH: CitedValue(
            BurdenRange(8.65, 14.5),
            "Lei 9.718/1998 + LC 116/2003",
            "legislada",
            "Serviços de saúde com presunção de 32% para IRPJ (8% para receitas hospitalares)",
        ),
        Sector.EDUCATION: CitedValue(
            BurdenRange(8.65, 14.5),
            "Lei 9.718/1998 + LC 116/2003",
            "legislada",
            "Educação: ISS 2-5% + PIS/Cofins cumulativo + IRPJ/CSLL",
        ),
        Sector.CONSTRUCTION: CitedValue(
            BurdenRange(5.93, 10),
            "Lei 9.718/1998 + legislação ISS municipal",
            "legislada",
            "Construção civil com presunção de 8% para IRPJ; ISS 2-5%",
        ),
        Sector.FINANCE: CitedValue(
            BurdenRange(8.65, 16),
            "Lei 9.718/1998 + LC 116/2003 + regulação BACEN",
            "derivada",
            "Serviços financeiros com carga mais elevada; IOF adicional em alguns casos",
        ),
        Sector.OTHER: CitedValue(
            BurdenRange(6.5, 12),
            "Média estimada do regime de Lucro Presumido",
            "derivada",
            "Estimativa para setores não classificados no Lucro Presumido",
        ),
    },
    Regime.REAL_PROFIT: {
        Sector.COMMERCE: CitedValue(
            BurdenRange(9.25, 12),
            "Lei 10.637/2002 (PIS 1,65%) + Lei 10.833/2003 (Cofins 7,6%) + ICMS",
            "legislada",
            "PIS/Cofins não-cumulativo 9,25% + ICMS líquido de créditos",
        ),
        Sector.INDUSTRY: CitedValue(
            BurdenRange(9.25, 14),
            "Lei 10.637/2002 + Lei 10.833/2003 + legislação IPI/ICMS",
            "legislada",
            "PIS/Cofins 9,25% + ICMS + IPI; créditos sobre insumos reduzem carga efetiva",
        ),
        Sector.SERVICES: CitedValue(
            BurdenRange(9.25, 14.5),
            "Lei 10.637/2002 + Lei 10.833/2003 + LC 116/2003",
            "legislada",
            "PIS/Cofins 9,25% + ISS 2-5%; poucos créditos em serviços (folha não gera crédito)",
        ),
        Sector.AGRIBUSINESS: CitedValue(
            BurdenRange(6, 10),
            "Lei 10.637/2002 + Lei 10.833/2003 + isenções agro",
            "derivada",
            "Diversos créditos presumidos e isenções para insumos agropecuários",
        ),
        Sector.TECHNOLOGY: CitedValue(
            BurdenRange(9.25, 14),
            "Lei 10.637/2002 + Lei 10.833/2003 + Lei do Bem (Lei 11.196/2005)",
            "legislada",
            "PIS/Cofins 9,25% + ISS; possibilidade de incentivos da Lei do Bem para P&D",
        ),
        Sector.HEALTH: CitedValue(
            BurdenRange(9.25, 14),
            "Lei 10.637/2002 + Lei 10.833/2003",
            "legislada",
            "Saúde no Lucro Real: PIS/Cofins 9,25% + ISS, com créditos limitados",
        ),
        Sector.EDUCATION: CitedValue(
            BurdenRange(9.25, 14),
            "Lei 10.637/2002 + Lei 10.833/2003",
            "legislada",
            "Educação no Lucro Real: carga similar a serviços em geral",
        ),
        Sector.CONSTRUCTION: CitedValue(
            BurdenRange(9.25, 14),
            "Lei 10.637/2002 + Lei 10.833/2003 + legislação ISS",
            "legislada",
            "Construção civil com possibilidade de créditos sobre materiais",
        ),
        Sector.FINANCE: CitedValue(
            BurdenRange(9.25, 16),
            "Lei 10.637/2002 + Lei 10.833/2003 + legislação específica do setor financeiro",
            "derivada",
            "Setor financeiro tem regime diferenciado com cumulatividade parcial em alguns casos",
        ),
        Sector.OTHER: CitedValue(
            BurdenRange(9.25, 14),
            "Média do regime de Lucro Real",
            "derivada",
            "Estimativa para setores não classificados no Lucro Real",
        ),
    },
    Regime.UNKNOWN: {
        Sector.COMMERCE: CitedValue(
            BurdenRange(5, 12),
            "Média ponderada entre regimes (Simples, Presumido, Real)",
            "derivada",
            "Faixa conservadora cobrindo todos os regimes possíveis para comércio",
        ),
        Sector.INDUSTRY: CitedValue(
            BurdenRange(5, 12),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Faixa conservadora para indústria em qualquer regime",
        ),
        Sector.SERVICES: CitedValue(
            BurdenRange(7, 16),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Serviços têm a maior variação entre regimes",
        ),
        Sector.AGRIBUSINESS: CitedValue(
            BurdenRange(4, 10),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Agronegócio geralmente tem carga mais baixa em todos os regimes",
        ),
        Sector.TECHNOLOGY: CitedValue(
            BurdenRange(7, 15),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Tecnologia/SaaS com variação conforme regime e tipo de produto",
        ),
        Sector.HEALTH: CitedValue(
            BurdenRange(7, 15),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Saúde com variação dependendo do tipo de serviço e regime",
        ),
        Sector.EDUCATION: CitedValue(
            BurdenRange(7, 15),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Educação com faixa similar a serviços em geral",
        ),
        Sector.CONSTRUCTION: CitedValue(
            BurdenRange(5, 12),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Construção civil com variação moderada entre regimes",
        ),
        Sector.FINANCE: CitedValue(
            BurdenRange(7, 16),
            _AVG_ACROSS_REGIMES,
            "derivada",
            "Setor financeiro: carga mais alta em praticamente todos os regimes",
        ),
        Sector.OTHER: CitedValue(
            BurdenRange(6, 14),
            "Média geral estimada",
            "derivada",
            "Faixa genérica para setores não classificados, sem regime definido",
        ),
    },
}


# ---------------------------------------------------------------------------
# New burden (IBS + CBS) per sector
# ---------------------------------------------------------------------------

NEW_BURDEN: Mapping[Sector, CitedValue] = {
    Sector.COMMERCE: CitedValue(
        BurdenRange(24, 28),
        "Nota Técnica Min. Fazenda: alíquota de referência IBS+CBS ~26,5%",
        "estimativa_oficial",
        "Comércio segue alíquota padrão; crédito amplo sobre mercadorias compradas",
    ),
    Sector.INDUSTRY: CitedValue(
        BurdenRange(22, 27),
        "Nota Técnica Min. Fazenda + LC 214/2025",
        "estimativa_oficial",
        "Indústria se beneficia de créditos amplos sobre insumos. IPI será extinto "
        "(mantido apenas para Zona Franca de Manaus)",
    ),
    Sector.SERVICES: CitedValue(
        BurdenRange(25, 28),
        "Nota Técnica Min. Fazenda: alíquota padrão",
        "estimativa_oficial",
        "Serviços: maior impacto negativo. Folha de pagamento não gera crédito de IBS/CBS, "
        "e a carga sobe de PIS/Cofins cumulativo para alíquota cheia",
    ),
    Sector.AGRIBUSINESS: CitedValue(
        BurdenRange(10, 18, "Regime diferenciado: alíquota reduzida em 60%"),
        "LC 214/2025, arts. 259 e 264 (regime diferenciado para produtos agropecuários)",
        "legislada",
        "Produtos agropecuários in natura e insumos agrícolas têm redução de 60% da alíquota. "
        "Produtor rural PF tem regime simplificado",
    ),
    Sector.TECHNOLOGY: CitedValue(
        BurdenRange(25, 28),
        "Nota Técnica Min. Fazenda: alíquota padrão para TI/Software",
        "estimativa_oficial",
        "Software e SaaS seguem alíquota padrão. Exportações de serviços mantêm desoneração (alíquota zero)",
    ),
    Sector.HEALTH: CitedValue(
        BurdenRange(10, 15, "Alíquota reduzida em 60% para serviços de saúde"),
        "LC 214/2025, art. 259 (redução de 60% para saúde)",
        "legislada",
        "Serviços de saúde e dispositivos médicos com redução de 60%",
    ),
    Sector.EDUCATION: CitedValue(
        BurdenRange(10, 15, "Alíquota reduzida em 60% para educação"),
        "LC 214/2025, art. 259 (redução de 60% para educação)",
        "legislada",
        "Serviços de educação com redução de 60% da alíquota de referência",
    ),
    Sector.CONSTRUCTION: CitedValue(
        BurdenRange(22, 27),
        "Nota Técnica Min. Fazenda: alíquota padrão com créditos sobre materiais",
        "estimativa_oficial",
        "Construção civil com créditos sobre materiais de construção; regime especial para incorporação imobiliária",
    ),
    Sector.FINANCE: CitedValue(
        BurdenRange(20, 26, "Regime específico para serviços financeiros"),
        "LC 214/2025, arts. 239-247 (regime específico para serviços financeiros)",
        "legislada",
        "Bancos e seguradoras com regime específico; base de cálculo diferenciada",
    ),
    Sector.OTHER: CitedValue(
        BurdenRange(24, 28),
        "Nota Técnica Min. Fazenda: alíquota de referência padrão",
        "estimativa_oficial",
        "Alíquota padrão para setores sem regime diferenciado",
    ),
}


# ---------------------------------------------------------------------------
# Effectiveness factor (collected vs statutory) per regime and sector
# ---------------------------------------------------------------------------

def _eff(
    average: float, low: float, high: float, source: str, notes: str, confidence: Confidence = "derivada"
) -> CitedValue:
    return CitedValue(EffectivenessRange(average, low, high), source, confidence, notes)


EFFECTIVENESS_FACTOR: Mapping[Regime, Mapping[Sector, CitedValue]] = {
    Regime.SIMPLIFIED: {
        Sector.COMMERCE: _eff(
            0.65, 0.50, 0.80,
            "Receita Federal, Relatório de Arrecadação do Simples Nacional 2024 + IBGE Pesquisa Anual do Comércio",
            "Comércio varejista tem alta proporção de vendas em dinheiro e subnotificação de receita.",
        ),
        Sector.INDUSTRY: _eff(
            0.85, 0.75, 0.92,
            "Receita Federal + IBGE PIA (Pesquisa Industrial Anual)",
            "Cadeia de fornecimento documentada força maior compliance.",
        ),
        Sector.SERVICES: _eff(
            0.72, 0.55, 0.85,
            "Receita Federal + IBGE PNAD Contínua (informalidade no setor de serviços)",
            "Serviços pessoais e alimentação têm gaps maiores; serviços profissionais têm gaps menores.",
        ),
        Sector.AGRIBUSINESS: _eff(
            0.70, 0.55, 0.82,
            "Receita Federal + IBGE Censo Agropecuário",
            "Pequenos produtores frequentemente operam informalmente.",
        ),
        Sector.TECHNOLOGY: _eff(
            0.90, 0.82, 0.95,
            "Receita Federal + IBGE PNAD Contínua (setor TI)",
            "Setor altamente digital com quase todas transações documentadas eletronicamente.",
        ),
        Sector.HEALTH: _eff(
            0.80, 0.70, 0.90,
            "Receita Federal + ANS (Agência Nacional de Saúde Suplementar)",
            "Setor regulado com exigências de licenciamento.",
        ),
        Sector.EDUCATION: _eff(
            0.82, 0.72, 0.90,
            "Receita Federal + MEC dados de instituições",
            "Formalização moderada. Escolas formais vs. cursos livres/tutoria informal.",
        ),
        Sector.CONSTRUCTION: _eff(
            0.60, 0.45, 0.75,
            "Receita Federal + IBGE PNAD Contínua (construção: >50% informal)",
            "Maior informalidade entre todos os setores.",
        ),
        Sector.FINANCE: _eff(
            0.95, 0.90, 0.98,
            "Receita Federal + BACEN (supervisão bancária)",
            "Setor fortemente regulado pelo Banco Central.",
            "estimativa_oficial",
        ),
        Sector.OTHER: _eff(
            0.75, 0.60, 0.88,
            "Média ponderada entre setores (Receita Federal)",
            "Estimativa conservadora para setores não classificados.",
        ),
    },
    Regime.PRESUMED_PROFIT: {
        Sector.COMMERCE: _eff(
            0.70, 0.55, 0.82,
            "Receita Federal, Relatório de Arrecadação LP 2024 + IBGE",
            "Exigências contábeis maiores que Simples, mas economia de caixa ainda significativa.",
        ),
        Sector.INDUSTRY: _eff(
            0.85, 0.75, 0.92,
            "Receita Federal + IBGE PIA",
            "Documentação de cadeia similar ao Simples industrial.",
        ),
        Sector.SERVICES: _eff(
            0.75, 0.60, 0.85,
            "Receita Federal + IBGE PNAD Contínua",
            "ISS municipal com variação entre municípios cria gaps de compliance.",
        ),
        Sector.AGRIBUSINESS: _eff(
            0.72, 0.58, 0.84,
            "Receita Federal + IBGE Censo Agropecuário",
            "Ligeiramente mais formal que Simples pelo porte das empresas.",
        ),
        Sector.TECHNOLOGY: _eff(
            0.90, 0.82, 0.95,
            "Receita Federal + IBGE PNAD Contínua (setor TI)",
            "Transações quase totalmente rastreáveis.",
        ),
        Sector.HEALTH: _eff(
            0.82, 0.72, 0.90,
            "Receita Federal + ANS",
            "Regulação setorial e pagamentos via convênios forçam documentação.",
        ),
        Sector.EDUCATION: _eff(
            0.82, 0.72, 0.90,
            "Receita Federal + MEC",
            "Similar ao Simples em dinâmica de formalização.",
        ),
        Sector.CONSTRUCTION: _eff(
            0.65, 0.50, 0.78,
            "Receita Federal + IBGE PNAD Contínua",
            "Melhor que Simples mas informalidade ainda alta no setor.",
        ),
        Sector.FINANCE: _eff(
            0.95, 0.90, 0.98,
            "Receita Federal + BACEN",
            "Mesma regulação forte do setor financeiro.",
            "estimativa_oficial",
        ),
        Sector.OTHER: _eff(
            0.78, 0.62, 0.88,
            "Média ponderada entre setores (Receita Federal)",
            "Estimativa para setores não classificados no Lucro Presumido.",
        ),
    },
    Regime.REAL_PROFIT: {
        Sector.COMMERCE: _eff(
            0.85, 0.75, 0.92,
            "Receita Federal + IBGE Pesquisa Anual do Comércio",
            "Escrituração completa exigida. Créditos requerem documentação.",
        ),
        Sector.INDUSTRY: _eff(
            0.90, 0.82, 0.95,
            "Receita Federal + IBGE PIA",
            "Cadeia produtiva documentada + escrituração completa.",
        ),
        Sector.SERVICES: _eff(
            0.85, 0.75, 0.92,
            "Receita Federal + IBGE",
            "Documentação plena exigida. Menos transações em dinheiro neste porte.",
        ),
        Sector.AGRIBUSINESS: _eff(
            0.82, 0.72, 0.90,
            "Receita Federal + IBGE Censo Agropecuário",
            "Grandes operações agro bem documentadas.",
        ),
        Sector.TECHNOLOGY: _eff(
            0.95, 0.88, 0.98,
            "Receita Federal + IBGE PNAD Contínua (setor TI)",
            "Compliance máximo: digital + escrituração plena.",
        ),
        Sector.HEALTH: _eff(
            0.90, 0.82, 0.95,
            "Receita Federal + ANS",
            "Regulação + escrituração plena + convênios documentados.",
        ),
        Sector.EDUCATION: _eff(
            0.88, 0.78, 0.93,
            "Receita Federal + MEC",
            "Escrituração completa melhora compliance significativamente.",
        ),
        Sector.CONSTRUCTION: _eff(
            0.80, 0.68, 0.88,
            "Receita Federal + IBGE",
            "Grandes obras exigem documentação. Subcontratação informal ainda presente.",
        ),
        Sector.FINANCE: _eff(
            0.98, 0.95, 1.0,
            "Receita Federal + BACEN (supervisão contínua)",
            "Compliance praticamente total.",
            "estimativa_oficial",
        ),
        Sector.OTHER: _eff(
            0.88, 0.78, 0.93,
            "Média ponderada entre setores (Receita Federal)",
            "Estimativa para setores não classificados no Lucro Real.",
        ),
    },
    Regime.UNKNOWN: {
        Sector.COMMERCE: _eff(
            0.70, 0.55, 0.85,
            "Média ponderada entre regimes (Receita Federal)",
            "Sem regime definido, usa média conservadora entre regimes para comércio.",
        ),
        Sector.INDUSTRY: _eff(0.85, 0.75, 0.92, _AVG_ACROSS_REGIMES, "Indústria tem compliance relativamente alto."),
        Sector.SERVICES: _eff(0.75, 0.58, 0.88, _AVG_ACROSS_REGIMES, "Serviços com variação grande entre regimes."),
        Sector.AGRIBUSINESS: _eff(0.72, 0.55, 0.85, _AVG_ACROSS_REGIMES, "Agronegócio com gaps moderados."),
        Sector.TECHNOLOGY: _eff(0.90, 0.82, 0.95, _AVG_ACROSS_REGIMES, "Tecnologia consistentemente alta em compliance."),
        Sector.HEALTH: _eff(0.82, 0.72, 0.92, _AVG_ACROSS_REGIMES, "Saúde com compliance moderado-alto."),
        Sector.EDUCATION: _eff(0.82, 0.72, 0.90, _AVG_ACROSS_REGIMES, "Educação com formalização moderada."),
        Sector.CONSTRUCTION: _eff(0.65, 0.48, 0.80, _AVG_ACROSS_REGIMES, "Construção com informalidade alta."),
        Sector.FINANCE: _eff(0.95, 0.90, 0.98, _AVG_ACROSS_REGIMES, "Setor financeiro consistentemente alto."),
        Sector.OTHER: _eff(
            0.78, 0.62, 0.90,
            "Média geral estimada (Receita Federal)",
            "Faixa genérica sem regime ou setor definido.",
        ),
    },
}


# ---------------------------------------------------------------------------
# Regime adjustment applied to the new burden
# ---------------------------------------------------------------------------

REGIME_ADJUSTMENT: Mapping[Regime, CitedValue] = {
    Regime.SIMPLIFIED: CitedValue(
        0.4,
        "EC 132/2023, art. 12, §1º: Simples mantém regime próprio",
        "derivada",
        "A empresa do Simples não recolhe IBS/CBS diretamente; o impacto chega pela cadeia de "
        "fornecedores e pela competitividade B2B.",
    ),
    Regime.PRESUMED_PROFIT: CitedValue(
        1.0,
        "LC 214/2025: migração integral do cumulativo para não-cumulativo",
        "derivada",
        "Sai do PIS/Cofins cumulativo (3,65%) para alíquota cheia de IBS+CBS (~26,5%).",
    ),
    Regime.REAL_PROFIT: CitedValue(
        0.75,
        "LC 214/2025: não-cumulatividade plena amplia créditos",
        "derivada",
        "Crédito financeiro pleno amplia a base de créditos de quem já é não-cumulativo.",
    ),
    Regime.UNKNOWN: CitedValue(
        0.85,
        "Média ponderada conservadora entre regimes",
        "derivada",
        "Média conservadora entre Lucro Presumido (1.0) e Lucro Real (0.75).",
    ),
}


# ---------------------------------------------------------------------------
# Transition timeline
# ---------------------------------------------------------------------------

TRANSITION_TIMELINE: Tuple[TransitionEntry, ...] = (
    TransitionEntry(
        2026, 0.1, 0.9,
        "Ano de teste: alíquotas destacadas em NF, sem recolhimento efetivo",
        "EC 132/2023, ADCT art. 124 + LC 214/2025",
        "legislada",
    ),
    TransitionEntry(
        2027, 0.1, 8.8,
        "CBS em vigor pleno. PIS/Cofins extinto. Split payment inicia",
        "EC 132/2023, ADCT art. 125 + LC 214/2025",
        "legislada",
    ),
    TransitionEntry(
        2028, 0.1, 8.8,
        "CBS consolidada. IBS ainda em fase inicial",
        "EC 132/2023, ADCT art. 125",
        "legislada",
    ),
    TransitionEntry(
        2029, 5.0, 8.8,
        "Início da extinção gradual do ICMS e ISS",
        "EC 132/2023, ADCT art. 126",
        "legislada",
    ),
    TransitionEntry(
        2030, 10.0, 8.8,
        "IBS em 2ª fase. ICMS/ISS reduzidos em ~25%",
        "EC 132/2023, ADCT art. 127",
        "estimativa_oficial",
    ),
    TransitionEntry(
        2031, 13.0, 8.8,
        "IBS em 3ª fase. ICMS/ISS reduzidos em ~50%",
        "EC 132/2023, ADCT art. 128",
        "estimativa_oficial",
    ),
    TransitionEntry(
        2032, 15.0, 8.8,
        "IBS em 4ª fase. ICMS/ISS reduzidos em ~75%",
        "EC 132/2023, ADCT art. 129",
        "estimativa_oficial",
    ),
    TransitionEntry(
        2033, 17.7, 8.8,
        "Sistema novo 100% implementado. ICMS/ISS extintos",
        "EC 132/2023, ADCT art. 130-133",
        "legislada",
    ),
)

# IBS+CBS reference rate at full implementation.
REFERENCE_COMBINED_RATE = CitedValue(
    26.5,
    "Nota Técnica Min. Fazenda: alíquota de referência IBS+CBS ~26,5%",
    "estimativa_oficial",
)


# ---------------------------------------------------------------------------
# States with notable ICMS incentive programs (sparse)
# ---------------------------------------------------------------------------

STATE_INCENTIVE_PROGRAMS: Mapping[str, CitedValue] = {
    "AM": CitedValue(
        "Zona Franca de Manaus: incentivos especiais mantidos até 2073 (EC 132/2023, art. 92-A ADCT)",
        "EC 132/2023, ADCT art. 92-A e LC 214/2025, arts. 448-462",
        "legislada",
        "ZFM mantém tratamento diferenciado",
    ),
    "BA": CitedValue(
        "DESENVOLVE e outros incentivos de ICMS: extinção progressiva até 2032",
        "EC 132/2023, ADCT art. 133 + Lei Estadual BA 7.980/2001",
        "legislada",
        "Benefícios fiscais de ICMS serão compensados pelo Fundo de Compensação de Benefícios Fiscais",
    ),
    "GO": CitedValue(
        "PRODUZIR e FOMENTAR: incentivos de ICMS com extinção até 2032",
        "EC 132/2023, ADCT art. 133 + Lei Estadual GO 13.591/2000",
        "legislada",
        "Goiás tem forte dependência de incentivos fiscais de ICMS",
    ),
    "CE": CitedValue(
        "FDI-CEARÁ: incentivos de ICMS com extinção gradual",
        "EC 132/2023, ADCT art. 133 + legislação estadual CE",
        "legislada",
        "Incentivos de ICMS do Ceará serão extintos gradualmente durante a transição",
    ),
    "PE": CitedValue(
        "PRODEPE: incentivos de ICMS com extinção gradual até 2032",
        "EC 132/2023, ADCT art. 133 + Lei Estadual PE 11.675/1999",
        "legislada",
        "Benefícios do PRODEPE serão compensados pelo Fundo de Compensação federal",
    ),
    "SC": CitedValue(
        "TTD e PRÓ-EMPREGO: incentivos de ICMS relevantes com sunset na reforma",
        "EC 132/2023, ADCT art. 133 + legislação estadual SC",
        "legislada",
        "Santa Catarina tem diversos programas de ICMS que serão impactados",
    ),
    "ES": CitedValue(
        "INVEST-ES e COMPETE: incentivos de ICMS em transição",
        "EC 132/2023, ADCT art. 133 + legislação estadual ES",
        "legislada",
        "Espírito Santo com incentivos relevantes para comércio exterior e indústria",
    ),
    "MG": CitedValue(
        "INDI e incentivos de ICMS: extinção progressiva",
        "EC 132/2023, ADCT art. 133 + legislação estadual MG",
        "legislada",
        "Minas Gerais com incentivos industriais relevantes em ICMS",
    ),
}


# ---------------------------------------------------------------------------
# State ICMS modal rates
# ---------------------------------------------------------------------------

_STATE_MODAL_RATES: Dict[str, float] = {
    "AC": 19, "AL": 19, "AP": 18, "AM": 20, "BA": 20.5, "CE": 20, "DF": 20,
    "ES": 17, "GO": 19, "MA": 23, "MT": 17, "MS": 17, "MG": 18, "PA": 19,
    "PB": 20, "PR": 19.5, "PE": 20.5, "PI": 22.5, "RJ": 22, "RN": 18,
    "RS": 17, "RO": 19.5, "RR": 20, "SC": 17, "SP": 18, "SE": 19, "TO": 20,
}

STATE_ICMS_RATES: Mapping[str, CitedValue] = {
    uf: CitedValue(rate, f"Regulamento do ICMS de {uf}: alíquota modal interna", "legislada")
    for uf, rate in _STATE_MODAL_RATES.items()
}

ICMS_REFERENCE_RATE = CitedValue(
    19.0,
    "Média das alíquotas modais internas de ICMS dos 27 estados",
    "derivada",
    "Referência implícita nas faixas de carga atual",
)

# Gross margin used to translate an ICMS rate gap into a burden gap.
GOODS_SECTOR_MARGINS: Mapping[Sector, CitedValue] = {
    Sector.COMMERCE: CitedValue(0.30, "IBGE, Pesquisa Anual do Comércio (margem bruta média)", "derivada"),
    Sector.INDUSTRY: CitedValue(0.35, "IBGE, Pesquisa Industrial Anual (valor adicionado / receita)", "derivada"),
    Sector.AGRIBUSINESS: CitedValue(0.25, "IBGE, Censo Agropecuário (valor adicionado / produção)", "derivada"),
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def revenue_midpoint(bracket: RevenueBracket) -> CitedValue:
    return REVENUE_MIDPOINTS[bracket]


def current_burden(regime: Regime, sector: Sector) -> CitedValue:
    return CURRENT_BURDEN[regime][sector]


def new_burden(sector: Sector) -> CitedValue:
    return NEW_BURDEN[sector]


def effectiveness_factor(regime: Regime, sector: Sector) -> CitedValue:
    return EFFECTIVENESS_FACTOR[regime][sector]


def regime_adjustment(regime: Regime) -> CitedValue:
    return REGIME_ADJUSTMENT[regime]


def state_incentive(state: Optional[str]) -> Optional[CitedValue]:
    if not state:
        return None
    return STATE_INCENTIVE_PROGRAMS.get(state.upper())


def state_icms_rate(state: Optional[str]) -> Optional[CitedValue]:
    if not state:
        return None
    return STATE_ICMS_RATES.get(state.upper())


# ---------------------------------------------------------------------------
# Provenance helpers
# ---------------------------------------------------------------------------

def collect_sources(
    regime: Regime,
    sector: Sector,
    bracket: RevenueBracket,
    state: Optional[str] = None,
) -> List[str]:
    """Return the deduplicated citations behind one calculation, in first-seen order."""

    sources: Dict[str, None] = {}
    sources[REVENUE_MIDPOINTS[bracket].source] = None
    sources[CURRENT_BURDEN[regime][sector].source] = None
    sources[NEW_BURDEN[sector].source] = None
    sources[REGIME_ADJUSTMENT[regime].source] = None
    sources[EFFECTIVENESS_FACTOR[regime][sector].source] = None
    for entry in TRANSITION_TIMELINE:
        sources[entry.source] = None
    incentive = state_incentive(state)
    if incentive is not None:
        sources[incentive.source] = None
    return list(sources)


def collect_limitations(regime: Regime, sector: Sector) -> List[str]:
    limitations = [
        "Alíquotas finais de IBS/CBS ainda não foram definidas pelo Senado Federal",
        "A simulação usa médias por faixa de faturamento, não valores exatos",
        "Créditos tributários dependem da estrutura de custos individual de cada empresa",
        "A carga tributária 'atual' reflete a média efetiva do setor (dados públicos da Receita Federal), "
        "que pode ser menor que a alíquota legal. Empresas 100% formalizadas terão impacto menor que o estimado",
        "Esta simulação não substitui consultoria tributária profissional",
    ]
    if regime is Regime.UNKNOWN:
        limitations.append("Regime tributário não informado: resultados menos precisos")
    if regime is Regime.SIMPLIFIED:
        limitations.append("Impacto no Simples é predominantemente indireto (competitividade B2B)")
    if sector is Sector.OTHER:
        limitations.append(
            "Setor genérico: alíquotas podem variar significativamente conforme atividade específica"
        )
    return limitations


def determine_confidence(regime: Regime, sector: Sector) -> ConfidenceLevel:
    if regime is Regime.UNKNOWN:
        return "baixa"
    if sector is Sector.OTHER:
        return "baixa"
    if NEW_BURDEN[sector].confidence == "legislada":
        return "alta"
    return "media"
