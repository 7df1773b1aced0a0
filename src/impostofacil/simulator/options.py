"""Display labels and small conversions shared by the simulator surfaces."""

from __future__ import annotations

import math
from typing import Dict, List, Optional

from impostofacil.simulator.models import ClientProfile, CostType, Regime, RevenueBracket, Sector

SECTOR_OPTIONS: List[Dict[str, str]] = [
    {"value": Sector.SERVICES.value, "label": "Serviços", "emoji": "💼"},
    {"value": Sector.COMMERCE.value, "label": "Comércio", "emoji": "🛒"},
    {"value": Sector.INDUSTRY.value, "label": "Indústria", "emoji": "🏭"},
    {"value": Sector.TECHNOLOGY.value, "label": "Tecnologia / SaaS", "emoji": "💻"},
    {"value": Sector.HEALTH.value, "label": "Saúde", "emoji": "🏥"},
    {"value": Sector.EDUCATION.value, "label": "Educação", "emoji": "📚"},
    {"value": Sector.AGRIBUSINESS.value, "label": "Agronegócio", "emoji": "🌾"},
    {"value": Sector.CONSTRUCTION.value, "label": "Construção Civil", "emoji": "🏗️"},
    {"value": Sector.FINANCE.value, "label": "Serviços Financeiros", "emoji": "🏦"},
    {"value": Sector.OTHER.value, "label": "Outro", "emoji": "📦"},
]

STATE_NAMES: Dict[str, str] = {
    "AC": "Acre",
    "AL": "Alagoas",
    "AP": "Amapá",
    "AM": "Amazonas",
    "BA": "Bahia",
    "CE": "Ceará",
    "DF": "Distrito Federal",
    "ES": "Espírito Santo",
    "GO": "Goiás",
    "MA": "Maranhão",
    "MT": "Mato Grosso",
    "MS": "Mato Grosso do Sul",
    "MG": "Minas Gerais",
    "PA": "Pará",
    "PB": "Paraíba",
    "PR": "Paraná",
    "PE": "Pernambuco",
    "PI": "Piauí",
    "RJ": "Rio de Janeiro",
    "RN": "Rio Grande do Norte",
    "RS": "Rio Grande do Sul",
    "RO": "Rondônia",
    "RR": "Roraima",
    "SC": "Santa Catarina",
    "SP": "São Paulo",
    "SE": "Sergipe",
    "TO": "Tocantins",
}

STATE_OPTIONS: List[Dict[str, str]] = [{"value": uf, "label": name} for uf, name in STATE_NAMES.items()]

REGIME_OPTIONS: List[Dict[str, str]] = [
    {
        "value": Regime.SIMPLIFIED.value,
        "label": "Simples Nacional",
        "description": "Regime simplificado para micro e pequenas empresas",
    },
    {
        "value": Regime.PRESUMED_PROFIT.value,
        "label": "Lucro Presumido",
        "description": "Base de cálculo presumida pela Receita",
    },
    {
        "value": Regime.REAL_PROFIT.value,
        "label": "Lucro Real",
        "description": "Tributação sobre o lucro efetivo",
    },
    {
        "value": Regime.UNKNOWN.value,
        "label": "Não tenho certeza",
        "description": "Vamos estimar com base no seu perfil",
    },
]

COST_TYPE_OPTIONS: List[Dict[str, str]] = [
    {"value": CostType.MATERIALS.value, "label": "Materiais / Insumos", "description": "Matéria-prima, mercadorias, produtos"},
    {"value": CostType.SERVICES.value, "label": "Serviços terceirizados", "description": "Consultorias, freelancers, TI"},
    {"value": CostType.PAYROLL.value, "label": "Folha de pagamento", "description": "Salários, encargos, benefícios"},
    {"value": CostType.MIXED.value, "label": "Misto / Equilibrado", "description": "Custos bem distribuídos"},
]

CLIENT_PROFILE_OPTIONS: List[Dict[str, str]] = [
    {"value": ClientProfile.B2B.value, "label": "Empresas (B2B)", "description": "Vendo principalmente para outras empresas"},
    {"value": ClientProfile.B2C.value, "label": "Consumidores (B2C)", "description": "Vendo para pessoas físicas"},
    {"value": ClientProfile.MIXED.value, "label": "Ambos", "description": "Vendo para empresas e consumidores"},
]

SECTOR_LABELS: Dict[Sector, str] = {Sector(opt["value"]): opt["label"] for opt in SECTOR_OPTIONS}

# Labels stored on profile records.
REGIME_LABELS: Dict[Regime, str] = {
    Regime.SIMPLIFIED: "Simples Nacional",
    Regime.PRESUMED_PROFIT: "Lucro Presumido",
    Regime.REAL_PROFIT: "Lucro Real",
    Regime.UNKNOWN: "Não informado",
}

_BRACKET_CEILINGS = (
    (81_000, RevenueBracket.MEI),
    (360_000, RevenueBracket.ME),
    (4_800_000, RevenueBracket.EPP),
    (78_000_000, RevenueBracket.MEDIUM),
)


def derive_revenue_bracket(amount: float) -> RevenueBracket:
    """Map an annual revenue amount to its bracket (upper bounds inclusive)."""

    for ceiling, bracket in _BRACKET_CEILINGS:
        if amount <= ceiling:
            return bracket
    return RevenueBracket.LARGE


def pct_b2b_to_client_profile(pct_b2b: Optional[float]) -> ClientProfile:
    if pct_b2b is None:
        return ClientProfile.MIXED
    if pct_b2b >= 70:
        return ClientProfile.B2B
    if pct_b2b <= 30:
        return ClientProfile.B2C
    return ClientProfile.MIXED


def round_half_up(value: float) -> int:
    """Round halves towards positive infinity (2.5 -> 3, -2.5 -> -2)."""

    return int(math.floor(value + 0.5))


def format_brl(value: float) -> str:
    """Format an amount with pt-BR thousands separators and no decimals.

    >>> format_brl(1234567)
    '1.234.567'
    """

    rounded = round_half_up(value)
    sign = "-" if rounded < 0 else ""
    return sign + f"{abs(rounded):,}".replace(",", ".")
