"""Mapping between stored user profile records and :class:`SimulatorInput`."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from impostofacil.simulator.models import Regime, RevenueBracket, SimulatorInput
from impostofacil.simulator.options import REGIME_LABELS

logger = logging.getLogger(__name__)

# Profile records store the display label of the regime.
_REGIME_BY_LABEL: Dict[str, Regime] = {
    label: regime for regime, label in REGIME_LABELS.items() if regime is not Regime.UNKNOWN
}

_SIZE_BY_BRACKET: Dict[RevenueBracket, str] = {
    RevenueBracket.MEI: "MEI",
    RevenueBracket.ME: "ME",
    RevenueBracket.EPP: "EPP",
    RevenueBracket.MEDIUM: "MEDIO",
    RevenueBracket.LARGE: "GRANDE",
}


def _to_number(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric profile field %s=%r", field_name, value)
        return None


def _to_regime(value: Any) -> Regime:
    if not value:
        return Regime.UNKNOWN
    text = str(value).strip()
    if text in _REGIME_BY_LABEL:
        return _REGIME_BY_LABEL[text]
    try:
        return Regime(text)
    except ValueError:
        return Regime.UNKNOWN


def build_simulator_input_from_profile(profile: Mapping[str, Any]) -> Optional[SimulatorInput]:
    """Project a stored profile onto the simulator input.

    Returns ``None`` only when sector, revenue bracket and state are all
    missing; any other gap degrades to the unknown members.
    """

    sector = profile.get("setor")
    bracket = profile.get("faturamento")
    state = profile.get("uf")
    if not sector and not bracket and not state:
        return None

    payload: Dict[str, Any] = {
        "regime": _to_regime(profile.get("regime_tributario")),
        "sector": sector,
        "revenue_bracket": bracket,
        "state": state or "",
    }
    exact = _to_number(profile.get("faturamento_exato"), "faturamento_exato")
    if exact is not None and exact >= 0:
        payload["exact_revenue"] = exact
    payroll = _to_number(profile.get("fator_r_estimado"), "fator_r_estimado")
    if payroll is not None and 0 <= payroll <= 100:
        payload["payroll_ratio"] = payroll
    if profile.get("tipo_custo_principal"):
        payload["cost_type"] = profile["tipo_custo_principal"]
    b2b = _to_number(profile.get("pct_b2b"), "pct_b2b")
    if b2b is not None and 0 <= b2b <= 100:
        payload["b2b_percent"] = b2b
    if profile.get("tem_incentivo_icms"):
        payload["has_state_incentive"] = profile["tem_incentivo_icms"]
    if profile.get("exporta_servicos") is not None:
        payload["exports_services"] = bool(profile["exporta_servicos"])

    return SimulatorInput(**payload)


def simulator_input_to_profile(data: SimulatorInput) -> Dict[str, str]:
    """Inverse projection used to seed a profile from an anonymous simulation."""

    bracket = data.revenue_bracket
    return {
        "uf": data.state,
        "setor": data.sector.value,
        "porte_empresa": _SIZE_BY_BRACKET[bracket] if bracket is not None else "",
        "regime_tributario": "" if data.regime is Regime.UNKNOWN else REGIME_LABELS[data.regime],
        "faturamento": bracket.value if bracket is not None else "",
    }
