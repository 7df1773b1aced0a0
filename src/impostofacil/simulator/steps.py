"""Adaptive question flow.

The step list is fixed and ordered; conditional steps carry a predicate over
the answers collected so far. Re-evaluate :func:`get_active_steps` after
every answer since later steps depend on earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from impostofacil.simulator.models import ClientProfile, CostType, IncentiveAnswer, Regime, Sector
from impostofacil.simulator.tax_data import STATE_INCENTIVE_PROGRAMS


class StepAnswers(BaseModel):
    """Answers collected so far by the question flow."""

    sector: Optional[Sector] = None
    state: Optional[str] = None
    regime: Optional[Regime] = None
    has_state_incentive: Optional[IncentiveAnswer] = None
    exact_revenue: Optional[float] = None
    payroll_ratio: Optional[float] = None
    cost_type: Optional[CostType] = None
    client_profile: Optional[ClientProfile] = None
    exports_services: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("state", mode="before")
    @classmethod
    def _normalize_state(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value).strip().upper()


@dataclass(frozen=True)
class StepDefinition:
    id: str
    title: str
    subtitle: str
    condition: Optional[Callable[[StepAnswers], bool]] = None

    def is_active(self, answers: StepAnswers) -> bool:
        return self.condition is None or self.condition(answers)


@dataclass(frozen=True)
class StepProgress:
    current: int
    total: int


_EXPORT_SECTORS = (Sector.TECHNOLOGY, Sector.SERVICES, Sector.EDUCATION)


def _state_has_incentive_program(answers: StepAnswers) -> bool:
    return bool(answers.state) and answers.state in STATE_INCENTIVE_PROGRAMS


def _sector_exports_services(answers: StepAnswers) -> bool:
    return answers.sector in _EXPORT_SECTORS


STEP_DEFINITIONS: List[StepDefinition] = [
    StepDefinition(
        "setor",
        "Qual o setor da sua empresa?",
        "Alguns setores serão mais impactados pela reforma",
    ),
    StepDefinition(
        "uf",
        "Em qual estado sua empresa está?",
        "A localização influencia incentivos e alíquotas",
    ),
    StepDefinition(
        "icms",
        "Sua empresa tem incentivo fiscal de ICMS?",
        "Benefícios como PRODUZIR, DESENVOLVE ou similares do seu estado",
        condition=_state_has_incentive_program,
    ),
    StepDefinition(
        "regime",
        "Qual o regime tributário?",
        "Isso determina como a reforma vai te impactar",
    ),
    StepDefinition(
        "faturamento",
        "Qual o faturamento anual?",
        "Use o valor aproximado: quanto mais preciso, melhor o resultado",
    ),
    StepDefinition(
        "folha",
        "Quanto da receita vai para folha de pagamento?",
        "Folha não gera crédito de IBS/CBS, e isso impacta sua carga",
    ),
    StepDefinition(
        "custo",
        "Qual o principal tipo de custo?",
        "Custos com insumos geram crédito; folha não",
    ),
    StepDefinition(
        "clientes",
        "Para quem você vende?",
        "Clientes PJ no Simples não aproveitam crédito integral",
    ),
    StepDefinition(
        "exporta",
        "Sua empresa exporta serviços?",
        "Exportação de serviços para o exterior",
        condition=_sector_exports_services,
    ),
]

STEP_IDS = tuple(step.id for step in STEP_DEFINITIONS)


def get_active_steps(answers: StepAnswers) -> List[StepDefinition]:
    return [step for step in STEP_DEFINITIONS if step.is_active(answers)]


def get_step_progress(active_steps: List[StepDefinition], current_index: int) -> StepProgress:
    """1-indexed position for progress display."""

    return StepProgress(current=current_index + 1, total=len(active_steps))
