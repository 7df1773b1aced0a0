"""Input and result schemas for the reform impact simulator."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Regime(str, Enum):
    SIMPLIFIED = "simples"
    PRESUMED_PROFIT = "lucro_presumido"
    REAL_PROFIT = "lucro_real"
    UNKNOWN = "nao_sei"


class Sector(str, Enum):
    COMMERCE = "comercio"
    INDUSTRY = "industria"
    SERVICES = "servicos"
    AGRIBUSINESS = "agronegocio"
    TECHNOLOGY = "tecnologia"
    HEALTH = "saude"
    EDUCATION = "educacao"
    CONSTRUCTION = "construcao"
    FINANCE = "financeiro"
    OTHER = "outro"


class RevenueBracket(str, Enum):
    """Annual revenue bands, ordered from micro-entrepreneur to large enterprise."""

    MEI = "ate_81k"
    ME = "81k_360k"
    EPP = "360k_4.8m"
    MEDIUM = "4.8m_78m"
    LARGE = "acima_78m"


class CostType(str, Enum):
    MATERIALS = "materiais"
    SERVICES = "servicos"
    PAYROLL = "folha"
    MIXED = "misto"


class ClientProfile(str, Enum):
    B2B = "b2b"
    B2C = "b2c"
    MIXED = "misto"


RiskLevel = Literal["baixo", "medio", "alto", "critico"]
Urgency = Literal["info", "warning", "danger"]
ConfidenceLevel = Literal["alta", "media", "baixa"]
FormalizationPressure = Literal["baixa", "moderada", "alta", "muito_alta"]
IncentiveAnswer = Literal["sim", "nao", "nao_sei"]

# Bracket used when neither a bracket nor an exact revenue is known.
DEFAULT_REVENUE_BRACKET = RevenueBracket.EPP


def _coerce_enum(enum_cls: type[Enum], value: Any, fallback: Enum) -> Enum:
    if value is None or value == "":
        return fallback
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        return fallback


class SimulatorInput(BaseModel):
    """Profile projection consumed by :func:`calculate`.

    Every field is optional on the wire. Unrecognised regime or sector values
    degrade to ``nao_sei``/``outro`` instead of failing validation, so a
    partially filled profile still yields a (lower confidence) simulation.
    """

    regime: Regime = Regime.UNKNOWN
    sector: Sector = Sector.OTHER
    revenue_bracket: Optional[RevenueBracket] = None
    state: str = ""
    exact_revenue: Optional[float] = Field(default=None, ge=0)
    payroll_ratio: Optional[float] = Field(default=None, ge=0, le=100)
    cost_type: Optional[CostType] = None
    client_profile: Optional[ClientProfile] = None
    b2b_percent: Optional[float] = Field(default=None, ge=0, le=100)
    has_state_incentive: Optional[IncentiveAnswer] = None
    exports_services: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("regime", mode="before")
    @classmethod
    def _coerce_regime(cls, value: Any) -> Regime:
        return _coerce_enum(Regime, value, Regime.UNKNOWN)  # type: ignore[return-value]

    @field_validator("sector", mode="before")
    @classmethod
    def _coerce_sector(cls, value: Any) -> Sector:
        return _coerce_enum(Sector, value, Sector.OTHER)  # type: ignore[return-value]

    @field_validator("revenue_bracket", mode="before")
    @classmethod
    def _coerce_bracket(cls, value: Any) -> Optional[RevenueBracket]:
        if value is None or value == "":
            return None
        try:
            return RevenueBracket(str(value).strip())
        except ValueError:
            return None

    @field_validator("cost_type", mode="before")
    @classmethod
    def _coerce_cost_type(cls, value: Any) -> Optional[CostType]:
        if value is None or value == "":
            return None
        try:
            return CostType(str(value).strip())
        except ValueError:
            return None

    @field_validator("client_profile", mode="before")
    @classmethod
    def _coerce_client_profile(cls, value: Any) -> Optional[ClientProfile]:
        if value is None or value == "":
            return None
        try:
            return ClientProfile(str(value).strip())
        except ValueError:
            return None

    @field_validator("has_state_incentive", mode="before")
    @classmethod
    def _coerce_incentive(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return "sim" if value else "nao"
        text = str(value).strip()
        return text if text in ("sim", "nao", "nao_sei") else None

    @field_validator("state", mode="before")
    @classmethod
    def _normalize_state(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip().upper()

    def effective_b2b_percent(self) -> Optional[float]:
        """Explicit B2B share, else the share implied by the client profile."""

        if self.b2b_percent is not None:
            return self.b2b_percent
        if self.client_profile is ClientProfile.B2B:
            return 85
        if self.client_profile is ClientProfile.B2C:
            return 15
        if self.client_profile is ClientProfile.MIXED:
            return 50
        return None


class AnnualImpactModel(BaseModel):
    """Monetary delta range (R$/year) and average percentage change."""

    min: int
    max: int
    percent: int

    model_config = ConfigDict(extra="forbid")


class KeyDateModel(BaseModel):
    date: str
    description: str
    urgency: Urgency

    model_config = ConfigDict(extra="forbid")


class MethodologyModel(BaseModel):
    summary: str
    confidence: ConfidenceLevel
    sources: List[str]
    limitations: List[str]
    last_updated: str

    model_config = ConfigDict(extra="forbid")


class TaxEffectivenessModel(BaseModel):
    """Declared vs statutory burden and the cost of closing the gap."""

    effectiveness_factor: float
    effective_burden_pct: float
    statutory_burden_pct: float
    rate_change_impact: int
    formalization_impact: int
    total_estimated_impact: int
    formalization_pressure: FormalizationPressure

    model_config = ConfigDict(extra="forbid")


class StateIcmsAdjustmentModel(BaseModel):
    state_rate: float
    reference_rate: float
    estimated_margin: float
    adjustment_pp: float
    direction: Literal["favoravel", "desfavoravel", "neutro"]
    state_source: str

    model_config = ConfigDict(extra="forbid")


class YearProjectionModel(BaseModel):
    year: int
    ibs_rate: float
    cbs_rate: float
    estimated_burden: int
    difference_vs_current: int
    description: str

    model_config = ConfigDict(extra="forbid")


class RegimeAnalysisModel(BaseModel):
    current_regime: str
    suggested_regime: Optional[str] = None
    estimated_savings: Optional[int] = None
    justification: str
    factors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class GatedContentModel(BaseModel):
    """Paid-tier bundle. Always computed; visibility is decided by consumers."""

    full_checklist: List[str]
    detailed_analysis: str
    regime_comparison: bool
    yearly_projection: List[YearProjectionModel]
    regime_analysis: Optional[RegimeAnalysisModel] = None
    tax_effectiveness: TaxEffectivenessModel

    model_config = ConfigDict(extra="forbid")


class SimulatorResult(BaseModel):
    annual_impact: AnnualImpactModel
    risk_level: RiskLevel
    alerts: List[str]
    key_dates: List[KeyDateModel]
    recommended_actions: List[str]
    methodology: MethodologyModel
    profile_confidence: int = Field(ge=0, le=100)
    state_icms_adjustment: Optional[StateIcmsAdjustmentModel] = None
    gated_content: GatedContentModel

    model_config = ConfigDict(extra="forbid")


class SimulatorTeaser(BaseModel):
    impact_summary: str
    risk_level: RiskLevel
    main_alert: str
    cta_text: str

    model_config = ConfigDict(extra="forbid")
