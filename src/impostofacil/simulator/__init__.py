"""Reform impact simulator: registry, calculator, mistakes and question flow."""

from impostofacil.simulator.calculator import calculate, generate_teaser
from impostofacil.simulator.common_mistakes import (
    CommonMistake,
    format_mistakes_for_chat,
    get_common_mistakes,
)
from impostofacil.simulator.insights import Insight, get_contextualizer, get_step_insight
from impostofacil.simulator.models import (
    ClientProfile,
    CostType,
    Regime,
    RevenueBracket,
    Sector,
    SimulatorInput,
    SimulatorResult,
    SimulatorTeaser,
)
from impostofacil.simulator.profile import (
    build_simulator_input_from_profile,
    simulator_input_to_profile,
)
from impostofacil.simulator.snapshots import SimulatorSnapshot, SnapshotCache
from impostofacil.simulator.steps import (
    STEP_DEFINITIONS,
    StepAnswers,
    StepDefinition,
    get_active_steps,
    get_step_progress,
)

__all__ = [
    "ClientProfile",
    "CommonMistake",
    "CostType",
    "Insight",
    "Regime",
    "RevenueBracket",
    "STEP_DEFINITIONS",
    "Sector",
    "SimulatorInput",
    "SimulatorResult",
    "SimulatorSnapshot",
    "SimulatorTeaser",
    "SnapshotCache",
    "StepAnswers",
    "StepDefinition",
    "build_simulator_input_from_profile",
    "calculate",
    "format_mistakes_for_chat",
    "generate_teaser",
    "get_active_steps",
    "get_common_mistakes",
    "get_contextualizer",
    "get_step_insight",
    "get_step_progress",
    "simulator_input_to_profile",
]
