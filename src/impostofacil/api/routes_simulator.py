from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from impostofacil.simulator.calculator import calculate, generate_teaser
from impostofacil.simulator.common_mistakes import (
    DEFAULT_MAX_ITEMS,
    CommonMistake,
    format_mistakes_for_chat,
    get_common_mistakes,
)
from impostofacil.simulator.insights import get_contextualizer, get_step_insight
from impostofacil.simulator.models import SimulatorInput, SimulatorResult, SimulatorTeaser
from impostofacil.simulator.options import (
    CLIENT_PROFILE_OPTIONS,
    COST_TYPE_OPTIONS,
    REGIME_OPTIONS,
    SECTOR_OPTIONS,
    STATE_OPTIONS,
)
from impostofacil.simulator.snapshots import SimulatorSnapshot, SnapshotCache
from impostofacil.simulator.steps import STEP_IDS, StepAnswers, get_active_steps, get_step_progress

router = APIRouter(prefix="/v1/simulator", tags=["simulator"])


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------
class SimulateResponse(BaseModel):
    result: SimulatorResult
    teaser: SimulatorTeaser
    snapshot_key: Optional[str] = None


class CommonMistakesRequest(BaseModel):
    input: SimulatorInput
    max_items: int = Field(default=DEFAULT_MAX_ITEMS, ge=0, le=20)

    model_config = ConfigDict(extra="forbid")


class CommonMistakesResponse(BaseModel):
    mistakes: List[CommonMistake]
    chat_context: str


class StepsRequest(BaseModel):
    answers: StepAnswers = Field(default_factory=StepAnswers)
    current_step: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class StepModel(BaseModel):
    id: str
    title: str
    subtitle: str
    contextualizer: str


class ProgressModel(BaseModel):
    current: int
    total: int


class InsightModel(BaseModel):
    emoji: str
    headline: str
    detail: str
    duration_ms: int


class StepsResponse(BaseModel):
    steps: List[StepModel]
    progress: Optional[ProgressModel] = None
    insight: Optional[InsightModel] = None


def get_snapshot_cache(request: Request) -> SnapshotCache:
    snapshots = request.app.state.snapshots
    if snapshots is None:
        raise HTTPException(status_code=503, detail="snapshot storage is not ready")
    return snapshots


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
@router.get("/options")
def list_options() -> Dict[str, Any]:
    """Choices offered by the question flow."""

    return {
        "sectors": SECTOR_OPTIONS,
        "states": STATE_OPTIONS,
        "regimes": REGIME_OPTIONS,
        "cost_types": COST_TYPE_OPTIONS,
        "client_profiles": CLIENT_PROFILE_OPTIONS,
    }


@router.post("/simulate", response_model=SimulateResponse)
def simulate(
    data: SimulatorInput,
    request: Request,
    snapshot_key: Optional[str] = Query(default=None, min_length=1, max_length=128),
) -> SimulateResponse:
    """Run the simulation; with ``snapshot_key`` the run is kept for later pickup."""

    result = calculate(data)
    teaser = generate_teaser(result, data)
    if snapshot_key:
        get_snapshot_cache(request).save(data, result, teaser, key=snapshot_key)
    return SimulateResponse(result=result, teaser=teaser, snapshot_key=snapshot_key)


@router.get("/snapshots/{snapshot_key}", response_model=SimulatorSnapshot)
def read_snapshot(
    snapshot_key: str,
    snapshots: SnapshotCache = Depends(get_snapshot_cache),
) -> SimulatorSnapshot:
    snapshot = snapshots.load(snapshot_key)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Snapshot not found or expired")
    return snapshot


@router.post("/common-mistakes", response_model=CommonMistakesResponse)
def common_mistakes(request: CommonMistakesRequest) -> CommonMistakesResponse:
    result = calculate(request.input)
    return CommonMistakesResponse(
        mistakes=get_common_mistakes(request.input, result, request.max_items),
        chat_context=format_mistakes_for_chat(request.input, result),
    )


@router.post("/steps", response_model=StepsResponse)
def active_steps(request: StepsRequest) -> StepsResponse:
    """Steps to ask given the answers so far, plus progress and insight for ``current_step``."""

    steps = get_active_steps(request.answers)
    response = StepsResponse(
        steps=[
            StepModel(
                id=step.id,
                title=step.title,
                subtitle=step.subtitle,
                contextualizer=get_contextualizer(step.id),
            )
            for step in steps
        ]
    )
    if request.current_step is None:
        return response
    if request.current_step not in STEP_IDS:
        raise HTTPException(status_code=404, detail=f"Unknown step: {request.current_step}")

    active_ids = [step.id for step in steps]
    if request.current_step in active_ids:
        progress = get_step_progress(steps, active_ids.index(request.current_step))
        response.progress = ProgressModel(**asdict(progress))
    insight = get_step_insight(request.current_step, request.answers)
    if insight is not None:
        response.insight = InsightModel(**asdict(insight))
    return response


@router.get("/steps/{step_id}/contextualizer")
def step_contextualizer(step_id: str) -> Dict[str, str]:
    if step_id not in STEP_IDS:
        raise HTTPException(status_code=404, detail=f"Unknown step: {step_id}")
    return {"step_id": step_id, "text": get_contextualizer(step_id)}
