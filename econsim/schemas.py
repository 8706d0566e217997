"""
Pydantic schemas for the econsim decision engine.

All data structures shared by the engine, the session store and the catalog
are defined here.

Design Philosophy:
- State is an open mapping of metric key -> number (no per-simulation struct)
- Authored content (metrics, decisions, steps, simulations) is validated once
  when the catalog is loaded and treated as read-only afterwards
- Every model serializes with camelCase aliases, so persisted sessions and the
  JSON catalog files share one wire shape; Python code uses snake_case names
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .rounds import is_summary_step_id, parse_round_number


# StateValue is always numeric. Absent keys read as 0 (see get_metric_value).
SimulationState = Dict[str, float]
# Effects may carry None deltas; those keys are skipped rather than treated as 0.
EffectMap = Dict[str, Optional[float]]

MetricFormat = Literal["percent", "currency", "integer", "index"]
ChartType = Literal["line", "bar"]


def get_metric_value(state: SimulationState, key: str) -> float:
    """Read a metric from a state snapshot, defaulting to 0 when absent."""
    return state.get(key, 0)


class EconsimModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Authored content
# ============================================================================


class MetricDefinition(EconsimModel):
    """One tracked quantity of a simulation.

    Only `key`, `min` and `max` matter to the engine. `format` drives the
    formatting helpers; `label` and `chart_type` are presentation hints.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Unique metric identifier within a simulation")
    label: str = Field(..., description="Display name")
    format: MetricFormat = Field(..., description="percent, currency, integer or index")
    min: Optional[float] = Field(None, description="Lower clamp bound")
    max: Optional[float] = Field(None, description="Upper clamp bound")
    chart_type: ChartType = Field("line", description="Presentation hint for result charts")

    @model_validator(mode="after")
    def _check_bounds(self) -> "MetricDefinition":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(
                f"Metric '{self.key}' has min {self.min} greater than max {self.max}"
            )
        return self


class Decision(EconsimModel):
    """An authored choice inside a step."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique within its step")
    text: str = Field(..., description="Choice label")
    # Signed deltas keyed by metric. Keys not listed are left untouched.
    effects: EffectMap = Field(default_factory=dict, description="Metric key -> delta")
    feedback: Optional[str] = Field(None, description="Narrative shown after selection")


class DecisionStep(EconsimModel):
    """One node of a simulation's linear sequence.

    `round_number` and `is_summary` are first-class fields. Content that omits
    them gets values derived from the id convention (`r<N>_` prefix,
    `_summary` suffix) at validation time; explicit values always win.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique step identifier")
    event: str = Field(..., description="Narrative event text")
    # 0 decisions for informational/summary steps, otherwise 2..N options
    decisions: List[Decision] = Field(default_factory=list)
    # Exogenous shock applied once when the step is first entered
    external_effects: Optional[EffectMap] = Field(None)
    ai_explanation: Optional[str] = Field(None, description="Didactic explanation")
    round_number: Optional[int] = Field(None, ge=1)
    is_summary: Optional[bool] = Field(None)

    @model_validator(mode="before")
    @classmethod
    def _derive_round_fields(cls, data: Any) -> Any:
        # Derived values go through field validation like explicit ones
        if not isinstance(data, dict) or not isinstance(data.get("id"), str):
            return data

        data = dict(data)
        if data.get("roundNumber", data.get("round_number")) is None:
            data.pop("round_number", None)
            data["roundNumber"] = parse_round_number(data["id"])
        if data.get("isSummary", data.get("is_summary")) is None:
            data.pop("is_summary", None)
            data["isSummary"] = is_summary_step_id(data["id"])
        return data

    @model_validator(mode="after")
    def _check_unique_decisions(self) -> "DecisionStep":
        seen: Set[str] = set()
        for decision in self.decisions:
            if decision.id in seen:
                raise ValueError(
                    f"Step '{self.id}' has duplicate decision id '{decision.id}'"
                )
            seen.add(decision.id)
        return self

    def get_decision(self, decision_id: str) -> Optional[Decision]:
        for decision in self.decisions:
            if decision.id == decision_id:
                return decision
        return None


class ResultsConfig(EconsimModel):
    """Which metric keys the results view charts and summarizes."""

    chart_metrics: List[str] = Field(default_factory=list)
    summary_metrics: List[str] = Field(default_factory=list)


class Simulation(EconsimModel):
    """Top-level authored unit: metadata, metrics, initial state and steps."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Catalog identifier")
    title: str
    description: str
    tags: List[str] = Field(default_factory=list)
    time_estimate: str = Field("", description="Human estimate, e.g. '2-3 mins'")
    concepts: List[str] = Field(default_factory=list)
    context: str = Field("", description="Story context shown before play")
    initial_state: SimulationState
    metrics: List[MetricDefinition] = Field(default_factory=list)
    steps: List[DecisionStep] = Field(default_factory=list)
    results_config: Optional[ResultsConfig] = None
    reflection_questions: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "Simulation":
        step_ids = [step.id for step in self.steps]
        duplicates = sorted({sid for sid in step_ids if step_ids.count(sid) > 1})
        if duplicates:
            raise ValueError(f"Simulation '{self.id}' has duplicate step ids: {duplicates}")

        metric_keys = [metric.key for metric in self.metrics]
        duplicates = sorted({key for key in metric_keys if metric_keys.count(key) > 1})
        if duplicates:
            raise ValueError(f"Simulation '{self.id}' has duplicate metric keys: {duplicates}")
        return self

    @property
    def declared_keys(self) -> Set[str]:
        return {metric.key for metric in self.metrics}

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def metric(self, key: str) -> Optional[MetricDefinition]:
        for metric in self.metrics:
            if metric.key == key:
                return metric
        return None

    def get_step(self, step_id: str) -> Optional[DecisionStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def step_index(self, step_id: str) -> Optional[int]:
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        return None

    def undeclared_effect_keys(self) -> Set[str]:
        """Effect keys that no MetricDefinition declares.

        Writes to undeclared keys are allowed by the engine (they are simply
        never clamped), but in authored content they are almost always typos.
        Simulations without any metric definitions are exempt.
        """
        if not self.metrics:
            return set()

        declared = self.declared_keys
        used: Set[str] = set()
        for step in self.steps:
            used.update(step.external_effects or {})
            for decision in step.decisions:
                used.update(decision.effects)
        return used - declared

    def summary_metric_keys(self) -> List[str]:
        if self.results_config and self.results_config.summary_metrics:
            return list(self.results_config.summary_metrics)
        return [metric.key for metric in self.metrics]

    def chart_metric_keys(self) -> List[str]:
        if self.results_config and self.results_config.chart_metrics:
            return list(self.results_config.chart_metrics)
        return [metric.key for metric in self.metrics]


# ============================================================================
# Run state
# ============================================================================


class DecisionRecord(EconsimModel):
    """Immutable audit entry pairing a decision with before/after snapshots."""

    model_config = ConfigDict(frozen=True)

    step_id: str
    decision_id: str
    decision_text: str
    state_before: SimulationState
    state_after: SimulationState
    # Wall-clock time of creation. Used for display ordering only.
    timestamp: datetime


class SimulationSession(EconsimModel):
    """Mutable progress record for one run through one simulation.

    `current_step` doubles as the completion marker: a value at or past the
    number of steps means the run is complete.
    """

    simulation_id: str
    current_step: int = Field(0, ge=0)
    state: SimulationState = Field(default_factory=dict)
    decision_history: List[DecisionRecord] = Field(default_factory=list)
    started_at: datetime
    # Step ids whose external effects were already applied (idempotency guard)
    external_effects_applied: List[str] = Field(default_factory=list)

    def is_completed(self, total_steps: int) -> bool:
        return self.current_step >= total_steps

    def has_applied_external_effects(self, step_id: str) -> bool:
        return step_id in self.external_effects_applied


class SimulationResult(EconsimModel):
    """Final outcome of a completed run, consumed by the results view."""

    simulation_id: str
    initial_state: SimulationState
    final_state: SimulationState
    decision_history: List[DecisionRecord]
    completed_at: datetime


class MetricChange(EconsimModel):
    """Start-to-end movement of one summary metric."""

    key: str
    label: str
    initial: float
    final: float
    delta: float
