"""
Decision history: audit records and the result views built from them.

A run's decision history is an append-only list of DecisionRecord entries.
Each record holds its own copies of the before/after snapshots, so later
changes to the live state never rewrite history.
"""

from datetime import datetime, timezone
from typing import List, Sequence

from .schemas import (
    Decision,
    DecisionRecord,
    MetricChange,
    Simulation,
    SimulationResult,
    SimulationSession,
    SimulationState,
    get_metric_value,
)

# Summary metrics that moved less than this are reported as unchanged.
CHANGE_EPSILON = 0.01


def create_decision_record(
    step_id: str,
    decision: Decision,
    state_before: SimulationState,
    state_after: SimulationState,
) -> DecisionRecord:
    """Create an immutable record of a decision and its effect on state."""
    return DecisionRecord(
        step_id=step_id,
        decision_id=decision.id,
        decision_text=decision.text,
        state_before=dict(state_before),
        state_after=dict(state_after),
        timestamp=datetime.now(timezone.utc),
    )


def build_simulation_result(
    simulation: Simulation, session: SimulationSession
) -> SimulationResult:
    """Assemble the results payload for a completed session.

    completed_at is the time of the last recorded decision, or the session
    start when the run recorded none.

    Raises:
        ValueError: If the session belongs to another simulation or is not
            completed yet
    """
    if session.simulation_id != simulation.id:
        raise ValueError(
            f"Session for '{session.simulation_id}' cannot produce results for '{simulation.id}'"
        )
    if not session.is_completed(simulation.total_steps):
        raise ValueError(
            f"Simulation '{simulation.id}' is not completed "
            f"(step {session.current_step} of {simulation.total_steps})"
        )

    history = list(session.decision_history)
    completed_at = history[-1].timestamp if history else session.started_at

    return SimulationResult(
        simulation_id=simulation.id,
        initial_state=dict(simulation.initial_state),
        final_state=dict(session.state),
        decision_history=history,
        completed_at=completed_at,
    )


def metric_series(
    initial_state: SimulationState,
    history: Sequence[DecisionRecord],
    final_state: SimulationState,
    key: str,
) -> List[float]:
    """Values of one metric over a run: start, after each decision, end.

    The final point is kept even when it repeats the last decision's value;
    it also reflects external effects applied after the last decision.
    """
    points = [get_metric_value(initial_state, key)]
    points.extend(get_metric_value(record.state_after, key) for record in history)
    points.append(get_metric_value(final_state, key))
    return points


def summarize_changes(
    simulation: Simulation, final_state: SimulationState
) -> List[MetricChange]:
    """Start-to-end changes for the simulation's summary metrics.

    Metrics are reported in the order they are declared; metrics whose value
    moved by less than CHANGE_EPSILON are omitted.
    """
    summary_keys = set(simulation.summary_metric_keys())
    changes: List[MetricChange] = []

    for metric in simulation.metrics:
        if metric.key not in summary_keys:
            continue
        initial = get_metric_value(simulation.initial_state, metric.key)
        final = get_metric_value(final_state, metric.key)
        delta = final - initial
        if abs(delta) < CHANGE_EPSILON:
            continue
        changes.append(
            MetricChange(
                key=metric.key,
                label=metric.label,
                initial=initial,
                final=final,
                delta=delta,
            )
        )
    return changes
