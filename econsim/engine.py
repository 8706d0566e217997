"""
Effect engine: pure state transitions for decision simulations.

Every function here is deterministic and side-effect free. State snapshots
are plain dicts of metric key -> number and are never mutated in place;
each transition returns a new dict (copy-on-write).

Design principle: authored content is trusted. Non-numeric values are not
validated here; schema validation happens once when the catalog loads.
"""

from typing import Dict, Iterable, Optional

from .schemas import Decision, EffectMap, MetricDefinition, SimulationState


def initialize_state() -> SimulationState:
    """Default baseline for the macroeconomic policy simulation."""
    return {
        "inflation": 2.5,
        "gdpGrowth": 2.8,
        "unemployment": 5.2,
        "governmentDebt": 65,
        "publicConfidence": 55,
    }


def clamp_value(value: float, metric: Optional[MetricDefinition] = None) -> float:
    """Clamp a value to a metric's bounds, applying min first, then max.

    Without a metric definition (or with no bounds) the value is returned
    unchanged.
    """
    if metric is None:
        return value

    result = value
    if metric.min is not None:
        result = max(metric.min, result)
    if metric.max is not None:
        result = min(metric.max, result)
    return result


def apply_effects(
    state: SimulationState,
    effects: EffectMap,
    metrics: Optional[Iterable[MetricDefinition]] = None,
) -> SimulationState:
    """Apply a delta map to a state snapshot, clamped per metric bounds.

    For each key with a defined delta: new = clamp(current_or_zero + delta).
    None deltas are skipped, not treated as zero. Keys not in `effects` pass
    through unchanged.

    Args:
        state: Current state snapshot (not modified)
        effects: Partial mapping of metric key -> signed delta
        metrics: Optional metric definitions supplying clamp bounds

    Returns:
        New state dict
    """
    metric_map: Dict[str, MetricDefinition] = {m.key: m for m in (metrics or [])}
    new_state: SimulationState = dict(state)

    for key, delta in effects.items():
        if delta is None:
            continue
        previous = new_state.get(key, 0)
        new_state[key] = clamp_value(previous + delta, metric_map.get(key))

    return new_state


def apply_decision(
    decision: Decision,
    state: SimulationState,
    metrics: Optional[Iterable[MetricDefinition]] = None,
) -> SimulationState:
    """Apply a decision's effects to the current state."""
    return apply_effects(state, decision.effects, metrics)


def get_state_effects(decision: Decision) -> EffectMap:
    """Return the deltas a decision would apply (a copy)."""
    return dict(decision.effects)
