"""
Round and summary-step classification.

Some simulations group steps into numbered rounds, each closed by a summary
step that shows the round's net change. Steps carry this as first-class
fields (`round_number`, `is_summary`); the id helpers below implement the
authoring convention those fields default from:

    r2_card1_commission_increase  -> round 2
    r2_summary                    -> round 2, summary step

round_start_state() finds the snapshot a round summary compares against.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover - import cycle with schemas
    from .schemas import DecisionStep, Simulation, SimulationSession, SimulationState

SUMMARY_SUFFIX = "_summary"
_ROUND_PREFIX = re.compile(r"^r(\d+)_", re.IGNORECASE)


def is_summary_step_id(step_id: str) -> bool:
    """True when the id ends with the reserved summary suffix."""
    return step_id.endswith(SUMMARY_SUFFIX)


def parse_round_number(step_id: str) -> Optional[int]:
    """Parse the round number from a leading `r<N>_` prefix, else None."""
    match = _ROUND_PREFIX.match(step_id)
    if not match:
        return None
    return int(match.group(1))


def is_summary_step(step: DecisionStep) -> bool:
    return bool(step.is_summary)


def get_round_number(step: DecisionStep) -> Optional[int]:
    return step.round_number


def round_start_state(
    simulation: Simulation,
    session: SimulationSession,
    step: Optional[DecisionStep],
) -> SimulationState:
    """Return the state a round began from, for "this round's net change".

    Round 1 (and steps outside any round) start from the simulation's
    initial state. For later rounds this is the state after the last
    recorded decision made in an earlier round.

    Records are matched to rounds through their step id rather than by
    position in the history, so informational steps that advance without
    recording a decision do not shift the lookup.
    """
    initial = dict(simulation.initial_state)
    if step is None:
        return initial

    current_round = get_round_number(step)
    if not current_round or current_round <= 1:
        return initial

    rounds_by_step: Dict[str, Optional[int]] = {
        s.id: get_round_number(s) for s in simulation.steps
    }

    start = initial
    for record in session.decision_history:
        record_round = rounds_by_step.get(record.step_id)
        if record_round is not None and record_round < current_round:
            start = dict(record.state_after)
    return start
