"""
Simulation runner: drives one simulation through the session store.

The runner is what a presentation layer talks to. It pairs a Simulation with
a SessionStore and turns user interactions into engine calls:

1. enter_step()     - apply the current step's external shock (once)
2. choose(id)       - apply a decision, record it, move to the next step
3. continue_step()  - move past a summary/informational step, no record
4. restart()        - reset to a fresh session at step 0

Every call is synchronous and persists through the injected store before
returning.
"""

from dataclasses import dataclass
from typing import Optional

from .engine import apply_decision, apply_effects
from .history import build_simulation_result, create_decision_record
from .logging_utils import log_success
from .rounds import is_summary_step, round_start_state
from .schemas import (
    Decision,
    DecisionRecord,
    DecisionStep,
    Simulation,
    SimulationResult,
    SimulationSession,
    SimulationState,
)
from .session import EconsimError, SessionStore


class StepActionError(EconsimError, ValueError):
    """Raised when an action does not fit the current step."""


class SimulationCompletedError(StepActionError):
    """Raised when acting on a simulation whose steps are all done."""

    def __init__(self, simulation_id: str) -> None:
        self.simulation_id = simulation_id
        super().__init__(
            f"Simulation '{simulation_id}' is already completed. "
            "Use restart() to play it again."
        )


class UnknownDecisionError(StepActionError):
    """Raised when a decision id is not offered by the current step."""

    def __init__(self, step_id: str, decision_id: str) -> None:
        self.step_id = step_id
        self.decision_id = decision_id
        super().__init__(f"Step '{step_id}' has no decision '{decision_id}'")


@dataclass
class ChoiceOutcome:
    """What happened when a decision was applied."""

    decision: Decision
    record: DecisionRecord
    session: SimulationSession

    @property
    def feedback(self) -> Optional[str]:
        return self.decision.feedback


class SimulationRunner:
    """
    Coordinates one simulation run.

    Fully decoupled - the session store (and through it, storage) is
    injected. Without one, sessions live in memory.
    """

    def __init__(self, simulation: Simulation, sessions: Optional[SessionStore] = None):
        self.simulation = simulation
        self.sessions = sessions if sessions is not None else SessionStore()
        self._session: Optional[SimulationSession] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> SimulationSession:
        """Resume the persisted session or create one, then enter its step."""
        self._session = self.sessions.get_or_create_session(
            self.simulation.id, self.simulation.initial_state
        )
        return self.enter_step()

    def restart(self) -> SimulationSession:
        """Discard progress and start again from the initial state."""
        self._session = self.sessions.reset_session(
            self.simulation.id, self.simulation.initial_state
        )
        return self.enter_step()

    @property
    def session(self) -> SimulationSession:
        if self._session is None:
            return self.start()
        return self._session

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> SimulationState:
        return dict(self.session.state)

    @property
    def is_completed(self) -> bool:
        return self.session.is_completed(self.simulation.total_steps)

    @property
    def current_step(self) -> Optional[DecisionStep]:
        """The step being played, or None once the simulation is completed."""
        index = self.session.current_step
        if index >= self.simulation.total_steps:
            return None
        return self.simulation.steps[index]

    @property
    def progress(self) -> float:
        """Fraction of steps completed, between 0 and 1."""
        total = self.simulation.total_steps
        if total == 0:
            return 1.0
        return min(self.session.current_step, total) / total

    def round_start_state(self) -> SimulationState:
        """State at the start of the current step's round."""
        return round_start_state(self.simulation, self.session, self.current_step)

    def result(self) -> SimulationResult:
        """Results payload. Raises ValueError while the run is incomplete."""
        return build_simulation_result(self.simulation, self.session)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def enter_step(self) -> SimulationSession:
        """Apply the current step's external effects if not yet applied.

        Safe to call any number of times (e.g. on every re-render).
        """
        session = self.session
        step = self.current_step
        if step is None or not step.external_effects:
            return session
        if session.has_applied_external_effects(step.id):
            return session

        new_state = apply_effects(session.state, step.external_effects, self.simulation.metrics)
        self._session = self.sessions.apply_external_effects_for_step(
            self.simulation.id, step.id, new_state
        )
        return self._session

    def choose(self, decision_id: str) -> ChoiceOutcome:
        """Apply a decision of the current step and advance past it.

        Raises:
            SimulationCompletedError: If every step is already done
            StepActionError: If the current step is a summary step
            UnknownDecisionError: If the step offers no such decision
        """
        step = self._require_step()
        if is_summary_step(step):
            raise StepActionError(
                f"Step '{step.id}' is a summary step; use continue_step()"
            )

        decision = step.get_decision(decision_id)
        if decision is None:
            raise UnknownDecisionError(step.id, decision_id)

        # The step's shock always lands before the user's response to it
        session = self.enter_step()
        state_before = session.state
        state_after = apply_decision(decision, state_before, self.simulation.metrics)
        record = create_decision_record(step.id, decision, state_before, state_after)

        self._session = self.sessions.update_session_state(
            self.simulation.id, state_after, record, session.current_step + 1
        )
        self.enter_step()
        self._announce_completion()
        return ChoiceOutcome(decision=decision, record=record, session=self._session)

    def continue_step(self) -> SimulationSession:
        """Advance past a summary or decision-less step without a record.

        Raises:
            SimulationCompletedError: If every step is already done
            StepActionError: If the current step expects a decision
        """
        step = self._require_step()
        if step.decisions and not is_summary_step(step):
            raise StepActionError(
                f"Step '{step.id}' expects a decision; use choose()"
            )

        session = self.enter_step()
        self._session = self.sessions.advance_session_step(
            self.simulation.id, session.current_step + 1
        )
        self.enter_step()
        self._announce_completion()
        return self._session

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_step(self) -> DecisionStep:
        step = self.current_step
        if step is None:
            raise SimulationCompletedError(self.simulation.id)
        return step

    def _announce_completion(self) -> None:
        if self.is_completed:
            log_success(f"Simulation '{self.simulation.id}' completed")
