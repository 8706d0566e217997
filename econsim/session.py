"""
Session store: lifecycle of one user's run through a simulation.

A session moves through three states:

    absent --create--> active (current_step < steps) --advance--> completed

reset_session() returns any state to a fresh active session at step 0.

Each session is persisted as a single JSON document under
"<prefix><simulation_id>" in an injected KeyValueStore. Only one live session
exists per simulation id; concurrent writers follow last-write-wins.

Error handling:
- Update operations on a missing session raise SessionNotFoundError. A lost
  session (e.g. evicted storage) must surface, not silently restart.
- Storage I/O failures are logged and swallowed. The returned session is
  still correct; it is simply ahead of what was persisted.
- Persisted data that fails to parse is logged and treated as absent.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from .config import Config
from .logging_utils import log_deterministic, log_error, log_warning
from .persistence import InMemoryStore, KeyValueStore
from .schemas import DecisionRecord, SimulationSession, SimulationState


# =============================
# Module-level Exceptions
# =============================

class EconsimError(Exception):
    """Base class for econsim precondition violations."""


class SessionNotFoundError(EconsimError, LookupError):
    """Raised when an update targets a simulation with no live session.

    Callers are expected to obtain the session with get_or_create_session()
    before mutating it.
    """

    def __init__(self, simulation_id: str) -> None:
        self.simulation_id = simulation_id
        super().__init__(
            f"No session found for simulation '{simulation_id}'. "
            "Call get_or_create_session() before updating it."
        )


class StepRegressionError(EconsimError, ValueError):
    """Raised when an update would move current_step backwards."""

    def __init__(self, simulation_id: str, current_step: int, next_step: int) -> None:
        self.simulation_id = simulation_id
        self.current_step = current_step
        self.next_step = next_step
        super().__init__(
            f"Session '{simulation_id}' is at step {current_step}; "
            f"refusing to move back to step {next_step}. Use reset_session() to restart."
        )


class SessionStore:
    """Creates, resumes, advances and resets simulation sessions.

    Fully decoupled - the storage backend is injected. With no backend an
    InMemoryStore is used, which is what tests and embedded callers want.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        prefix: Optional[str] = None,
    ):
        self.store = store if store is not None else InMemoryStore()
        self.prefix = prefix if prefix is not None else Config.STORAGE_PREFIX

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_session(
        self, simulation_id: str, initial_state: SimulationState
    ) -> SimulationSession:
        """Create and persist a fresh session, overwriting any existing one."""
        session = SimulationSession(
            simulation_id=simulation_id,
            current_step=0,
            state=dict(initial_state),
            decision_history=[],
            started_at=datetime.now(timezone.utc),
            external_effects_applied=[],
        )
        self._save(session)
        log_deterministic(f"[Session] Created session for '{simulation_id}'")
        return session

    def get_or_create_session(
        self, simulation_id: str, initial_state: SimulationState
    ) -> SimulationSession:
        """Resume the persisted session for this id, or start a new one."""
        existing = self._load(simulation_id)
        if existing is not None and existing.simulation_id == simulation_id:
            return existing
        return self.create_session(simulation_id, initial_state)

    def update_session_state(
        self,
        simulation_id: str,
        new_state: SimulationState,
        decision_record: DecisionRecord,
        next_step: int,
    ) -> SimulationSession:
        """Record a decision: replace state, append history, move to next_step.

        Raises:
            SessionNotFoundError: If no session exists for simulation_id
            StepRegressionError: If next_step is behind the current step
        """
        session = self._require(simulation_id)
        self._check_forward(session, next_step)

        updated = session.model_copy(
            update={
                "state": dict(new_state),
                "current_step": next_step,
                "decision_history": [*session.decision_history, decision_record],
            }
        )
        self._save(updated)
        log_deterministic(
            f"[Session] '{simulation_id}' recorded '{decision_record.decision_id}' "
            f"at step '{decision_record.step_id}', now at step {next_step}"
        )
        return updated

    def advance_session_step(self, simulation_id: str, next_step: int) -> SimulationSession:
        """Move to next_step without recording a decision.

        Used for summary and informational steps, and to mark completion.

        Raises:
            SessionNotFoundError: If no session exists for simulation_id
            StepRegressionError: If next_step is behind the current step
        """
        session = self._require(simulation_id)
        self._check_forward(session, next_step)

        updated = session.model_copy(update={"current_step": next_step})
        self._save(updated)
        log_deterministic(f"[Session] '{simulation_id}' advanced to step {next_step}")
        return updated

    def apply_external_effects_for_step(
        self, simulation_id: str, step_id: str, new_state: SimulationState
    ) -> SimulationSession:
        """Apply a step's external effects exactly once per session.

        If step_id was already applied the stored session is returned as is,
        without writing to storage.

        Raises:
            SessionNotFoundError: If no session exists for simulation_id
        """
        session = self._require(simulation_id)
        if session.has_applied_external_effects(step_id):
            return session

        updated = session.model_copy(
            update={
                "state": dict(new_state),
                "external_effects_applied": [*session.external_effects_applied, step_id],
            }
        )
        self._save(updated)
        log_deterministic(f"[Session] '{simulation_id}' applied external effects of '{step_id}'")
        return updated

    def reset_session(
        self, simulation_id: str, initial_state: SimulationState
    ) -> SimulationSession:
        """Discard the current session and start a fresh one."""
        self.clear_session(simulation_id)
        return self.create_session(simulation_id, initial_state)

    def clear_session(self, simulation_id: str) -> None:
        """Delete the persisted session, if any."""
        try:
            self.store.delete(self._key(simulation_id))
        except Exception as exc:
            log_error(f"Failed to clear simulation state for '{simulation_id}': {exc}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current_session(self, simulation_id: str) -> Optional[SimulationSession]:
        """Return the persisted session, or None if there is none."""
        return self._load(simulation_id)

    def get_simulation_progress(self, simulation_id: str) -> int:
        """Current step of the persisted session (0 when absent)."""
        session = self._load(simulation_id)
        return session.current_step if session is not None else 0

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    def _key(self, simulation_id: str) -> str:
        return f"{self.prefix}{simulation_id}"

    def _require(self, simulation_id: str) -> SimulationSession:
        session = self._load(simulation_id)
        if session is None:
            raise SessionNotFoundError(simulation_id)
        return session

    @staticmethod
    def _check_forward(session: SimulationSession, next_step: int) -> None:
        if next_step < session.current_step:
            raise StepRegressionError(session.simulation_id, session.current_step, next_step)

    def _save(self, session: SimulationSession) -> None:
        try:
            payload = session.model_dump_json(by_alias=True, indent=2)
            self.store.set(self._key(session.simulation_id), payload)
        except Exception as exc:
            log_error(f"Failed to save simulation state for '{session.simulation_id}': {exc}")

    def _load(self, simulation_id: str) -> Optional[SimulationSession]:
        try:
            payload = self.store.get(self._key(simulation_id))
        except Exception as exc:
            log_error(f"Failed to load simulation state for '{simulation_id}': {exc}")
            return None

        if payload is None:
            return None

        try:
            return SimulationSession.model_validate_json(payload)
        except ValidationError as exc:
            log_warning(
                f"Ignoring malformed simulation state for '{simulation_id}': "
                f"{exc.error_count()} validation error(s)"
            )
            return None
