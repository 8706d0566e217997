"""
Econsim - decision/state simulation engine for interactive economics lessons.

Learners step through authored decisions that move a small numeric state
(inflation, profit, active users, ...). The engine applies effects with
clamping, records every decision, and persists progress per simulation.

No UI, no server. Storage is injected by the caller.
"""

__version__ = "0.1.0"

# Effect engine
from .engine import (
    apply_decision,
    apply_effects,
    clamp_value,
    get_state_effects,
    initialize_state,
)

# History
from .history import (
    build_simulation_result,
    create_decision_record,
    metric_series,
    summarize_changes,
)

# Persistence + sessions
from .persistence import KeyValueStore, InMemoryStore, JsonFileStore
from .session import (
    EconsimError,
    SessionNotFoundError,
    SessionStore,
    StepRegressionError,
)

# Rounds
from .rounds import (
    get_round_number,
    is_summary_step,
    is_summary_step_id,
    parse_round_number,
    round_start_state,
)

# Catalog
from .catalog import CatalogLoader, all_simulations, get_simulation, simulation_by_id
from .concepts import get_concept_description

# Formatting
from .formatting import (
    format_metric_delta,
    format_metric_value,
    format_state_value,
    get_index_label,
)

# Runner
from .runner import (
    ChoiceOutcome,
    SimulationCompletedError,
    SimulationRunner,
    StepActionError,
    UnknownDecisionError,
)

# Core schemas
from .schemas import (
    Decision,
    DecisionRecord,
    DecisionStep,
    MetricChange,
    MetricDefinition,
    ResultsConfig,
    Simulation,
    SimulationResult,
    SimulationSession,
    SimulationState,
    get_metric_value,
)

__all__ = [
    # Effect engine
    "apply_decision",
    "apply_effects",
    "clamp_value",
    "get_state_effects",
    "initialize_state",
    # History
    "build_simulation_result",
    "create_decision_record",
    "metric_series",
    "summarize_changes",
    # Persistence + sessions
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "SessionStore",
    "EconsimError",
    "SessionNotFoundError",
    "StepRegressionError",
    # Rounds
    "get_round_number",
    "is_summary_step",
    "is_summary_step_id",
    "parse_round_number",
    "round_start_state",
    # Catalog
    "CatalogLoader",
    "all_simulations",
    "get_simulation",
    "simulation_by_id",
    "get_concept_description",
    # Formatting
    "format_metric_delta",
    "format_metric_value",
    "format_state_value",
    "get_index_label",
    # Runner
    "ChoiceOutcome",
    "SimulationRunner",
    "StepActionError",
    "SimulationCompletedError",
    "UnknownDecisionError",
    # Schemas
    "Decision",
    "DecisionRecord",
    "DecisionStep",
    "MetricChange",
    "MetricDefinition",
    "ResultsConfig",
    "Simulation",
    "SimulationResult",
    "SimulationSession",
    "SimulationState",
    "get_metric_value",
]
