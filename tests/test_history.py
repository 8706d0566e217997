"""Tests for decision records and result helpers."""

from datetime import datetime, timezone

import pytest

from econsim.history import (
    build_simulation_result,
    create_decision_record,
    metric_series,
    summarize_changes,
)
from econsim.schemas import (
    Decision,
    DecisionStep,
    MetricDefinition,
    ResultsConfig,
    Simulation,
    SimulationSession,
)


def make_simulation() -> Simulation:
    return Simulation(
        id="shop",
        title="Shop",
        description="A tiny shop",
        initial_state={"profit": 100, "satisfaction": 60, "staff": 3},
        metrics=[
            MetricDefinition(key="profit", label="Profit", format="currency"),
            MetricDefinition(key="satisfaction", label="Satisfaction", format="index", min=0, max=100),
            MetricDefinition(key="staff", label="Staff", format="integer", min=0),
        ],
        results_config=ResultsConfig(summary_metrics=["profit", "satisfaction"]),
        steps=[
            DecisionStep(
                id="open",
                event="Opening day",
                decisions=[Decision(id="discount", text="Discount", effects={"profit": 50})],
            )
        ],
    )


def test_record_captures_independent_snapshots():
    decision = Decision(id="discount", text="Offer a discount", effects={"profit": 50})
    before = {"profit": 100}
    after = {"profit": 150}

    record = create_decision_record("open", decision, before, after)

    before["profit"] = -1
    after["profit"] = -1
    assert record.state_before == {"profit": 100}
    assert record.state_after == {"profit": 150}
    assert record.decision_id == "discount"
    assert record.decision_text == "Offer a discount"
    assert record.step_id == "open"
    assert record.timestamp.tzinfo is not None


def test_record_serializes_with_camel_case_keys():
    decision = Decision(id="d", text="D", effects={})
    record = create_decision_record("s", decision, {"a": 1}, {"a": 2})
    payload = record.model_dump(by_alias=True)
    assert {"stepId", "decisionId", "decisionText", "stateBefore", "stateAfter", "timestamp"} <= set(payload)


def test_build_result_requires_completion():
    simulation = make_simulation()
    session = SimulationSession(
        simulation_id="shop", current_step=0, state={"profit": 100},
        started_at=datetime.now(timezone.utc),
    )
    with pytest.raises(ValueError, match="not completed"):
        build_simulation_result(simulation, session)


def test_build_result_rejects_other_simulation():
    simulation = make_simulation()
    session = SimulationSession(
        simulation_id="other", current_step=5, started_at=datetime.now(timezone.utc),
    )
    with pytest.raises(ValueError):
        build_simulation_result(simulation, session)


def test_build_result_for_completed_session():
    simulation = make_simulation()
    decision = simulation.steps[0].decisions[0]
    record = create_decision_record("open", decision, {"profit": 100}, {"profit": 150})
    session = SimulationSession(
        simulation_id="shop",
        current_step=1,
        state={"profit": 150, "satisfaction": 60, "staff": 3},
        decision_history=[record],
        started_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )

    result = build_simulation_result(simulation, session)

    assert result.initial_state["profit"] == 100
    assert result.final_state["profit"] == 150
    assert result.decision_history == [record]
    assert result.completed_at == record.timestamp


def test_metric_series_start_each_decision_end():
    decision = Decision(id="d", text="D", effects={})
    history = [
        create_decision_record("s1", decision, {"profit": 100}, {"profit": 120}),
        create_decision_record("s2", decision, {"profit": 120}, {"profit": 90}),
    ]
    series = metric_series({"profit": 100}, history, {"profit": 95}, "profit")
    assert series == [100, 120, 90, 95]
    assert metric_series({}, [], {}, "missing") == [0, 0]


def test_summarize_changes_only_reports_moved_summary_metrics():
    simulation = make_simulation()
    final_state = {"profit": 175.5, "satisfaction": 60.005, "staff": 1}

    changes = summarize_changes(simulation, final_state)

    # staff moved but is not a summary metric; satisfaction moved < 0.01
    assert [change.key for change in changes] == ["profit"]
    assert changes[0].label == "Profit"
    assert changes[0].delta == pytest.approx(75.5)
