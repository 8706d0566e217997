"""Tests for round classification and round-start snapshots."""

from datetime import datetime, timezone

import pytest

from econsim.history import create_decision_record
from econsim.rounds import (
    get_round_number,
    is_summary_step,
    is_summary_step_id,
    parse_round_number,
    round_start_state,
)
from econsim.schemas import Decision, DecisionStep, Simulation, SimulationSession

ACCEPT = Decision(id="accept", text="Accept", effects={"users": 10})
CONTINUE = Decision(id="continue", text="Continue")


def make_round_simulation() -> Simulation:
    return Simulation(
        id="rounds",
        title="Rounds",
        description="Two short rounds",
        initial_state={"users": 100},
        steps=[
            DecisionStep(id="intro", event="Welcome"),
            DecisionStep(id="r1_card1", event="Card", decisions=[ACCEPT]),
            DecisionStep(id="r1_card2", event="Card", decisions=[ACCEPT]),
            DecisionStep(id="r1_summary", event="Round 1 recap", decisions=[CONTINUE]),
            DecisionStep(id="r2_card1", event="Card", decisions=[ACCEPT]),
            DecisionStep(id="r2_summary", event="Round 2 recap", decisions=[CONTINUE]),
        ],
    )


def make_session(records) -> SimulationSession:
    return SimulationSession(
        simulation_id="rounds",
        current_step=len(records),
        decision_history=records,
        started_at=datetime.now(timezone.utc),
    )


@pytest.mark.parametrize(
    "step_id, expected",
    [
        ("r1_card1_local_restaurant", 1),
        ("R12_summary", 12),
        ("r3_card0_competitor_enters", 3),
        ("period1_baseline", None),
        ("round1_card", None),
        ("r_summary", None),
    ],
)
def test_parse_round_number(step_id, expected):
    assert parse_round_number(step_id) == expected


def test_is_summary_step_id():
    assert is_summary_step_id("r4_summary")
    assert is_summary_step_id("wrap_summary")
    assert not is_summary_step_id("summary_intro")


def test_step_level_helpers_read_fields():
    simulation = make_round_simulation()
    summary = simulation.get_step("r1_summary")
    card = simulation.get_step("r2_card1")

    assert is_summary_step(summary)
    assert not is_summary_step(card)
    assert get_round_number(card) == 2
    assert get_round_number(simulation.get_step("intro")) is None


def test_round_one_starts_from_initial_state():
    simulation = make_round_simulation()
    records = [
        create_decision_record("r1_card1", ACCEPT, {"users": 100}, {"users": 110}),
        create_decision_record("r1_card2", ACCEPT, {"users": 110}, {"users": 120}),
    ]

    start = round_start_state(simulation, make_session(records), simulation.get_step("r1_summary"))

    assert start == {"users": 100}


def test_later_round_starts_after_last_earlier_round_decision():
    simulation = make_round_simulation()
    records = [
        create_decision_record("r1_card1", ACCEPT, {"users": 100}, {"users": 110}),
        create_decision_record("r1_card2", ACCEPT, {"users": 110}, {"users": 120}),
        create_decision_record("r2_card1", ACCEPT, {"users": 120}, {"users": 130}),
    ]

    start = round_start_state(simulation, make_session(records), simulation.get_step("r2_summary"))

    assert start == {"users": 120}


def test_round_start_ignores_records_outside_rounds():
    simulation = make_round_simulation()
    records = [
        create_decision_record("intro", CONTINUE, {"users": 100}, {"users": 100}),
        create_decision_record("r1_card1", ACCEPT, {"users": 100}, {"users": 110}),
        create_decision_record("removed_step", ACCEPT, {"users": 110}, {"users": 500}),
    ]

    start = round_start_state(simulation, make_session(records), simulation.get_step("r2_card1"))

    assert start == {"users": 110}


def test_round_start_without_earlier_records_is_initial():
    simulation = make_round_simulation()
    start = round_start_state(simulation, make_session([]), simulation.get_step("r2_summary"))
    assert start == {"users": 100}


def test_round_start_for_missing_step_is_initial():
    simulation = make_round_simulation()
    start = round_start_state(simulation, make_session([]), None)
    assert start == {"users": 100}
    # The returned snapshot is a copy
    start["users"] = 0
    assert simulation.initial_state == {"users": 100}
