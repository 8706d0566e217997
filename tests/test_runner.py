"""End-to-end tests driving packaged simulations through SimulationRunner."""

import pytest

from econsim.catalog import get_simulation
from econsim.runner import (
    SimulationCompletedError,
    SimulationRunner,
    StepActionError,
    UnknownDecisionError,
)
from econsim.session import SessionStore


def make_runner(simulation_id: str, sessions: SessionStore = None) -> SimulationRunner:
    runner = SimulationRunner(get_simulation(simulation_id), sessions)
    runner.start()
    return runner


def play_until(runner: SimulationRunner, step_id: str) -> None:
    """Take the first decision (or continue) until step_id is current."""
    while runner.current_step is not None and runner.current_step.id != step_id:
        step = runner.current_step
        if step.is_summary or not step.decisions:
            runner.continue_step()
        else:
            runner.choose(step.decisions[-1].id)


# =============================
# Cafe: external effects and history
# =============================

def test_start_creates_fresh_session():
    runner = make_runner("microecon-cafe")

    assert runner.session.current_step == 0
    assert runner.state == runner.simulation.initial_state
    assert runner.current_step.id == "period1_baseline"
    assert runner.progress == 0


def test_choose_applies_effects_and_records_decision():
    runner = make_runner("microecon-cafe")

    outcome = runner.choose("lower_prices")

    assert outcome.record.state_before["dailyDemand"] == 200
    assert outcome.record.state_after["dailyDemand"] == 230
    assert outcome.record.state_after["dailyProfit"] == 300
    assert outcome.record.state_after["studentSatisfaction"] == 85
    assert outcome.feedback == outcome.decision.feedback
    assert runner.progress == pytest.approx(0.25)


def test_external_shock_lands_when_step_is_entered():
    runner = make_runner("microecon-cafe")
    runner.choose("keep_prices")

    # The minimum-wage step is now current and its shock is already applied
    assert runner.current_step.id == "period2_minimum_wage"
    assert runner.state["wage"] == 18
    assert runner.session.external_effects_applied == ["period2_minimum_wage"]
    # ...but the previous decision's snapshot predates it
    assert runner.session.decision_history[0].state_after["wage"] == 15


def test_enter_step_is_idempotent():
    runner = make_runner("microecon-cafe")
    runner.choose("keep_prices")

    for _ in range(3):
        runner.enter_step()

    assert runner.state["wage"] == 18
    assert runner.session.external_effects_applied == ["period2_minimum_wage"]


def test_decision_after_shock_starts_from_shocked_state():
    runner = make_runner("microecon-cafe")
    runner.choose("lower_prices")

    outcome = runner.choose("absorb_cost")

    assert outcome.record.state_before["wage"] == 18
    assert outcome.record.state_after["dailyProfit"] == 220
    history = runner.session.decision_history
    assert [record.step_id for record in history] == ["period1_baseline", "period2_minimum_wage"]


def test_resume_does_not_reapply_shock():
    sessions = SessionStore()
    first = make_runner("microecon-cafe", sessions)
    first.choose("keep_prices")

    second = make_runner("microecon-cafe", sessions)

    assert second.session.current_step == 1
    assert second.state["wage"] == 18


def test_restart_returns_to_initial_state():
    runner = make_runner("microecon-cafe")
    runner.choose("lower_prices")
    runner.choose("absorb_cost")

    runner.restart()

    assert runner.session.current_step == 0
    assert runner.state == runner.simulation.initial_state
    assert runner.session.decision_history == []
    assert runner.session.external_effects_applied == []


def test_unknown_decision_is_rejected():
    runner = make_runner("microecon-cafe")
    with pytest.raises(UnknownDecisionError):
        runner.choose("burn_it_down")
    # Nothing was recorded
    assert runner.session.decision_history == []


def test_continue_on_decision_step_is_rejected():
    runner = make_runner("microecon-cafe")
    with pytest.raises(StepActionError):
        runner.continue_step()


def test_full_run_produces_result():
    runner = make_runner("microecon-cafe")
    with pytest.raises(ValueError, match="not completed"):
        runner.result()

    play_until(runner, "never")

    assert runner.is_completed
    assert runner.current_step is None
    assert runner.progress == 1.0
    result = runner.result()
    assert len(result.decision_history) == 4
    assert result.final_state == runner.state
    assert result.initial_state == runner.simulation.initial_state

    with pytest.raises(SimulationCompletedError):
        runner.choose("keep_prices")
    with pytest.raises(SimulationCompletedError):
        runner.continue_step()


def test_state_stays_within_metric_bounds_over_full_run():
    runner = make_runner("microecon-cafe")
    play_until(runner, "never")

    for metric in runner.simulation.metrics:
        value = runner.state[metric.key]
        if metric.min is not None:
            assert value >= metric.min
        if metric.max is not None:
            assert value <= metric.max


# =============================
# Delivery platform: rounds and summaries
# =============================

def test_summary_step_only_continues():
    runner = make_runner("microecon-delivery-platform")
    play_until(runner, "r1_summary")

    with pytest.raises(StepActionError):
        runner.choose("continue")

    history_before = list(runner.session.decision_history)
    runner.continue_step()

    assert runner.current_step.id == "r2_card1_commission_increase"
    assert runner.session.decision_history == history_before


def test_round_start_state_per_round():
    runner = make_runner("microecon-delivery-platform")
    play_until(runner, "r1_summary")
    assert runner.round_start_state() == runner.simulation.initial_state

    play_until(runner, "r2_summary")
    last_round_one = [r for r in runner.session.decision_history if r.step_id.startswith("r1_")][-1]
    assert runner.round_start_state() == last_round_one.state_after


def test_competitor_shock_applies_entering_round_three():
    runner = make_runner("microecon-delivery-platform")
    play_until(runner, "r2_summary")
    pressure_before = runner.state["competitivePressure"]

    runner.continue_step()

    assert runner.current_step.id == "r3_card0_competitor_enters"
    assert runner.state["competitivePressure"] == min(pressure_before + 20, 100)
    assert "r3_card0_competitor_enters" in runner.session.external_effects_applied


# =============================
# Informational simulations
# =============================

def test_step_without_decisions_continues_to_completion():
    runner = make_runner("microecon-gym-elasticity")

    with pytest.raises(UnknownDecisionError):
        runner.choose("anything")

    runner.continue_step()

    assert runner.is_completed
    assert runner.result().decision_history == []
    assert runner.result().completed_at == runner.session.started_at


def test_completion_is_logged(capsys):
    runner = make_runner("microecon-gym-elasticity")
    runner.continue_step()
    assert "completed" in capsys.readouterr().out
