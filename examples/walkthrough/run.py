"""Play a packaged simulation in the terminal.

Lists the catalog, then steps through one simulation. Progress is stored in
a JSON file per simulation, so quitting and re-running resumes where you
left off:

    python examples/walkthrough/run.py --list
    python examples/walkthrough/run.py microecon-cafe
    python examples/walkthrough/run.py microecon-delivery-platform --auto
    python examples/walkthrough/run.py microecon-cafe --restart

`--auto` always takes the first decision, which is handy for smoke-testing
newly authored content.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from econsim import (
    CatalogLoader,
    JsonFileStore,
    SessionStore,
    Simulation,
    SimulationRunner,
    format_metric_delta,
    format_metric_value,
    get_concept_description,
    get_simulation,
    summarize_changes,
)
from econsim.config import Config


def print_catalog() -> None:
    loader = CatalogLoader()
    for simulation_id in loader.list_simulations():
        info = loader.get_simulation_info(simulation_id)
        print(f"{info['id']:32} {info['num_steps']:>3} steps  {info['time_estimate']:>10}  {info['title']}")


def print_state(simulation: Simulation, state, baseline=None) -> None:
    for metric in simulation.metrics:
        value = state.get(metric.key, 0)
        line = f"  {metric.label:24} {format_metric_value(value, metric):>12}"
        if baseline is not None:
            delta = value - baseline.get(metric.key, 0)
            if abs(delta) >= 0.01:
                line += f"  ({format_metric_delta(delta, metric)})"
        print(line)


def ask(prompt: str, options: list[str]) -> Optional[str]:
    while True:
        answer = input(prompt).strip()
        if answer in {"q", "quit"}:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        print(f"Pick 1-{len(options)}, or q to quit.")


def play(runner: SimulationRunner, auto: bool) -> bool:
    """Run until completion. Returns False when the player quits early."""
    simulation = runner.simulation
    while runner.current_step is not None:
        step = runner.current_step
        print(f"\n=== Step {runner.session.current_step + 1}/{simulation.total_steps}: {step.id} ===")
        print(step.event)

        if step.is_summary:
            print("\nThis round:")
            print_state(simulation, runner.state, runner.round_start_state())
        else:
            print_state(simulation, runner.state)

        if step.is_summary or not step.decisions:
            if not auto and input("\n[enter] to continue, q to quit: ").strip() in {"q", "quit"}:
                return False
            runner.continue_step()
            continue

        for index, decision in enumerate(step.decisions, start=1):
            print(f"  {index}. {decision.text}")
        options = [decision.id for decision in step.decisions]
        choice = options[0] if auto else ask("> ", options)
        if choice is None:
            return False

        outcome = runner.choose(choice)
        if outcome.feedback:
            print(f"\n{outcome.feedback}")
        if step.ai_explanation:
            print(f"\nWhy: {step.ai_explanation}")
    return True


def print_results(runner: SimulationRunner) -> None:
    simulation = runner.simulation
    result = runner.result()
    print(f"\n=== Results: {simulation.title} ===")
    print(f"Decisions made: {len(result.decision_history)}")
    for change in summarize_changes(simulation, result.final_state):
        metric = simulation.metric(change.key)
        print(
            f"  {change.label:24} {format_metric_value(change.initial, metric):>12} -> "
            f"{format_metric_value(change.final, metric):>12}  ({format_metric_delta(change.delta, metric)})"
        )
    if simulation.concepts:
        print("\nConcepts:")
        for concept in simulation.concepts:
            print(f"  - {concept}: {get_concept_description(concept)}")
    for question in simulation.reflection_questions:
        print(f"  ? {question}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Play an econsim simulation in the terminal")
    parser.add_argument("simulation", nargs="?", help="Simulation id (see --list)")
    parser.add_argument("--list", action="store_true", help="List packaged simulations")
    parser.add_argument("--auto", action="store_true", help="Always take the first decision")
    parser.add_argument("--restart", action="store_true", help="Discard saved progress first")
    parser.add_argument("--store", type=Path, default=Config.STORAGE_DIR, help="Progress directory")
    args = parser.parse_args()

    Config.validate()

    if args.list or not args.simulation:
        print_catalog()
        return 0

    simulation = get_simulation(args.simulation)
    if simulation is None:
        print(f"Unknown simulation '{args.simulation}'. Use --list to see the catalog.")
        return 1

    runner = SimulationRunner(simulation, SessionStore(JsonFileStore(args.store)))
    if args.restart:
        runner.restart()
    else:
        runner.start()

    print(f"{simulation.title}\n{simulation.context or simulation.description}")
    if not play(runner, args.auto):
        print(f"\nProgress saved to {args.store}. Run again to resume.")
        return 0

    print_results(runner)
    return 0


if __name__ == "__main__":
    sys.exit(main())
