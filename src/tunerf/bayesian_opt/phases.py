"""Execution logic for optimization phases."""

import pandas as pd

from .history import DESIGN, INFILL, Observation
from .infill import propose
from .surrogate import fit_surrogate


def run_initial_phase(optimizer) -> None:
    """Evaluate the initial design points that are not in the log yet.

    Args:
        optimizer: BayesianOptimizer instance
    """
    completed_initial = len(optimizer.log)
    n_initial = len(optimizer.design)
    if completed_initial >= n_initial:
        return

    if optimizer.show_info:
        print("=" * 60)
        print("Starting Initial Phase:")
        print(f"Initial design:\n{pd.DataFrame(optimizer.design)}")
        print("=" * 60)

    for idx in range(completed_initial, n_initial):
        if optimizer.show_info:
            print(f"Initial evaluation {idx + 1}/{n_initial}")
        _evaluate_and_record(optimizer, optimizer.design[idx], DESIGN)


def run_bayesian_phase(optimizer) -> None:
    """Fit, propose and evaluate until the budget is used up.

    Args:
        optimizer: BayesianOptimizer instance
    """
    if len(optimizer.log) >= optimizer.iters:
        return

    n_bayesian = optimizer.iters - len(optimizer.design)
    if optimizer.show_info:
        print("=" * 60)
        print("Starting Bayesian Phase:")
        print("=" * 60)

    while len(optimizer.log) < optimizer.iters:
        optimizer.enter_surrogate_phase()
        params = suggest_next_params(optimizer)

        optimizer.enter_eval_phase()
        if optimizer.show_info:
            point_num = len(optimizer.log) - len(optimizer.design) + 1
            print(f"Bayesian evaluation {point_num}/{n_bayesian}")
        _evaluate_and_record(optimizer, params, INFILL)


def suggest_next_params(optimizer) -> dict:
    """Suggest next parameter configuration from a surrogate fitted on the full log.

    The focus search seed depends only on the seed of the run and the log
    length, so a resumed run proposes what an uninterrupted one would.
    """
    surrogate = fit_surrogate(
        optimizer.surrogate_factory(),
        optimizer.log,
        optimizer.space,
        optimizer.minimize,
    )
    optimizer.n_surrogate_fits += 1
    incumbent = optimizer.log.best(optimizer.minimize)

    return propose(
        surrogate,
        optimizer.space,
        incumbent.config,
        optimizer.acquisition,
        points=optimizer.focussearch_points,
        maxit=optimizer.focussearch_maxit,
        restarts=optimizer.focussearch_restarts,
        random_state=optimizer.random_state + len(optimizer.log),
    )


def _evaluate_and_record(optimizer, params: dict, phase: str) -> None:
    """Evaluate one configuration, append it to the log and checkpoint."""
    previous_best = optimizer.log.best(optimizer.minimize)

    score, exec_time = optimizer.evaluator.evaluate(params, index=len(optimizer.log))
    optimizer.log.append(
        Observation.create(params, score, exec_time, len(optimizer.log), phase)
    )
    optimizer.save_checkpoint()

    if not optimizer.show_info:
        return
    print(f"Params: {params}")
    print(f"Score: {score:.4f} ({exec_time:.2f}s)")
    if previous_best is None or optimizer.log.best(optimizer.minimize) is optimizer.log[-1]:
        print("New best score!")
    print("-" * 60)
