"""Shared fixtures: small deterministic tasks and a cheap stand-in objective."""

import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import load_iris, make_classification, make_regression

from tunerf.bayesian_opt.param_space import build_space
from tunerf.errors import EvaluationFailure
from tunerf.task import Task


class QuadraticEvaluator:
    """Deterministic objective: squared distance to 0.3 in unit space.

    Optionally raises on the ``fail_at``-th call (1-based).
    """

    def __init__(self, space, fail_at: int | None = None) -> None:
        self.space = space
        self.fail_at = fail_at
        self.calls = 0

    def evaluate(self, config: dict, index: int | None = None) -> tuple[float, float]:
        self.calls += 1
        if self.fail_at is not None and self.calls == self.fail_at:
            raise EvaluationFailure(f"Evaluation of {config} failed: learner crashed")
        u = self.space.to_unit_array([config])[0]
        return float(np.sum((u - 0.3) ** 2)), 0.0


@pytest.fixture
def iris_task():
    data = load_iris(as_frame=True)
    y = pd.Series(data.target_names[data.target])
    return Task.classification(data.data, y)


@pytest.fixture
def binary_task():
    X, y = make_classification(
        n_samples=120, n_features=5, n_informative=3, random_state=0
    )
    return Task.classification(X, np.where(y == 1, "yes", "no"))


@pytest.fixture
def regression_task():
    X, y = make_regression(n_samples=100, n_features=4, noise=5.0, random_state=0)
    return Task.regression(X, y)


@pytest.fixture
def numeric_space():
    return build_space(150, 4, ["mtry", "min.node.size", "sample.fraction"])


@pytest.fixture
def full_space():
    return build_space(
        200,
        6,
        ["mtry", "min.node.size", "sample.fraction", "replace", "respect.unordered.factors"],
    )


@pytest.fixture
def quadratic_evaluator():
    return QuadraticEvaluator
