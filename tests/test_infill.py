import numpy as np
import pytest

from tunerf.bayesian_opt.acquisition import ConfidenceBound
from tunerf.bayesian_opt.infill import _select_index, propose
from tunerf.bayesian_opt.sampling import generate_initial_design
from tunerf.bayesian_opt.surrogate import GaussianProcessSurrogate


class BowlSurrogate:
    """Known surrogate with its minimum at ``center`` and no uncertainty."""

    def __init__(self, center):
        self.center = np.asarray(center)

    def predict(self, X):
        return np.sum((X - self.center) ** 2, axis=1), np.zeros(len(X))


class FlatSurrogate:
    def predict(self, X):
        return np.zeros(len(X)), np.ones(len(X))


def test_proposals_stay_within_bounds(full_space):
    design = generate_initial_design(full_space, 15, random_state=0)
    X = full_space.to_unit_array(design)
    y = np.sum(X**2, axis=1)
    surrogate = GaussianProcessSurrogate().fit(X, y)

    for seed in range(10):
        config = propose(
            surrogate,
            full_space,
            design[int(np.argmin(y))],
            ConfidenceBound.for_space(full_space),
            points=20,
            random_state=seed,
        )
        assert full_space.contains(config), config


def test_focus_search_finds_surrogate_minimum(numeric_space):
    center = np.array([0.0, 0.6, 0.4])
    incumbent = {"mtry": 4, "min.node.size": 1.0, "sample.fraction": 1.0}
    config = propose(
        BowlSurrogate(center), numeric_space, incumbent, ConfidenceBound(1.0), points=100
    )
    u = numeric_space.to_unit_array([config])[0]
    assert config["mtry"] == 1
    assert np.linalg.norm(u - center) < 0.1


def test_ties_prefer_candidate_closest_to_incumbent(numeric_space):
    incumbent = {"mtry": 2, "min.node.size": 0.3, "sample.fraction": 0.5}
    config = propose(
        FlatSurrogate(), numeric_space, incumbent, ConfidenceBound(0.0), points=200
    )
    u = numeric_space.to_unit_array([config])[0]
    u_incumbent = numeric_space.to_unit_array([incumbent])[0]
    assert np.linalg.norm(u - u_incumbent) < 0.15


def test_select_index_breaks_ties_by_distance():
    values = np.array([1.0, 0.0, 0.0, 0.5])
    candidates = np.array([[0.5, 0.5], [0.9, 0.9], [0.2, 0.1], [0.0, 0.0]])
    assert _select_index(values, candidates, np.array([0.0, 0.0])) == 2
    assert _select_index(values, candidates, np.array([1.0, 1.0])) == 1


def test_confidence_bound_lambda_depends_on_space(numeric_space, full_space):
    assert ConfidenceBound.for_space(numeric_space).cb_lambda == 1.0
    assert ConfidenceBound.for_space(full_space).cb_lambda == 2.0
    scores = ConfidenceBound(2.0).score(np.array([1.0, 1.0]), np.array([0.0, 0.5]))
    assert scores.tolist() == [1.0, 0.0]
    with pytest.raises(ValueError):
        ConfidenceBound(-1.0)
