import numpy as np
from scipy.spatial.distance import pdist

from tunerf.bayesian_opt.sampling import generate_initial_design, latin_hypercube_sample


def test_design_has_n_configurations_within_bounds(full_space):
    design = generate_initial_design(full_space, 30, random_state=1)
    assert len(design) == 30
    assert all(full_space.contains(config) for config in design)


def test_design_is_deterministic_given_seed(full_space):
    first = generate_initial_design(full_space, 12, random_state=7)
    second = generate_initial_design(full_space, 12, random_state=7)
    other = generate_initial_design(full_space, 12, random_state=8)
    assert first == second
    assert first != other


def test_booleans_cover_both_levels(full_space):
    for seed in range(10):
        design = generate_initial_design(full_space, 2, random_state=seed)
        assert {c["replace"] for c in design} == {True, False}
        assert {c["respect.unordered.factors"] for c in design} == {True, False}


def test_latin_hypercube_is_stratified():
    sample = latin_hypercube_sample(3, 20, random_state=0)
    for column in sample.T:
        strata = np.floor(column * 20).astype(int)
        assert sorted(strata) == list(range(20))


def test_maximin_not_worse_than_single_draw():
    single = latin_hypercube_sample(2, 15, random_state=3, n_candidates=1)
    best = latin_hypercube_sample(2, 15, random_state=3, n_candidates=10)
    assert pdist(best).min() >= pdist(single).min()


def test_single_point_design(numeric_space):
    design = generate_initial_design(numeric_space, 1, random_state=0)
    assert len(design) == 1
    assert numeric_space.contains(design[0])
