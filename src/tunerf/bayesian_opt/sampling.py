"""Initial design sampling for Bayesian optimization."""

import numpy as np
from scipy.spatial.distance import pdist
from scipy.stats import qmc

from ..config import DESIGN_CANDIDATES
from .param_space import ParameterSpace


def transform_sample_to_params(sample: np.ndarray, space: ParameterSpace) -> dict:
    """Transform a unit-cube sample to a raw configuration.

    Args:
        sample: Normalized sample values [0, 1], one per dimension
        space: Parameter search space

    Returns:
        Dictionary of raw parameter values
    """
    return space.from_unit_array(sample)


def latin_hypercube_sample(
    n_dims: int,
    n_samples: int,
    random_state: int = 42,
    n_candidates: int = DESIGN_CANDIDATES,
) -> np.ndarray:
    """Draw a maximin Latin hypercube sample in the unit cube.

    Several hypercubes are drawn and the one whose closest pair of points is
    farthest apart is kept.

    Args:
        n_dims: Number of dimensions
        n_samples: Number of points
        random_state: Random seed for reproducibility
        n_candidates: Number of hypercubes to compare

    Returns:
        Array of shape (n_samples, n_dims)
    """
    sampler = qmc.LatinHypercube(d=n_dims, rng=np.random.default_rng(random_state))
    best_sample = sampler.random(n=n_samples)
    if n_samples < 2:
        return best_sample

    best_distance = pdist(best_sample).min()
    for _ in range(n_candidates - 1):
        sample = sampler.random(n=n_samples)
        distance = pdist(sample).min()
        if distance > best_distance:
            best_sample, best_distance = sample, distance
    return best_sample


def generate_initial_design(
    space: ParameterSpace, n: int, random_state: int = 42
) -> list[dict]:
    """Generate the space-filling design evaluated before any surrogate exists.

    Boolean dimensions fall on either side of 0.5 in at least one stratum, so
    both levels appear whenever ``n >= 2``.

    Args:
        space: Parameter search space
        n: Number of configurations
        random_state: Random seed for reproducibility

    Returns:
        List of raw configurations
    """
    samples = latin_hypercube_sample(len(space), n, random_state)
    return [transform_sample_to_params(sample, space) for sample in samples]
