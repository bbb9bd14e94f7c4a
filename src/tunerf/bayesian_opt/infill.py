"""Focus search over the acquisition criterion to propose the next configuration."""

import numpy as np

from ..config import FOCUSSEARCH_MAXIT, FOCUSSEARCH_RESTARTS
from .acquisition import Acquisition
from .param_space import ParameterSpace
from .surrogate import Surrogate

TIE_TOLERANCE = 1e-12


def propose(
    surrogate: Surrogate,
    space: ParameterSpace,
    incumbent: dict,
    acquisition: Acquisition,
    points: int,
    maxit: int = FOCUSSEARCH_MAXIT,
    restarts: int = FOCUSSEARCH_RESTARTS,
    random_state: int = 42,
) -> dict:
    """Suggest the next configuration to evaluate.

    Each restart samples ``points`` random candidates in the search region,
    keeps the best under the acquisition criterion and halves the numeric
    region around it (boolean dimensions are fixed to its level) before the
    next of ``maxit`` rounds.

    Args:
        surrogate: Fitted surrogate model
        space: Parameter search space
        incumbent: Best configuration observed so far
        acquisition: Acquisition criterion, lower is better
        points: Candidates per round
        maxit: Rounds per restart
        restarts: Number of restarts from the full space
        random_state: Random seed for reproducibility

    Returns:
        Raw configuration within the bounds of the space
    """
    rng = np.random.default_rng(random_state)
    n_dims = len(space)
    numeric = np.array([p.is_numeric for p in space])
    incumbent_unit = space.to_unit_array([incumbent])[0]

    best_point, best_value = None, np.inf
    for _ in range(restarts):
        lower, upper = np.zeros(n_dims), np.ones(n_dims)
        for _ in range(maxit):
            candidates = space.snap(rng.uniform(lower, upper, size=(points, n_dims)))
            values = acquisition.score(*surrogate.predict(candidates))
            idx = _select_index(values, candidates, incumbent_unit)
            point, value = candidates[idx], values[idx]

            if best_point is None or _is_better(
                value, point, best_value, best_point, incumbent_unit
            ):
                best_point, best_value = point, value

            width = (upper - lower) / 4
            lower = np.where(numeric, np.clip(point - width, 0.0, 1.0), point)
            upper = np.where(numeric, np.clip(point + width, 0.0, 1.0), point)

    return space.from_unit_array(best_point)


def _select_index(
    values: np.ndarray, candidates: np.ndarray, incumbent_unit: np.ndarray
) -> int:
    """Index of the lowest value; ties go to the candidate closest to the incumbent."""
    ties = np.flatnonzero(values <= values.min() + TIE_TOLERANCE)
    distances = np.linalg.norm(candidates[ties] - incumbent_unit, axis=1)
    return int(ties[np.argmin(distances)])


def _is_better(value, point, best_value, best_point, incumbent_unit) -> bool:
    if value < best_value - TIE_TOLERANCE:
        return True
    if value > best_value + TIE_TOLERANCE:
        return False
    return np.linalg.norm(point - incumbent_unit) < np.linalg.norm(
        best_point - incumbent_unit
    )
