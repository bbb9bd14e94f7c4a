"""Acquisition criteria scored on the surrogate's predictive distribution.

Scores are minimized; the surrogate is always trained on scores oriented so
that lower is better.
"""

from typing import Protocol

import numpy as np

from .param_space import ParameterSpace


class Acquisition(Protocol):
    def score(self, mu: np.ndarray, sigma: np.ndarray) -> np.ndarray: ...


class ConfidenceBound:
    """Lower confidence bound ``mu - cb_lambda * sigma``."""

    def __init__(self, cb_lambda: float = 1.0) -> None:
        if cb_lambda < 0:
            raise ValueError("cb_lambda must be non-negative")
        self.cb_lambda = cb_lambda

    def score(self, mu: np.ndarray, sigma: np.ndarray) -> np.ndarray:
        return mu - self.cb_lambda * sigma

    @classmethod
    def for_space(cls, space: ParameterSpace) -> "ConfidenceBound":
        """Lambda 1 for purely numeric spaces, 2 once boolean dimensions are tuned."""
        return cls(1.0 if space.is_numeric else 2.0)
