"""Surrogate models for Bayesian optimization."""

import warnings
from typing import Protocol

import numpy as np
from sklearn.ensemble import RandomForestRegressor
from sklearn.gaussian_process import GaussianProcessRegressor
from sklearn.gaussian_process.kernels import ConstantKernel, Matern, WhiteKernel

from ..config import JITTER, JITTER_GROWTH, MATERN_NU
from ..errors import SurrogateFitFailure
from .history import EvaluationLog
from .param_space import ParameterSpace


class Surrogate(Protocol):
    def fit(self, X: np.ndarray, y: np.ndarray) -> "Surrogate": ...

    def predict(self, X: np.ndarray) -> tuple[np.ndarray, np.ndarray]: ...


class GaussianProcessSurrogate:
    """Gaussian process with a Matern kernel and an estimated nugget."""

    def __init__(
        self,
        nu: float = MATERN_NU,
        jitter: float = JITTER,
        jitter_growth: float = JITTER_GROWTH,
        random_state: int = 42,
    ) -> None:
        self.nu = nu
        self.jitter = jitter
        self.jitter_growth = jitter_growth
        self.random_state = random_state
        self.gp_: GaussianProcessRegressor | None = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> "GaussianProcessSurrogate":
        """Fit the Gaussian process, retrying once with more jitter.

        Args:
            X: Unit-encoded configurations
            y: Scores, lower is better

        Returns:
            The fitted surrogate

        Raises:
            SurrogateFitFailure: If the retry fails as well
        """
        try:
            self.gp_ = self._fit_gaussian_process(X, y, self.jitter)
        except (np.linalg.LinAlgError, ValueError):
            jitter = self.jitter * self.jitter_growth
            try:
                self.gp_ = self._fit_gaussian_process(X, y, jitter)
            except (np.linalg.LinAlgError, ValueError) as exc:
                raise SurrogateFitFailure(
                    f"Gaussian process fit failed on {len(y)} observations "
                    f"(jitter {jitter:g}): {exc}"
                ) from exc
        return self

    def predict(self, X: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        mu, sigma = self.gp_.predict(X, return_std=True)
        return mu, sigma

    def _fit_gaussian_process(
        self, X: np.ndarray, y: np.ndarray, jitter: float
    ) -> GaussianProcessRegressor:
        kernel = ConstantKernel(1.0, (1e-3, 1e3)) * Matern(
            length_scale=np.ones(X.shape[1]), length_scale_bounds=(1e-2, 1e2), nu=self.nu
        ) + WhiteKernel(noise_level=1e-2, noise_level_bounds=(1e-8, 1e1))
        gp = GaussianProcessRegressor(
            kernel=kernel,
            alpha=jitter,
            normalize_y=True,
            random_state=self.random_state,
        )
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            gp.fit(X, y)
        return gp


class RandomForestSurrogate:
    """Random forest regressor; uncertainty is the spread of the tree predictions."""

    def __init__(self, n_estimators: int = 100, random_state: int = 42) -> None:
        self.n_estimators = n_estimators
        self.random_state = random_state
        self.forest_: RandomForestRegressor | None = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> "RandomForestSurrogate":
        self.forest_ = RandomForestRegressor(
            n_estimators=self.n_estimators, random_state=self.random_state
        )
        self.forest_.fit(X, y)
        return self

    def predict(self, X: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        per_tree = np.array([tree.predict(X) for tree in self.forest_.estimators_])
        return per_tree.mean(axis=0), per_tree.std(axis=0)


def extract_training_data(
    log: EvaluationLog, space: ParameterSpace, minimize: bool
) -> tuple[np.ndarray, np.ndarray]:
    """Extract training data from the evaluation log.

    Args:
        log: Evaluation log
        space: Parameter search space
        minimize: Whether the measure is minimized

    Returns:
        Tuple of (unit-encoded configurations, scores oriented so lower is better)
    """
    X_train = space.to_unit_array(log.configs)
    y_train = log.scores if minimize else -log.scores
    return X_train, y_train


def fit_surrogate(
    surrogate: Surrogate, log: EvaluationLog, space: ParameterSpace, minimize: bool
) -> Surrogate:
    """Fit a surrogate on the log; any fit error surfaces as SurrogateFitFailure."""
    X_train, y_train = extract_training_data(log, space, minimize)
    try:
        return surrogate.fit(X_train, y_train)
    except SurrogateFitFailure:
        raise
    except Exception as exc:
        raise SurrogateFitFailure(
            f"{type(surrogate).__name__} fit failed on {len(y_train)} observations: {exc}"
        ) from exc
