"""Task descriptor: the data to learn from plus what kind of problem it is."""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd

from .errors import ConfigurationError


class TaskType(str, Enum):
    CLASSIF = "classif"
    REGR = "regr"


@dataclass(frozen=True, eq=False)
class Task:
    """Labelled dataset tagged with its task type.

    Use ``Task.classification`` or ``Task.regression`` to build one.
    """

    X: pd.DataFrame
    y: pd.Series
    type: TaskType

    def __post_init__(self) -> None:
        if len(self.X) == 0:
            raise ConfigurationError("Task has no observations")
        if len(self.X) != len(self.y):
            raise ConfigurationError(
                f"X has {len(self.X)} rows but y has {len(self.y)} entries"
            )
        if self.y.isna().any():
            raise ConfigurationError("Target contains missing values")
        if self.type is TaskType.CLASSIF and len(self.class_levels) < 2:
            raise ConfigurationError("Classification task needs at least two classes")

    @classmethod
    def classification(cls, X, y) -> "Task":
        return cls(_as_frame(X), _as_series(y), TaskType.CLASSIF)

    @classmethod
    def regression(cls, X, y) -> "Task":
        y = _as_series(y).astype(float)
        return cls(_as_frame(X), y, TaskType.REGR)

    @property
    def size(self) -> int:
        return len(self.X)

    @property
    def n_features(self) -> int:
        return self.X.shape[1]

    @property
    def class_levels(self) -> tuple:
        if self.type is TaskType.REGR:
            return ()
        return tuple(np.unique(self.y.to_numpy()))

    @property
    def predict_type(self) -> str:
        return "prob" if self.type is TaskType.CLASSIF else "response"


def _as_frame(X) -> pd.DataFrame:
    if isinstance(X, pd.DataFrame):
        return X.reset_index(drop=True)
    X = np.asarray(X)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    return pd.DataFrame(X, columns=[f"f_{i}" for i in range(X.shape[1])])


def _as_series(y) -> pd.Series:
    if isinstance(y, pd.Series):
        return y.reset_index(drop=True)
    return pd.Series(np.asarray(y))
