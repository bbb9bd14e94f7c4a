"""Performance measures computed from (OOB) predictions."""

from dataclasses import dataclass
from typing import Callable

import numpy as np
from sklearn.metrics import (
    brier_score_loss,
    log_loss,
    mean_absolute_error,
    mean_squared_error,
    r2_score,
    roc_auc_score,
)

from .errors import ConfigurationError
from .learner import Predictions
from .task import Task, TaskType


@dataclass(frozen=True)
class Measure:
    id: str
    minimize: bool
    fun: Callable[[Predictions], float]
    task_types: tuple[TaskType, ...] = (TaskType.CLASSIF, TaskType.REGR)

    def compute(self, predictions: Predictions) -> float:
        """Score the predictions, ignoring rows without a prediction."""
        predictions = predictions.dropna()
        if len(predictions) == 0:
            return float("nan")
        return float(self.fun(predictions))


def _one_hot(predictions: Predictions) -> np.ndarray:
    return (predictions.truth[:, None] == predictions.classes[None, :]).astype(float)


def _brier(p: Predictions) -> float:
    positive = p.classes[-1]
    return brier_score_loss((p.truth == positive).astype(int), p.prob[:, -1])


def _multiclass_brier(p: Predictions) -> float:
    return np.mean(np.sum((p.prob - _one_hot(p)) ** 2, axis=1))


def _logloss(p: Predictions) -> float:
    return log_loss(p.truth, p.prob, labels=p.classes)


def _auc(p: Predictions) -> float:
    if len(p.classes) == 2:
        return roc_auc_score((p.truth == p.classes[-1]).astype(int), p.prob[:, -1])
    return roc_auc_score(p.truth, p.prob, multi_class="ovr", labels=p.classes)


def _mmce(p: Predictions) -> float:
    return np.mean(p.response != p.truth)


CLASSIF = (TaskType.CLASSIF,)
REGR = (TaskType.REGR,)

MEASURES = {
    m.id: m
    for m in (
        Measure("brier", True, _brier, CLASSIF),
        Measure("multiclass.brier", True, _multiclass_brier, CLASSIF),
        Measure("logloss", True, _logloss, CLASSIF),
        Measure("auc", False, _auc, CLASSIF),
        Measure("mmce", True, _mmce, CLASSIF),
        Measure("acc", False, lambda p: 1.0 - _mmce(p), CLASSIF),
        Measure("mse", True, lambda p: mean_squared_error(p.truth, p.response), REGR),
        Measure(
            "rmse",
            True,
            lambda p: np.sqrt(mean_squared_error(p.truth, p.response)),
            REGR,
        ),
        Measure("mae", True, lambda p: mean_absolute_error(p.truth, p.response), REGR),
        Measure("rsq", False, lambda p: r2_score(p.truth, p.response), REGR),
    )
}


def get_measure(measure_id: str) -> Measure:
    if measure_id not in MEASURES:
        raise ConfigurationError(
            f"Unknown measure '{measure_id}'. Available: {sorted(MEASURES)}"
        )
    return MEASURES[measure_id]


def default_measure(task: Task) -> Measure:
    """Brier score for classification (multiclass if >2 levels), MSE for regression."""
    if task.type is TaskType.CLASSIF:
        if len(task.class_levels) == 2:
            return MEASURES["brier"]
        return MEASURES["multiclass.brier"]
    return MEASURES["mse"]


def check_measure(measure: Measure, task: Task) -> None:
    if task.type not in measure.task_types:
        raise ConfigurationError(
            f"Measure '{measure.id}' does not support {task.type.value} tasks"
        )
    if measure.id == "brier" and len(task.class_levels) != 2:
        raise ConfigurationError("Measure 'brier' needs a two-class task")
