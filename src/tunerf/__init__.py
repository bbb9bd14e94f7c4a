"""Random forest hyperparameter tuning with model-based optimization."""

from .config import TunerConfig
from .errors import (
    CheckpointIOError,
    ConfigurationError,
    EvaluationFailure,
    SurrogateFitFailure,
    TunerError,
)
from .learner import ForestLearner, OOBForest
from .measures import MEASURES, Measure, default_measure, get_measure
from .task import Task, TaskType
from .tuner import estimate_time_tune_rf, restart_tune_rf, run_tuning, tune_rf

__all__ = [
    "CheckpointIOError",
    "ConfigurationError",
    "EvaluationFailure",
    "ForestLearner",
    "MEASURES",
    "Measure",
    "OOBForest",
    "SurrogateFitFailure",
    "Task",
    "TaskType",
    "TunerConfig",
    "TunerError",
    "default_measure",
    "estimate_time_tune_rf",
    "get_measure",
    "restart_tune_rf",
    "run_tuning",
    "tune_rf",
]
