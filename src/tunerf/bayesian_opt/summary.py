"""Turn the evaluation log into recommended parameters and a results table."""

from collections import Counter
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from ..config import TOP_QUANTILE
from .history import EvaluationLog
from .param_space import INTEGER, ParameterSpace

EXEC_TIME = "exec.time"


@dataclass(frozen=True, eq=False)
class TuningResult:
    """Recommended parameters, all evaluated configurations and the final model."""

    recommended_parameters: pd.DataFrame
    results: pd.DataFrame
    model: Any | None = None

    def __str__(self) -> str:
        n_params = self.recommended_parameters.shape[1] - 2
        return (
            "Recommended parameter settings:\n"
            f"{self.recommended_parameters.iloc[:, :n_params].to_string(index=False)}\n"
            "Results:\n"
            f"{self.recommended_parameters.iloc[:, n_params:].to_string(index=False)}"
        )


def build_results_table(
    log: EvaluationLog, space: ParameterSpace, measure_id: str
) -> pd.DataFrame:
    """One row per evaluation with transformed columns decoded to learner units.

    Args:
        log: Evaluation log
        space: Parameter search space
        measure_id: Name of the score column

    Returns:
        DataFrame with the tuned parameters, the measure and the execution time
    """
    records = []
    for observation in log:
        record = space.transform(observation.config)
        record[measure_id] = observation.score
        record[EXEC_TIME] = observation.exec_time
        records.append(record)
    return pd.DataFrame(records, columns=space.names + [measure_id, EXEC_TIME])


def select_top(results: pd.DataFrame, measure_id: str, minimize: bool) -> pd.DataFrame:
    """Rows scoring within the best 5 percent of the log."""
    scores = results[measure_id]
    if minimize:
        return results[scores <= np.quantile(scores, TOP_QUANTILE)]
    return results[scores >= np.quantile(scores, 1 - TOP_QUANTILE)]


def _mode(values: pd.Series) -> Any:
    """Most frequent value; ties go to the value seen first."""
    counts = Counter(values.tolist())
    most = max(counts.values())
    return next(v for v in values.tolist() if counts[v] == most)


def _rounded(space: ParameterSpace, name: str) -> bool:
    return name in space and (space[name].kind == INTEGER or space[name].trafo is not None)


def summarize(
    log: EvaluationLog, space: ParameterSpace, measure_id: str, minimize: bool
) -> TuningResult:
    """Aggregate the best part of the log into one recommended configuration.

    Numeric columns are averaged (integer and transformed columns rounded to
    the nearest integer), boolean columns take their most frequent value.

    Args:
        log: Evaluation log
        space: Parameter search space
        measure_id: Name of the score column
        minimize: Whether lower scores are better

    Returns:
        TuningResult without a model
    """
    if len(log) == 0:
        raise ValueError("Cannot summarize an empty evaluation log")

    results = build_results_table(log, space, measure_id)
    top = select_top(results, measure_id, minimize)

    recommended = {}
    for column in results.columns:
        if column in space and not space[column].is_numeric:
            recommended[column] = bool(_mode(top[column]))
        elif _rounded(space, column):
            recommended[column] = int(np.round(top[column].mean()))
        else:
            recommended[column] = float(top[column].mean())

    return TuningResult(
        recommended_parameters=pd.DataFrame([recommended], columns=results.columns),
        results=results,
    )


def recommended_config(result: TuningResult, space: ParameterSpace) -> dict[str, Any]:
    """Learner-facing values of the recommended parameters."""
    row = result.recommended_parameters.iloc[0]
    config = {}
    for param in space:
        value = row[param.name]
        if not param.is_numeric:
            config[param.name] = bool(value)
        elif _rounded(space, param.name):
            config[param.name] = int(value)
        else:
            config[param.name] = float(value)
    return config
