import numpy as np
import pytest

from tunerf.errors import ConfigurationError
from tunerf.learner import Predictions
from tunerf.measures import check_measure, default_measure, get_measure


def _classification(truth, prob, classes):
    classes = np.array(classes)
    prob = np.array(prob, dtype=float)
    response = classes[np.argmax(np.nan_to_num(prob, nan=-1.0), axis=1)]
    return Predictions(np.array(truth), response, prob, classes)


def test_multiclass_brier():
    predictions = _classification(
        ["a", "b"], [[0.5, 0.5, 0.0], [0.0, 1.0, 0.0]], ["a", "b", "c"]
    )
    assert get_measure("multiclass.brier").compute(predictions) == pytest.approx(0.25)


def test_binary_brier_uses_last_level_as_positive():
    predictions = _classification(["no", "yes"], [[0.8, 0.2], [0.4, 0.6]], ["no", "yes"])
    # ((0.2 - 0)^2 + (0.6 - 1)^2) / 2
    assert get_measure("brier").compute(predictions) == pytest.approx(0.1)


def test_rows_without_oob_prediction_are_ignored():
    predictions = _classification(
        ["a", "b", "a"], [[1.0, 0.0], [np.nan, np.nan], [0.0, 1.0]], ["a", "b"]
    )
    assert get_measure("mmce").compute(predictions) == pytest.approx(0.5)
    assert get_measure("acc").compute(predictions) == pytest.approx(0.5)


def test_regression_measures():
    predictions = Predictions(np.array([1.0, 2.0, 3.0]), np.array([1.0, 3.0, 3.0]))
    assert get_measure("mse").compute(predictions) == pytest.approx(1 / 3)
    assert get_measure("mae").compute(predictions) == pytest.approx(1 / 3)
    assert get_measure("rmse").compute(predictions) == pytest.approx(np.sqrt(1 / 3))
    assert get_measure("rsq").minimize is False


def test_nothing_to_score_gives_nan():
    predictions = Predictions(np.array([1.0]), np.array([np.nan]))
    assert np.isnan(get_measure("mse").compute(predictions))


def test_default_measures(iris_task, binary_task, regression_task):
    assert default_measure(iris_task).id == "multiclass.brier"
    assert default_measure(binary_task).id == "brier"
    assert default_measure(regression_task).id == "mse"


def test_measure_must_fit_the_task(iris_task, regression_task):
    with pytest.raises(ConfigurationError):
        check_measure(get_measure("mse"), iris_task)
    with pytest.raises(ConfigurationError):
        check_measure(get_measure("brier"), iris_task)
    with pytest.raises(ConfigurationError):
        check_measure(get_measure("auc"), regression_task)
    with pytest.raises(ConfigurationError, match="Unknown measure"):
        get_measure("f1")
