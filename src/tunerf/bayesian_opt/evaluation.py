"""Objective evaluation: train a forest for one configuration and score its OOB predictions."""

import math
import time
import warnings

from ..errors import ConfigurationError, EvaluationFailure
from ..measures import Measure
from ..task import Task
from .param_space import ParameterSpace


class ObjectiveEvaluator:
    """Turns a raw configuration into a learner call and a scalar score.

    Evaluations are noisy: the same configuration can score differently on
    every call.
    """

    def __init__(
        self,
        task: Task,
        measure: Measure,
        space: ParameterSpace,
        learner,
        num_trees: int,
        num_threads: int,
        fixed_parameters: dict | None = None,
        max_retries: int = 0,
        random_state: int | None = None,
        show_info: bool = True,
    ) -> None:
        """Initialize evaluator.

        Args:
            task: Task to train on
            measure: Performance measure computed from OOB predictions
            space: Parameter search space
            learner: Object with ``train`` and ``get_oob_predictions``
            num_trees: Number of trees per forest
            num_threads: Threads handed to the learner
            fixed_parameters: Parameters passed to the learner unchanged
            max_retries: Extra attempts before a failure is raised
            random_state: Forest seeds are random_state + evaluation index;
                None leaves seeding to the learner
            show_info: Print retries to the console
        """
        if max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {max_retries}")
        self.task = task
        self.measure = measure
        self.space = space
        self.learner = learner
        self.num_trees = num_trees
        self.num_threads = num_threads
        self.fixed_parameters = dict(fixed_parameters or {})
        self.max_retries = max_retries
        self.random_state = random_state
        self.show_info = show_info

    def learner_parameters(self, config: dict, index: int | None = None) -> dict:
        """Transformed configuration merged with the structural and fixed settings."""
        par_vals = {
            **self.space.transform(config),
            "num.trees": self.num_trees,
            "num.threads": self.num_threads,
        }
        if self.random_state is not None and index is not None:
            par_vals["seed"] = self.random_state + index
        return {**par_vals, **self.fixed_parameters}

    def evaluate(self, config: dict, index: int | None = None) -> tuple[float, float]:
        """Evaluate one configuration.

        Args:
            config: Raw configuration
            index: Position of the evaluation in the log

        Returns:
            Tuple of (score, elapsed wall-clock seconds)

        Raises:
            EvaluationFailure: If every attempt failed
        """
        for attempt in range(self.max_retries + 1):
            try:
                return self._evaluate_once(config, index)
            except EvaluationFailure:
                if attempt == self.max_retries:
                    raise
                if self.show_info:
                    print(f"Evaluation failed, retrying ({attempt + 1}/{self.max_retries})")

    def _evaluate_once(self, config: dict, index: int | None) -> tuple[float, float]:
        par_vals = self.learner_parameters(config, index)
        start = time.perf_counter()
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                model = self.learner.train(self.task.type, par_vals, self.task)
                predictions = self.learner.get_oob_predictions(model, self.task)
                score = self.measure.compute(predictions)
        except Exception as exc:
            raise EvaluationFailure(
                f"Evaluation of {config} failed: {exc}"
            ) from exc
        elapsed = time.perf_counter() - start

        if not math.isfinite(score):
            raise EvaluationFailure(
                f"Evaluation of {config} returned a non-finite "
                f"{self.measure.id} ({score})"
            )
        return float(score), elapsed
