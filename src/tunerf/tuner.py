"""Automatic tuning of random forests with one function call."""

import time
from dataclasses import replace
from pathlib import Path

from joblib import cpu_count

from .bayesian_opt.checkpointing import create_run_hash, load_checkpoint
from .bayesian_opt.evaluation import ObjectiveEvaluator
from .bayesian_opt.optimizer import BayesianOptimizer
from .bayesian_opt.param_space import ParameterSpace, build_space
from .bayesian_opt.summary import TuningResult, recommended_config, summarize
from .config import (
    DEFAULT_FIXED_PARAMETERS,
    DEFAULT_TUNE_PARAMETERS,
    N_ITERS,
    N_TREES,
    RANDOM_SEED,
    SAVE_FILE_PATH,
    TunerConfig,
)
from .errors import CheckpointIOError, ConfigurationError, EvaluationFailure
from .learner import ForestLearner
from .measures import Measure, check_measure, default_measure, get_measure
from .task import Task

STRUCTURAL_PARAMETERS = ("num.trees", "num.threads")


def tune_rf(
    task: Task,
    measure: Measure | str | None = None,
    iters: int = N_ITERS,
    num_threads: int | None = None,
    num_trees: int = N_TREES,
    parameters: dict | None = None,
    tune_parameters=DEFAULT_TUNE_PARAMETERS,
    save_file_path: str = SAVE_FILE_PATH,
    build_final_model: bool = True,
    show_info: bool = True,
    random_state: int = RANDOM_SEED,
    learner=None,
) -> TuningResult:
    """Tune mtry, min.node.size and sample.fraction of a random forest.

    Model-based optimization is used as the tuning strategy and OOB
    predictions are used for evaluation, so no resampling is needed.

    Args:
        task: Classification or regression task
        measure: Measure or measure id to optimize. Default is the Brier score
            for classification and the MSE for regression
        iters: Number of evaluations, initial design included
        num_threads: Threads per forest. Default is the number of CPUs
        num_trees: Number of trees
        parameters: Fixed learner parameters. Default sets ``replace`` and
            ``respect.unordered.factors`` to True
        tune_parameters: Parameters to tune; ``replace`` and
            ``respect.unordered.factors`` can be added when they are not fixed
        save_file_path: File interim results are saved to. If an evaluation
            fails, the run can be continued with ``restart_tune_rf``
        build_final_model: Fit a forest with the recommended parameters
        show_info: Print progress to the console
        random_state: Random seed for reproducibility
        learner: Learner collaborator; a ``ForestLearner`` by default

    Returns:
        TuningResult with the mean of the best 5 % of the evaluations, all
        evaluations and the final model
    """
    config = TunerConfig(
        iters=iters,
        num_trees=num_trees,
        num_threads=num_threads,
        parameters=DEFAULT_FIXED_PARAMETERS if parameters is None else parameters,
        tune_parameters=tune_parameters,
        save_file_path=save_file_path,
        build_final_model=build_final_model,
        show_info=show_info,
        random_state=random_state,
    )
    return run_tuning(task, config, measure=measure, learner=learner)


def run_tuning(
    task: Task,
    config: TunerConfig,
    measure: Measure | str | None = None,
    learner=None,
    resume: bool = False,
) -> TuningResult:
    """Run (or resume) a tuning run described by ``config``.

    Args:
        task: Classification or regression task
        config: Run configuration
        measure: Measure or measure id; the task's default if None
        learner: Learner collaborator; a ``ForestLearner`` by default
        resume: Continue from the checkpoint at ``config.save_file_path``

    Returns:
        TuningResult
    """
    measure = _resolve_measure(task, measure)
    learner = learner or ForestLearner(random_state=config.random_state)
    _check_fixed_parameters(config.parameters, learner)

    space = build_space(
        task.size, task.n_features, config.tune_parameters, config.parameters
    )
    num_threads = config.num_threads or cpu_count()

    evaluator = ObjectiveEvaluator(
        task,
        measure,
        space,
        learner,
        num_trees=config.num_trees,
        num_threads=num_threads,
        fixed_parameters=config.parameters,
        max_retries=config.max_eval_retries,
        random_state=(
            config.random_state
            if "seed" in getattr(learner, "supported_parameters", ())
            else None
        ),
        show_info=config.show_info,
    )
    run_hash = create_run_hash(
        task.X.shape,
        list(task.X.columns),
        {**config.hash_input(), "measure": measure.id},
    )
    optimizer = BayesianOptimizer(
        space,
        evaluator,
        minimize=measure.minimize,
        iters=config.iters,
        design_size=config.design_size,
        checkpoint_file=config.save_file_path,
        focussearch_points=config.focussearch_points,
        focussearch_maxit=config.focussearch_maxit,
        focussearch_restarts=config.focussearch_restarts,
        random_state=config.random_state,
        run_hash=run_hash,
        metadata={"config": config.to_dict(), "measure": measure.id},
        show_info=config.show_info,
    )

    log = optimizer.run_search(resume=resume)
    result = summarize(log, space, measure.id, measure.minimize)

    if config.build_final_model:
        if config.show_info:
            print("Training final model with the recommended parameters...")
        model = _train_final_model(task, learner, space, result, config, num_threads)
        result = replace(result, model=model)

    if config.show_info:
        print(result)
    return result


def restart_tune_rf(
    save_file_path: str = SAVE_FILE_PATH,
    task: Task | None = None,
    measure: Measure | str | None = None,
    learner=None,
    show_info: bool | None = None,
) -> TuningResult:
    """Continue a failed ``tune_rf`` run from its checkpoint.

    Args:
        save_file_path: Checkpoint written by the failed run
        task: The task of the failed run
        measure: Needed only if the run used a measure outside ``MEASURES``
        learner: Learner collaborator; a ``ForestLearner`` by default
        show_info: Override the console output setting of the failed run

    Returns:
        TuningResult
    """
    if task is None:
        raise ConfigurationError("restart_tune_rf needs the task of the failed run")

    checkpoint = load_checkpoint(Path(save_file_path))
    if checkpoint is None:
        raise CheckpointIOError(f"No checkpoint found at {save_file_path}")

    try:
        metadata = checkpoint["metadata"]
        config = TunerConfig(**metadata["config"])
        measure_id = metadata["measure"]
    except (KeyError, TypeError) as exc:
        raise CheckpointIOError(
            f"Checkpoint {save_file_path} was not written by tune_rf"
        ) from exc

    config.save_file_path = str(save_file_path)
    if show_info is not None:
        config.show_info = show_info

    if measure is None:
        measure = get_measure(measure_id)
    measure = _resolve_measure(task, measure)
    if measure.id != measure_id:
        raise ConfigurationError(
            f"Checkpoint was tuned on '{measure_id}', not '{measure.id}'"
        )
    return run_tuning(task, config, measure=measure, learner=learner, resume=True)


def estimate_time_tune_rf(
    task: Task,
    iters: int = N_ITERS,
    num_threads: int | None = None,
    num_trees: int = N_TREES,
    learner=None,
    show_info: bool = True,
) -> float:
    """Estimate the duration of ``tune_rf`` from one forest with default settings.

    Args:
        task: Classification or regression task
        iters: Number of evaluations planned
        num_threads: Threads per forest. Default is the number of CPUs
        num_trees: Number of trees
        learner: Learner collaborator; a ``ForestLearner`` by default
        show_info: Print the estimate

    Returns:
        Estimated seconds
    """
    learner = learner or ForestLearner()
    par_vals = {"num.trees": num_trees, "num.threads": num_threads or cpu_count()}

    start = time.perf_counter()
    model = learner.train(task.type, par_vals, task)
    learner.get_oob_predictions(model, task)
    estimate = (time.perf_counter() - start) * iters

    if show_info:
        hours, rest = divmod(int(round(estimate)), 3600)
        minutes, seconds = divmod(rest, 60)
        print(f"Approximated time for tuning: {hours}H {minutes}M {seconds}S")
    return estimate


def _resolve_measure(task: Task, measure: Measure | str | None) -> Measure:
    if measure is None:
        measure = default_measure(task)
    elif isinstance(measure, str):
        measure = get_measure(measure)
    check_measure(measure, task)
    return measure


def _check_fixed_parameters(parameters: dict, learner) -> None:
    structural = [name for name in STRUCTURAL_PARAMETERS if name in parameters]
    if structural:
        raise ConfigurationError(
            f"{structural[0]} is set through num_trees / num_threads, "
            "not as a fixed parameter"
        )
    supported = getattr(learner, "supported_parameters", None)
    if supported is None:
        return
    unknown = [name for name in parameters if name not in supported]
    if unknown:
        raise ConfigurationError(f"Learner does not support parameter {unknown[0]}")


def _train_final_model(
    task: Task,
    learner,
    space: ParameterSpace,
    result: TuningResult,
    config: TunerConfig,
    num_threads: int,
):
    par_vals = {
        **recommended_config(result, space),
        "num.trees": config.num_trees,
        "num.threads": num_threads,
        **config.parameters,
    }
    try:
        return learner.train(task.type, par_vals, task)
    except Exception as exc:
        raise EvaluationFailure(f"Training the final model failed: {exc}") from exc
