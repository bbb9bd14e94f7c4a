"""Main Bayesian optimizer class."""

from enum import Enum
from pathlib import Path
from typing import Callable

from ..config import (
    DESIGN_SIZE,
    FOCUSSEARCH_MAXIT,
    FOCUSSEARCH_RESTARTS,
    N_ITERS,
    RANDOM_SEED,
    SAVE_FILE_PATH,
)
from ..errors import CheckpointIOError, ConfigurationError, TunerError
from .acquisition import Acquisition, ConfidenceBound
from .checkpointing import load_checkpoint, remove_checkpoint, save_checkpoint
from .history import EvaluationLog
from .param_space import ParameterSpace
from .phases import run_bayesian_phase, run_initial_phase
from .sampling import generate_initial_design
from .surrogate import GaussianProcessSurrogate, Surrogate

CHECKPOINT_VERSION = 1


class LoopState(str, Enum):
    INIT = "init"
    DESIGN_PHASE = "design_phase"
    SURROGATE_PHASE = "surrogate_phase"
    EVAL_PHASE = "eval_phase"
    DONE = "done"
    FAILED = "failed"


class BayesianOptimizer:
    """Sequential model-based optimizer with a checkpointed evaluation log."""

    def __init__(
        self,
        space: ParameterSpace,
        evaluator,
        minimize: bool,
        iters: int = N_ITERS,
        design_size: int = DESIGN_SIZE,
        checkpoint_file: str | Path = SAVE_FILE_PATH,
        surrogate_factory: Callable[[], Surrogate] | None = None,
        acquisition: Acquisition | None = None,
        focussearch_points: int | None = None,
        focussearch_maxit: int = FOCUSSEARCH_MAXIT,
        focussearch_restarts: int = FOCUSSEARCH_RESTARTS,
        random_state: int = RANDOM_SEED,
        run_hash: str | None = None,
        metadata: dict | None = None,
        show_info: bool = True,
    ) -> None:
        """Initialize Bayesian optimizer.

        Args:
            space: Parameter search space
            evaluator: Object whose ``evaluate(config, index)`` returns (score, seconds)
            minimize: Whether lower scores are better
            iters: Total number of evaluations, initial design included
            design_size: Number of initial Latin hypercube samples
            checkpoint_file: File the evaluation log is saved to after every evaluation
            surrogate_factory: Creates a fresh surrogate for every iteration
            acquisition: Acquisition criterion (confidence bound by default)
            focussearch_points: Candidates per focus search round (default: iters)
            focussearch_maxit: Focus search rounds per restart
            focussearch_restarts: Focus search restarts
            random_state: Random seed for reproducibility
            run_hash: Identifies the run; a checkpoint with another hash is refused
            metadata: Extra data stored with every checkpoint
            show_info: Print progress to the console
        """
        self.space = space
        self.evaluator = evaluator
        self.minimize = minimize
        self.iters = iters
        self.design_size = design_size
        self.checkpoint_file = Path(checkpoint_file)
        self.surrogate_factory = surrogate_factory or (
            lambda: GaussianProcessSurrogate(random_state=self.random_state)
        )
        self.acquisition = acquisition or ConfidenceBound.for_space(space)
        self._focussearch_points = focussearch_points
        self.focussearch_maxit = focussearch_maxit
        self.focussearch_restarts = focussearch_restarts
        self.random_state = random_state
        self.run_hash = run_hash
        self.metadata = dict(metadata or {})
        self.show_info = show_info

        self.state = LoopState.INIT
        self.log = EvaluationLog()
        self.design: list[dict] = []
        self.n_surrogate_fits = 0

    @property
    def focussearch_points(self) -> int:
        return self._focussearch_points or self.iters

    def run_search(self, resume: bool = False) -> EvaluationLog:
        """Run optimization procedure with checkpointing.

        Args:
            resume: Continue from the checkpoint instead of starting over

        Returns:
            The complete evaluation log

        Raises:
            TunerError: Any failure; the last good checkpoint is kept
        """
        try:
            self._initialize_optimization(resume)
            self.state = LoopState.DESIGN_PHASE
            run_initial_phase(self)
            run_bayesian_phase(self)
            remove_checkpoint(self.checkpoint_file)
        except TunerError as exc:
            self.state = LoopState.FAILED
            raise exc.with_context(len(self.log), self.log.last_config())

        self.state = LoopState.DONE
        return self.log

    def enter_surrogate_phase(self) -> None:
        self.state = LoopState.SURROGATE_PHASE

    def enter_eval_phase(self) -> None:
        self.state = LoopState.EVAL_PHASE

    def checkpoint_data(self) -> dict:
        return {
            "version": CHECKPOINT_VERSION,
            "run_hash": self.run_hash,
            "iters": self.iters,
            "design_size": self.design_size,
            "random_state": self.random_state,
            "design": self.design,
            "results": self.log.to_records(),
            "next_index": len(self.log),
            "remaining_budget": self.iters - len(self.log),
            "metadata": self.metadata,
        }

    def save_checkpoint(self) -> None:
        save_checkpoint(self.checkpoint_data(), self.checkpoint_file)

    def _initialize_optimization(self, resume: bool) -> None:
        """Validate the budget and set up a fresh or resumed log."""
        if self.iters < 1:
            raise ConfigurationError(f"iters must be positive, got {self.iters}")
        if self.design_size < 1:
            raise ConfigurationError(
                f"design_size must be positive, got {self.design_size}"
            )
        for name in ("focussearch_maxit", "focussearch_restarts"):
            if getattr(self, name) < 1:
                raise ConfigurationError(
                    f"{name} must be positive, got {getattr(self, name)}"
                )
        if self._focussearch_points is not None and self._focussearch_points < 1:
            raise ConfigurationError(
                f"focussearch_points must be positive, got {self._focussearch_points}"
            )

        if resume:
            checkpoint = load_checkpoint(self.checkpoint_file)
            if checkpoint is None:
                raise CheckpointIOError(f"No checkpoint found at {self.checkpoint_file}")
            self._restore(checkpoint)
            return

        remove_checkpoint(self.checkpoint_file)
        self.log = EvaluationLog()
        self.design = generate_initial_design(
            self.space, min(self.design_size, self.iters), self.random_state
        )

    def _restore(self, checkpoint: dict) -> None:
        """Rebuild the log and budget from checkpoint data."""
        if not isinstance(checkpoint, dict):
            raise CheckpointIOError(
                f"Checkpoint {self.checkpoint_file} holds a "
                f"{type(checkpoint).__name__}, not optimizer state"
            )
        version = checkpoint.get("version")
        if version != CHECKPOINT_VERSION:
            raise CheckpointIOError(
                f"Checkpoint {self.checkpoint_file} has version {version}, "
                f"expected {CHECKPOINT_VERSION}"
            )

        stored_hash = checkpoint.get("run_hash")
        if self.run_hash and stored_hash and stored_hash != self.run_hash:
            raise ConfigurationError(
                f"Checkpoint {self.checkpoint_file} belongs to a different tuning run"
            )

        try:
            iters = int(checkpoint["iters"])
            design_size = int(checkpoint["design_size"])
            random_state = int(checkpoint["random_state"])
            design = list(checkpoint["design"])
            log = EvaluationLog.from_records(checkpoint["results"])
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise CheckpointIOError(
                f"Checkpoint {self.checkpoint_file} is incomplete: {exc!r}"
            ) from exc

        self.iters = iters
        self.design_size = design_size
        self.random_state = random_state
        self.design = design
        self.log = log
        if self.show_info:
            print(f"Loaded checkpoint with {len(self.log)} results")
