"""Exceptions raised while tuning."""

from typing import Any


class TunerError(Exception):
    """Base class for tuning errors.

    The optimization loop attaches the index of the evaluation it was working
    on and the last configuration that was evaluated successfully, so a run
    can be resumed by hand.
    """

    def __init__(
        self,
        message: str,
        iteration: int | None = None,
        last_config: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.iteration = iteration
        self.last_config = last_config

    def with_context(
        self, iteration: int, last_config: dict[str, Any] | None
    ) -> "TunerError":
        if self.iteration is None:
            self.iteration = iteration
        if self.last_config is None:
            self.last_config = last_config
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.iteration is not None:
            message += f" (iteration {self.iteration}"
            if self.last_config is not None:
                message += f", last good configuration {self.last_config}"
            message += ")"
        return message


class ConfigurationError(TunerError, ValueError):
    """Invalid caller input, reported before any evaluation."""


class EvaluationFailure(TunerError, RuntimeError):
    """Training, OOB prediction or scoring failed for one configuration."""


class SurrogateFitFailure(TunerError, RuntimeError):
    """The surrogate model could not be fitted, even with extra jitter."""


class CheckpointIOError(TunerError, OSError):
    """The checkpoint file could not be written or read."""
