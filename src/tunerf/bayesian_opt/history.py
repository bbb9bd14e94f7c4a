"""Evaluation log: the append-only record of every evaluated configuration."""

from dataclasses import asdict, dataclass
from typing import Any, Iterator

import numpy as np

DESIGN = "design"
INFILL = "infill"


@dataclass(frozen=True)
class Observation:
    params: tuple[tuple[str, Any], ...]
    score: float
    exec_time: float
    index: int
    phase: str = DESIGN

    @classmethod
    def create(
        cls, config: dict[str, Any], score: float, exec_time: float, index: int, phase: str
    ) -> "Observation":
        return cls(tuple(config.items()), float(score), float(exec_time), index, phase)

    @property
    def config(self) -> dict[str, Any]:
        return dict(self.params)


class EvaluationLog:
    """Ordered observations; the index of each equals its position."""

    def __init__(self, observations: list[Observation] | None = None) -> None:
        self._observations: list[Observation] = []
        for observation in observations or []:
            self.append(observation)

    def __len__(self) -> int:
        return len(self._observations)

    def __iter__(self) -> Iterator[Observation]:
        return iter(self._observations)

    def __getitem__(self, i: int) -> Observation:
        return self._observations[i]

    def append(self, observation: Observation) -> None:
        if observation.index != len(self._observations):
            raise ValueError(
                f"Observation index {observation.index} does not continue a log "
                f"of length {len(self._observations)}"
            )
        self._observations.append(observation)

    @property
    def observations(self) -> tuple[Observation, ...]:
        return tuple(self._observations)

    @property
    def configs(self) -> list[dict[str, Any]]:
        return [o.config for o in self._observations]

    @property
    def scores(self) -> np.ndarray:
        return np.array([o.score for o in self._observations], dtype=float)

    def count(self, phase: str) -> int:
        return sum(o.phase == phase for o in self._observations)

    def best(self, minimize: bool) -> Observation | None:
        """Incumbent: the best-scoring observation so far (earliest on ties)."""
        if not self._observations:
            return None
        scores = self.scores if minimize else -self.scores
        return self._observations[int(np.argmin(scores))]

    def last_config(self) -> dict[str, Any] | None:
        return self._observations[-1].config if self._observations else None

    def to_records(self) -> list[dict]:
        return [asdict(o) for o in self._observations]

    @classmethod
    def from_records(cls, records: list[dict]) -> "EvaluationLog":
        return cls(
            [
                Observation(
                    params=tuple(tuple(pair) for pair in r["params"]),
                    score=r["score"],
                    exec_time=r["exec_time"],
                    index=r["index"],
                    phase=r["phase"],
                )
                for r in records
            ]
        )
