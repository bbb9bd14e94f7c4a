"""Tunable random forest parameters and their search space."""

import math
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Iterator

import numpy as np

from ..config import NODESIZE_FRACTION, SAMPLE_FRACTION_LOWER, SUPPORTED_PARAMETERS
from ..errors import ConfigurationError

INTEGER = "integer"
CONTINUOUS = "continuous"
BOOLEAN = "boolean"
KINDS = (INTEGER, CONTINUOUS, BOOLEAN)


def trafo_nodesize(x: float, size: int) -> int:
    """Map a value in [0, 1] onto a minimal node size between 1 and 0.2 * size."""
    value = 2 ** (math.log2(size * NODESIZE_FRACTION) * x)
    # rounding first keeps exact powers of two from overshooting by one
    return max(1, math.ceil(round(value, 10)))


@dataclass(frozen=True)
class ParameterSpec:
    """One tunable dimension.

    ``trafo`` maps the raw (searched) value onto the value handed to the
    learner. Integer and boolean dimensions have no transform here.
    """

    name: str
    kind: str
    lower: float | None = None
    upper: float | None = None
    default: Any = None
    trafo: Callable[[float], Any] | None = None

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ConfigurationError(f"Unknown kind '{self.kind}' for '{self.name}'")
        if self.kind == BOOLEAN:
            return
        if self.lower is None or self.upper is None:
            raise ConfigurationError(f"Parameter '{self.name}' needs bounds")
        if not (math.isfinite(self.lower) and math.isfinite(self.upper)):
            raise ConfigurationError(f"Parameter '{self.name}' has non-finite bounds")
        if self.lower > self.upper:
            raise ConfigurationError(
                f"Parameter '{self.name}': lower {self.lower} > upper {self.upper}"
            )

    @property
    def is_numeric(self) -> bool:
        return self.kind != BOOLEAN

    def transform(self, value: Any) -> Any:
        return self.trafo(value) if self.trafo is not None else value

    def contains(self, value: Any) -> bool:
        if self.kind == BOOLEAN:
            return isinstance(value, (bool, np.bool_))
        if self.kind == INTEGER and int(value) != value:
            return False
        return self.lower <= value <= self.upper

    def to_unit(self, value: Any) -> float:
        if self.kind == BOOLEAN:
            return 1.0 if value else 0.0
        width = self.upper - self.lower
        if width == 0:
            return 0.0
        return (float(value) - self.lower) / width

    def from_unit(self, u: float) -> Any:
        u = min(max(float(u), 0.0), 1.0)
        if self.kind == BOOLEAN:
            return bool(u >= 0.5)
        if self.kind == INTEGER:
            n_levels = int(self.upper - self.lower) + 1
            return int(self.lower) + min(int(u * n_levels), n_levels - 1)
        return min(self.upper, self.lower + u * (self.upper - self.lower))


class ParameterSpace:
    """Ordered set of parameter specs with unique names."""

    def __init__(self, params: list[ParameterSpec]) -> None:
        names = [p.name for p in params]
        duplicated = {name for name in names if names.count(name) > 1}
        if duplicated:
            raise ConfigurationError(f"Duplicated parameter names: {sorted(duplicated)}")
        self.params = tuple(params)

    def __len__(self) -> int:
        return len(self.params)

    def __iter__(self) -> Iterator[ParameterSpec]:
        return iter(self.params)

    def __getitem__(self, name: str) -> ParameterSpec:
        for param in self.params:
            if param.name == name:
                return param
        raise KeyError(name)

    def __contains__(self, name: str) -> bool:
        return name in self.names

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.params]

    @property
    def is_numeric(self) -> bool:
        return all(p.is_numeric for p in self.params)

    def select(self, names) -> "ParameterSpace":
        """Subset in declaration order, whatever order ``names`` is given in."""
        wanted = set(names)
        return ParameterSpace([p for p in self.params if p.name in wanted])

    def contains(self, config: dict[str, Any]) -> bool:
        return set(config) == set(self.names) and all(
            p.contains(config[p.name]) for p in self.params
        )

    def transform(self, config: dict[str, Any]) -> dict[str, Any]:
        """Learner-facing values of a raw configuration."""
        return {p.name: p.transform(config[p.name]) for p in self.params}

    def to_unit_array(self, configs: list[dict[str, Any]]) -> np.ndarray:
        return np.array(
            [[p.to_unit(config[p.name]) for p in self.params] for config in configs],
            dtype=float,
        ).reshape(len(configs), len(self.params))

    def from_unit_array(self, u: np.ndarray) -> dict[str, Any]:
        return {p.name: p.from_unit(value) for p, value in zip(self.params, u)}

    def snap(self, U: np.ndarray) -> np.ndarray:
        """Round unit-cube points to values the space can represent."""
        return self.to_unit_array([self.from_unit_array(u) for u in U])


def build_space(
    size: int,
    n_features: int,
    tune_parameters,
    fixed_parameters: dict[str, Any] | None = None,
) -> ParameterSpace:
    """Build the search space for the parameters to tune.

    Args:
        size: Number of observations in the task
        n_features: Number of features in the task
        tune_parameters: Names of the parameters to tune
        fixed_parameters: Parameters passed to the learner unchanged

    Returns:
        Space holding the selected parameters in declaration order

    Raises:
        ConfigurationError: If a name is unknown, nothing is tuned, a fixed
            parameter is tuned as well, or the task cannot bound a parameter
    """
    tune_parameters = list(tune_parameters)
    fixed_parameters = fixed_parameters or {}

    if not tune_parameters:
        raise ConfigurationError("At least one parameter has to be tuned")

    unknown = [name for name in tune_parameters if name not in SUPPORTED_PARAMETERS]
    if unknown:
        raise ConfigurationError(
            f"Parameter {unknown[0]} cannot be tuned. "
            f"Tunable parameters: {', '.join(SUPPORTED_PARAMETERS)}"
        )

    fixed_and_tuned = [name for name in fixed_parameters if name in tune_parameters]
    if fixed_and_tuned:
        raise ConfigurationError(
            f"Fixed parameter {fixed_and_tuned[0]} cannot be tuning parameter "
            "at the same time."
        )

    if "mtry" in tune_parameters and n_features < 1:
        raise ConfigurationError("mtry cannot be tuned on a task without features")
    if "min.node.size" in tune_parameters and size < 1:
        raise ConfigurationError("min.node.size cannot be tuned on an empty task")

    universe = [
        ParameterSpec("mtry", INTEGER, 1, max(n_features, 1)),
        ParameterSpec(
            "min.node.size",
            CONTINUOUS,
            0.0,
            1.0,
            trafo=partial(trafo_nodesize, size=max(size, 1)),
        ),
        ParameterSpec("sample.fraction", CONTINUOUS, SAMPLE_FRACTION_LOWER, 1.0),
        ParameterSpec("replace", BOOLEAN, default=True),
        ParameterSpec("respect.unordered.factors", BOOLEAN, default=False),
    ]
    return ParameterSpace(universe).select(tune_parameters)
