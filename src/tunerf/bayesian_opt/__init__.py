"""Bayesian optimization for random forest hyperparameters.

This module provides a sequential model-based optimization loop with:
- Maximin Latin hypercube sampling for the initial design
- Gaussian process surrogate models
- Confidence bound acquisition optimized by focus search
- Checkpointing for resumable optimization
"""

from .acquisition import ConfidenceBound
from .history import EvaluationLog, Observation
from .optimizer import BayesianOptimizer, LoopState
from .param_space import ParameterSpace, ParameterSpec, build_space, trafo_nodesize
from .sampling import generate_initial_design, latin_hypercube_sample
from .summary import TuningResult, summarize
from .surrogate import GaussianProcessSurrogate, RandomForestSurrogate

__all__ = [
    "BayesianOptimizer",
    "ConfidenceBound",
    "EvaluationLog",
    "GaussianProcessSurrogate",
    "LoopState",
    "Observation",
    "ParameterSpace",
    "ParameterSpec",
    "RandomForestSurrogate",
    "TuningResult",
    "build_space",
    "generate_initial_design",
    "latin_hypercube_sample",
    "summarize",
    "trafo_nodesize",
]
