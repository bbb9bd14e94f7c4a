"""Random forest learner with out-of-bag predictions.

The forest follows the ranger parametrisation (``mtry``, ``min.node.size``,
``sample.fraction``, ``replace``, ...) and keeps the in-bag mask of every tree,
so each training row can be predicted by the trees that never saw it.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from pandas.api.types import is_numeric_dtype
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from .task import Task, TaskType

SUPPORTED_LEARNER_PARAMETERS = frozenset(
    {
        "num.trees",
        "mtry",
        "min.node.size",
        "sample.fraction",
        "replace",
        "respect.unordered.factors",
        "max.depth",
        "num.threads",
        "seed",
    }
)


@dataclass
class Predictions:
    """Predictions for every row of a task.

    Rows that were never out-of-bag carry NaN and are dropped by ``dropna``.
    """

    truth: np.ndarray
    response: np.ndarray
    prob: np.ndarray | None = None
    classes: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self.truth)

    def dropna(self) -> "Predictions":
        if self.prob is not None:
            mask = ~np.isnan(self.prob).any(axis=1)
        else:
            mask = ~np.isnan(self.response.astype(float))
        return Predictions(
            truth=self.truth[mask],
            response=self.response[mask],
            prob=self.prob[mask] if self.prob is not None else None,
            classes=self.classes,
        )


class OOBForest:
    """Random forest of scikit-learn decision trees with OOB bookkeeping."""

    def __init__(
        self,
        task_type: TaskType,
        num_trees: int = 500,
        mtry: int | None = None,
        min_node_size: int | None = None,
        sample_fraction: float | None = None,
        replace: bool = True,
        respect_unordered_factors: bool = False,
        max_depth: int | None = None,
        num_threads: int = 1,
        seed: int | None = None,
    ) -> None:
        self.task_type = TaskType(task_type)
        self.num_trees = num_trees
        self.mtry = mtry
        self.min_node_size = min_node_size
        self.sample_fraction = sample_fraction
        self.replace = replace
        self.respect_unordered_factors = respect_unordered_factors
        self.max_depth = max_depth
        self.num_threads = num_threads
        self.seed = seed

    @property
    def is_classifier(self) -> bool:
        return self.task_type is TaskType.CLASSIF

    def fit(self, X, y) -> "OOBForest":
        """Grow the forest.

        Args:
            X: Feature frame; non-numeric columns are treated as factors
            y: Target values

        Returns:
            The fitted forest
        """
        X = pd.DataFrame(X)
        self.levels_ = _categorical_levels(X)
        X_enc = self._encode(X)
        n_samples, n_columns = X_enc.shape

        if self.is_classifier:
            self.classes_, y_fit = np.unique(np.asarray(y), return_inverse=True)
        else:
            y_fit = np.asarray(y, dtype=float)

        n_draw = self._n_draw(n_samples)
        rng = np.random.default_rng(self.seed)
        seeds = rng.integers(0, np.iinfo(np.int32).max, size=self.num_trees)
        tree_params = {
            "max_features": int(min(max(self._resolve_mtry(X.shape[1]), 1), n_columns)),
            "min_samples_split": max(2, int(self._resolve_min_node_size())),
            "max_depth": self.max_depth,
        }

        fitted = Parallel(n_jobs=self.num_threads, prefer="threads")(
            delayed(_fit_tree)(
                X_enc, y_fit, tree_params, n_draw, self.replace, int(seed), self.is_classifier
            )
            for seed in seeds
        )
        self.estimators_ = [tree for tree, _ in fitted]
        self.inbag_ = np.array([inbag for _, inbag in fitted])
        self.n_samples_ = n_samples
        return self

    def oob_predict(self, X) -> np.ndarray:
        """Average the predictions of the trees for which a row was out-of-bag.

        Args:
            X: The training features the forest was fitted on

        Returns:
            Class probabilities (classification) or predicted values
            (regression); rows that were in-bag for every tree are NaN
        """
        X_enc = self._encode(pd.DataFrame(X))
        if X_enc.shape[0] != self.n_samples_:
            raise ValueError("OOB predictions need the data the forest was fitted on")

        counts = np.zeros(self.n_samples_)
        if self.is_classifier:
            totals = np.zeros((self.n_samples_, len(self.classes_)))
        else:
            totals = np.zeros(self.n_samples_)

        for tree, inbag in zip(self.estimators_, self.inbag_):
            oob = np.flatnonzero(~inbag)
            if oob.size == 0:
                continue
            if self.is_classifier:
                columns = tree.classes_.astype(int)
                totals[np.ix_(oob, columns)] += tree.predict_proba(X_enc[oob])
            else:
                totals[oob] += tree.predict(X_enc[oob])
            counts[oob] += 1

        with np.errstate(invalid="ignore", divide="ignore"):
            if self.is_classifier:
                return totals / counts[:, None]
            return totals / counts

    def predict_proba(self, X) -> np.ndarray:
        if not self.is_classifier:
            raise ValueError("predict_proba is only available for classification")
        X_enc = self._encode(pd.DataFrame(X))
        proba = np.zeros((X_enc.shape[0], len(self.classes_)))
        for tree in self.estimators_:
            proba[:, tree.classes_.astype(int)] += tree.predict_proba(X_enc)
        return proba / len(self.estimators_)

    def predict(self, X) -> np.ndarray:
        if self.is_classifier:
            return self.classes_[np.argmax(self.predict_proba(X), axis=1)]
        X_enc = self._encode(pd.DataFrame(X))
        return np.mean([tree.predict(X_enc) for tree in self.estimators_], axis=0)

    def _resolve_mtry(self, n_features: int) -> int:
        if self.mtry is None:
            return int(np.sqrt(n_features))
        return int(self.mtry)

    def _resolve_min_node_size(self) -> int:
        if self.min_node_size is None:
            return 10 if self.is_classifier else 5
        return int(self.min_node_size)

    def _n_draw(self, n_samples: int) -> int:
        fraction = self.sample_fraction
        if fraction is None:
            fraction = 1.0 if self.replace else 0.632
        n_draw = max(1, int(round(fraction * n_samples)))
        if not self.replace and n_samples > 1:
            # keep at least one out-of-bag row per tree
            n_draw = min(n_draw, n_samples - 1)
        return n_draw

    def _encode(self, X: pd.DataFrame) -> np.ndarray:
        blocks = []
        for column in X.columns:
            if column in self.levels_:
                levels = self.levels_[column]
                codes = pd.Categorical(X[column], categories=levels).codes
                if self.respect_unordered_factors:
                    blocks.append((codes[:, None] == np.arange(len(levels))).astype(float))
                else:
                    blocks.append(codes[:, None].astype(float))
            else:
                blocks.append(X[column].to_numpy(dtype=float)[:, None])
        return np.hstack(blocks)


def _categorical_levels(X: pd.DataFrame) -> dict[str, list]:
    return {
        column: list(pd.Categorical(X[column]).categories)
        for column in X.columns
        if not is_numeric_dtype(X[column])
    }


def _fit_tree(X, y, tree_params, n_draw, replace, seed, is_classifier):
    rng = np.random.default_rng(seed)
    rows = rng.choice(len(X), size=n_draw, replace=replace)
    estimator = DecisionTreeClassifier if is_classifier else DecisionTreeRegressor
    tree = estimator(random_state=seed, **tree_params)
    tree.fit(X[rows], y[rows])
    inbag = np.zeros(len(X), dtype=bool)
    inbag[rows] = True
    return tree, inbag


class ForestLearner:
    """Trains ``OOBForest`` models and extracts their OOB predictions."""

    supported_parameters = SUPPORTED_LEARNER_PARAMETERS

    def __init__(self, random_state: int | None = None) -> None:
        self._rng = np.random.default_rng(random_state)

    def train(self, task_type: TaskType, par_vals: dict, task: Task) -> OOBForest:
        unknown = set(par_vals) - self.supported_parameters
        if unknown:
            raise ValueError(f"Unsupported learner parameters: {sorted(unknown)}")

        seed = par_vals.get("seed")
        if seed is None:
            seed = int(self._rng.integers(np.iinfo(np.int32).max))

        forest = OOBForest(
            task_type=task_type,
            num_trees=int(par_vals.get("num.trees", 500)),
            mtry=par_vals.get("mtry"),
            min_node_size=par_vals.get("min.node.size"),
            sample_fraction=par_vals.get("sample.fraction"),
            replace=bool(par_vals.get("replace", True)),
            respect_unordered_factors=bool(
                par_vals.get("respect.unordered.factors", False)
            ),
            max_depth=par_vals.get("max.depth"),
            num_threads=int(par_vals.get("num.threads") or 1),
            seed=seed,
        )
        return forest.fit(task.X, task.y)

    def get_oob_predictions(self, model: OOBForest, task: Task) -> Predictions:
        truth = task.y.to_numpy()
        oob = model.oob_predict(task.X)
        if task.predict_type == "prob":
            response = model.classes_[np.argmax(np.nan_to_num(oob, nan=-1.0), axis=1)]
            return Predictions(truth=truth, response=response, prob=oob, classes=model.classes_)
        return Predictions(truth=truth, response=oob)
