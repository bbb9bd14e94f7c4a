"""Defaults and run configuration for random forest tuning."""

from dataclasses import asdict, dataclass, field

RANDOM_SEED = 42  # Reproducibility for design, search and learner seeds

# Search space
SUPPORTED_PARAMETERS = (
    "mtry",
    "min.node.size",
    "sample.fraction",
    "replace",
    "respect.unordered.factors",
)
DEFAULT_TUNE_PARAMETERS = ("mtry", "min.node.size", "sample.fraction")
DEFAULT_FIXED_PARAMETERS = {"replace": True, "respect.unordered.factors": True}
NODESIZE_FRACTION = 0.2  # Largest min.node.size as a share of the dataset size
SAMPLE_FRACTION_LOWER = 0.22

# Budget
N_ITERS = 100
N_TREES = 1000
DESIGN_SIZE = 30  # Fixed, independent of the total budget
DESIGN_CANDIDATES = 10  # LHS draws compared for the maximin criterion

# Focus search (infill optimization)
FOCUSSEARCH_POINTS = None  # None: one candidate per budgeted evaluation
FOCUSSEARCH_MAXIT = 3
FOCUSSEARCH_RESTARTS = 3

# Surrogate
MATERN_NU = 1.5
JITTER = 1e-6
JITTER_GROWTH = 100.0  # Factor applied to the jitter on the single refit

# Result aggregation
TOP_QUANTILE = 0.05

SAVE_FILE_PATH = "optpath.pkl"


@dataclass
class TunerConfig:
    """Settings of one tuning run.

    Everything a run depends on is held here and passed explicitly; it is
    stored in the checkpoint so an interrupted run can be rebuilt.
    """

    iters: int = N_ITERS
    num_trees: int = N_TREES
    num_threads: int | None = None
    parameters: dict = field(default_factory=lambda: dict(DEFAULT_FIXED_PARAMETERS))
    tune_parameters: tuple[str, ...] = DEFAULT_TUNE_PARAMETERS
    save_file_path: str = SAVE_FILE_PATH
    build_final_model: bool = True
    show_info: bool = True
    random_state: int = RANDOM_SEED
    design_size: int = DESIGN_SIZE
    focussearch_points: int | None = FOCUSSEARCH_POINTS
    focussearch_maxit: int = FOCUSSEARCH_MAXIT
    focussearch_restarts: int = FOCUSSEARCH_RESTARTS
    max_eval_retries: int = 0

    def __post_init__(self) -> None:
        self.parameters = dict(self.parameters or {})
        self.tune_parameters = tuple(self.tune_parameters)

    def to_dict(self) -> dict:
        return asdict(self)

    def hash_input(self) -> dict:
        """Settings that identify a run, excluding output and console options."""
        settings = self.to_dict()
        for key in ("save_file_path", "show_info", "build_final_model"):
            settings.pop(key)
        settings["tune_parameters"] = list(self.tune_parameters)
        return settings
