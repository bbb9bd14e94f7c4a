"""Checkpoint management for Bayesian optimization."""

import hashlib
import json
import os
import pickle
import tempfile
from pathlib import Path

from ..errors import CheckpointIOError


def create_run_hash(X_shape: tuple, feature_names: list[str], config: dict) -> str:
    """Create hash from the task and run configuration.

    Args:
        X_shape: Shape of the task's feature matrix
        feature_names: List of feature names
        config: Run configuration dictionary

    Returns:
        MD5 hash string
    """
    hash_input = {
        "data_shape": list(X_shape),
        "n_features": len(feature_names),
        "feature_names": sorted(str(name) for name in feature_names),
        "config": config,
    }
    hash_string = json.dumps(hash_input, sort_keys=True, default=str)
    return hashlib.md5(hash_string.encode()).hexdigest()


def save_checkpoint(checkpoint_data: dict, checkpoint_file: Path) -> None:
    """Save optimization checkpoint.

    The data is written to a temporary file next to the checkpoint, synced to
    disk and moved over the old checkpoint, so a reader sees either the
    previous or the new state.

    Args:
        checkpoint_data: Data to checkpoint
        checkpoint_file: Path of the checkpoint file

    Raises:
        CheckpointIOError: If the checkpoint cannot be written
    """
    checkpoint_file = Path(checkpoint_file)
    tmp_name = None
    try:
        checkpoint_file.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=checkpoint_file.parent, prefix=f".{checkpoint_file.name}.", delete=False
        ) as f:
            tmp_name = f.name
            pickle.dump(checkpoint_data, f)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, checkpoint_file)
    except (OSError, pickle.PicklingError) as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise CheckpointIOError(
            f"Could not write checkpoint {checkpoint_file}: {exc}"
        ) from exc


def load_checkpoint(checkpoint_file: Path) -> dict | None:
    """Load optimization checkpoint if it exists.

    Args:
        checkpoint_file: Path of the checkpoint file

    Returns:
        Checkpoint data or None if not found

    Raises:
        CheckpointIOError: If the file exists but cannot be read
    """
    checkpoint_file = Path(checkpoint_file)
    if not checkpoint_file.exists():
        return None

    try:
        with open(checkpoint_file, "rb") as f:
            return pickle.load(f)
    except (
        OSError,
        pickle.UnpicklingError,
        EOFError,
        ValueError,
        AttributeError,
        ImportError,
        IndexError,
    ) as exc:
        raise CheckpointIOError(
            f"Could not read checkpoint {checkpoint_file}: {exc}"
        ) from exc


def remove_checkpoint(checkpoint_file: Path) -> None:
    try:
        Path(checkpoint_file).unlink(missing_ok=True)
    except OSError as exc:
        raise CheckpointIOError(
            f"Could not remove checkpoint {checkpoint_file}: {exc}"
        ) from exc
