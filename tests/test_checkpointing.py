import pickle

import pytest

from tunerf.bayesian_opt.checkpointing import (
    create_run_hash,
    load_checkpoint,
    remove_checkpoint,
    save_checkpoint,
)
from tunerf.bayesian_opt.history import DESIGN, INFILL, EvaluationLog, Observation
from tunerf.errors import CheckpointIOError


def _log():
    return EvaluationLog(
        [
            Observation.create({"mtry": 2, "replace": True}, 0.2, 0.5, 0, DESIGN),
            Observation.create({"mtry": 3, "replace": False}, 0.1, 0.4, 1, INFILL),
        ]
    )


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "optpath.pkl"
    data = {"version": 1, "results": _log().to_records(), "next_index": 2}
    save_checkpoint(data, path)

    assert load_checkpoint(path) == data
    assert [p.name for p in tmp_path.iterdir()] == ["optpath.pkl"]


def test_save_overwrites_previous_checkpoint(tmp_path):
    path = tmp_path / "optpath.pkl"
    save_checkpoint({"next_index": 1}, path)
    save_checkpoint({"next_index": 2}, path)
    assert load_checkpoint(path) == {"next_index": 2}


def test_missing_checkpoint_loads_as_none(tmp_path):
    assert load_checkpoint(tmp_path / "missing.pkl") is None


def test_corrupted_checkpoint_raises(tmp_path):
    path = tmp_path / "optpath.pkl"
    path.write_bytes(pickle.dumps({"next_index": 3})[:-5])
    with pytest.raises(CheckpointIOError):
        load_checkpoint(path)


def test_unwritable_location_raises(tmp_path):
    blocker = tmp_path / "not_a_directory"
    blocker.write_text("")
    with pytest.raises(CheckpointIOError):
        save_checkpoint({"next_index": 0}, blocker / "optpath.pkl")


def test_remove_missing_checkpoint_is_a_no_op(tmp_path):
    remove_checkpoint(tmp_path / "missing.pkl")
    path = tmp_path / "optpath.pkl"
    save_checkpoint({}, path)
    remove_checkpoint(path)
    assert not path.exists()


def test_run_hash_is_stable_and_sensitive():
    config = {"iters": 50, "num_trees": 100, "measure": "brier"}
    reference = create_run_hash((150, 4), ["a", "b", "c", "d"], config)

    assert create_run_hash((150, 4), ["d", "c", "b", "a"], dict(config)) == reference
    assert create_run_hash((151, 4), ["a", "b", "c", "d"], config) != reference
    assert create_run_hash((150, 4), ["a", "b", "c", "d"], {**config, "iters": 51}) != reference


def test_log_rejects_out_of_order_observations():
    log = _log()
    with pytest.raises(ValueError):
        log.append(Observation.create({"mtry": 1, "replace": True}, 0.3, 0.1, 5, INFILL))


def test_log_records_round_trip():
    log = _log()
    restored = EvaluationLog.from_records(log.to_records())

    assert restored.observations == log.observations
    assert restored[1].config == {"mtry": 3, "replace": False}
    assert restored.count(DESIGN) == 1 and restored.count(INFILL) == 1


def test_best_prefers_earliest_on_ties():
    log = EvaluationLog(
        [
            Observation.create({"mtry": 1}, 0.5, 0.0, 0, DESIGN),
            Observation.create({"mtry": 2}, 0.2, 0.0, 1, DESIGN),
            Observation.create({"mtry": 3}, 0.2, 0.0, 2, INFILL),
        ]
    )
    assert log.best(minimize=True).index == 1
    assert log.best(minimize=False).index == 0
    assert EvaluationLog().best(minimize=True) is None


def test_checkpoint_referencing_missing_code_raises(tmp_path):
    path = tmp_path / "optpath.pkl"
    path.write_bytes(b"cno_such_module_for_tunerf\nState\n.")
    with pytest.raises(CheckpointIOError):
        load_checkpoint(path)
