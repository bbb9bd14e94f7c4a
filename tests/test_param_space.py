import numpy as np
import pytest

from tunerf.bayesian_opt.param_space import (
    BOOLEAN,
    CONTINUOUS,
    INTEGER,
    ParameterSpace,
    ParameterSpec,
    build_space,
    trafo_nodesize,
)
from tunerf.errors import ConfigurationError


def test_mtry_bounded_by_feature_count():
    space = build_space(150, 4, ["mtry"])
    assert (space["mtry"].lower, space["mtry"].upper) == (1, 4)


def test_mtry_without_features_is_configuration_error():
    with pytest.raises(ConfigurationError):
        build_space(150, 0, ["mtry"])


def test_fixed_and_tuned_parameter_collision_names_parameter():
    with pytest.raises(ConfigurationError, match="mtry"):
        build_space(150, 4, ["mtry", "min.node.size"], {"mtry": 3})


def test_unknown_parameter_is_rejected():
    with pytest.raises(ConfigurationError, match="num.trees"):
        build_space(150, 4, ["mtry", "num.trees"])


def test_empty_tuning_set_is_rejected():
    with pytest.raises(ConfigurationError):
        build_space(150, 4, [])


def test_selection_keeps_declaration_order():
    space = build_space(150, 4, ["replace", "sample.fraction", "mtry"])
    assert space.names == ["mtry", "sample.fraction", "replace"]


def test_default_booleans():
    space = build_space(150, 4, ["replace", "respect.unordered.factors"])
    assert space["replace"].default is True
    assert space["respect.unordered.factors"].default is False


@pytest.mark.parametrize("size", [1, 4, 5, 10, 150, 10_000])
def test_nodesize_transform_is_monotone_integer(size):
    values = [trafo_nodesize(x, size) for x in np.linspace(0, 1, 101)]
    assert all(isinstance(v, int) and v >= 1 for v in values), values
    assert all(a <= b for a, b in zip(values, values[1:])), "FAILED: not monotone"


def test_nodesize_transform_endpoints():
    assert trafo_nodesize(0.0, 1000) == 1
    assert trafo_nodesize(1.0, 1000) == 200


def test_space_transform_decodes_node_size():
    space = build_space(1000, 4, ["mtry", "min.node.size"])
    assert space.transform({"mtry": 2, "min.node.size": 1.0}) == {
        "mtry": 2,
        "min.node.size": 200,
    }


@pytest.mark.parametrize(
    "lower, upper", [(0.0, float("inf")), (float("nan"), 1.0), (2.0, 1.0)]
)
def test_invalid_bounds(lower, upper):
    with pytest.raises(ConfigurationError):
        ParameterSpec("x", CONTINUOUS, lower, upper)


def test_duplicated_names_are_rejected():
    with pytest.raises(ConfigurationError):
        ParameterSpace([ParameterSpec("x", BOOLEAN), ParameterSpec("x", BOOLEAN)])


def test_integer_unit_encoding_round_trips():
    spec = ParameterSpec("mtry", INTEGER, 1, 4)
    assert [spec.from_unit(spec.to_unit(v)) for v in range(1, 5)] == [1, 2, 3, 4]
    assert spec.from_unit(1.5) == 4
    assert spec.from_unit(-0.2) == 1


def test_single_level_integer():
    spec = ParameterSpec("mtry", INTEGER, 1, 1)
    assert spec.to_unit(1) == 0.0
    assert spec.from_unit(0.7) == 1


def test_snap_maps_to_representable_points(full_space):
    rng = np.random.default_rng(0)
    snapped = full_space.snap(rng.uniform(size=(50, len(full_space))))
    for u in snapped:
        config = full_space.from_unit_array(u)
        assert full_space.contains(config)
        assert np.allclose(full_space.to_unit_array([config])[0], u)
