import pytest

from bootloss import BootstrapParam, ConfigurationError


def test_defaults():
    param = BootstrapParam()
    assert param.axis == 1
    assert param.ignore_label is None
    assert not param.has_ignore_label
    assert param.normalize is True
    assert param.hard_mode is False
    assert param.beta == 0.95


@pytest.mark.parametrize("beta", [-0.1, 1.5, "high"])
def test_beta_outside_unit_interval(beta):
    with pytest.raises(ConfigurationError):
        BootstrapParam(beta=beta)


def test_ignore_label_stored_as_real():
    param = BootstrapParam(ignore_label=255.0)
    assert param.ignore_label == 255
    assert isinstance(param.ignore_label, int)
    assert param.has_ignore_label


@pytest.mark.parametrize("label", [2.5, "x", True])
def test_ignore_label_must_be_integer(label):
    with pytest.raises(ConfigurationError):
        BootstrapParam(ignore_label=label)


def test_axis_must_be_int():
    with pytest.raises(ConfigurationError):
        BootstrapParam(axis=1.0)


def test_from_dict_round_trip():
    options = {"axis": -1, "ignore_label": 0, "normalize": False, "hard_mode": True, "beta": 0.8}
    param = BootstrapParam.from_dict(options)
    assert param.to_dict() == options


def test_from_dict_unknown_option():
    with pytest.raises(ConfigurationError, match="unknown bootstrap options"):
        BootstrapParam.from_dict({"beta": 0.5, "top_k": 2})


def test_frozen():
    param = BootstrapParam()
    with pytest.raises(AttributeError):
        param.beta = 0.1
