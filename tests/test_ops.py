import numpy as np
import pytest
from numpy.testing import assert_allclose

from bootloss import ArgMax, BootstrapLoss, ConfigurationError, LifecycleError, Registry, Softmax, Tensor
from bootloss import default_losses, default_ops
from bootloss.core.utils import canonical_axis, count, one_hot, split_extents


def test_softmax_normalizes_along_axis():
    x = np.arange(24, dtype=float).reshape(2, 3, 4)
    op = Softmax()
    op.configure(x.shape, 1)
    p = op.compute(x)
    assert p.shape == x.shape
    assert (p >= 0).all()
    assert_allclose(p.sum(axis=1), 1.0)


def test_argmax_drops_axis_and_breaks_ties_low():
    x = np.array([[[1.0, 5.0], [3.0, 5.0], [3.0, 0.0]]])  # (1, 3, 2)
    op = ArgMax()
    op.configure(x.shape, 1)
    assert op.output_shape == (1, 2)
    assert op.compute(x).tolist() == [[1, 0]]


def test_argmax_top_k_other_than_one_rejected():
    with pytest.raises(ConfigurationError):
        ArgMax(top_k=3)


def test_op_before_configure_raises():
    with pytest.raises(LifecycleError):
        Softmax().compute(np.zeros((2, 3)))


def test_op_rejects_other_shapes():
    op = Softmax()
    op.configure((2, 3), -1)
    assert op.axis == 1
    with pytest.raises(ConfigurationError):
        op.compute(np.zeros((3, 3)))


def test_registry_create_and_unknown():
    ops = default_ops()
    assert "Softmax" in ops and "ArgMax" in ops
    assert isinstance(ops.create("ArgMax", top_k=1), ArgMax)
    with pytest.raises(ConfigurationError, match="unknown type"):
        ops.create("Sigmoid")


def test_registry_rejects_duplicates():
    ops = default_ops()
    with pytest.raises(ConfigurationError):
        ops.register("Softmax", Softmax)


def test_tables_are_independent():
    a, b = default_ops(), default_ops()
    a.register("Other", Softmax)
    assert "Other" in a
    assert "Other" not in b
    assert len(b) == 2


def test_default_losses_builds_bootstrap_layer():
    losses = default_losses()
    layer = losses.create("BootstrapLoss", param={"beta": 0.5})
    assert isinstance(layer, BootstrapLoss)
    assert list(losses.names()) == ["BootstrapLoss"]


def test_empty_registry_layer_fails_setup():
    layer = BootstrapLoss(ops=Registry())
    with pytest.raises(ConfigurationError):
        layer.setup([Tensor(np.zeros((1, 3))), Tensor([0])], [Tensor()])


@pytest.mark.parametrize("shape, axis, expected", [
    ((2, 3, 4, 5), 1, (2, 3, 20)),
    ((2, 3), 1, (2, 3, 1)),
    ((3,), 0, (1, 3, 1)),
    ((2, 3, 4), -1, (6, 4, 1)),
])
def test_split_extents(shape, axis, expected):
    assert split_extents(shape, axis) == expected


def test_count_and_canonical_axis():
    assert count((2, 3, 4), 1) == 12
    assert count((2, 3, 4), 1, 1) == 1
    assert canonical_axis(-1, 3) == 2
    with pytest.raises(ConfigurationError):
        canonical_axis(-4, 3)


def test_one_hot_grid():
    out = one_hot(np.array([[0, 2]]), 3)
    assert out.shape == (1, 3, 2)
    assert out[0, :, 0].tolist() == [1.0, 0.0, 0.0]
    assert out[0, :, 1].tolist() == [0.0, 0.0, 1.0]


def test_tensor_reshape_keeps_loss_weight():
    t = Tensor(requires_grad=True)
    t.reshape(())
    t.grad[...] = 2.0
    t.reshape(())
    assert float(t.grad) == 2.0
    t.reshape((2, 2))
    assert t.grad.shape == (2, 2)
    assert t.count(1) == 2
