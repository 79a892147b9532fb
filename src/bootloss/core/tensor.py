from __future__ import annotations
import numpy as np

from .utils import canonical_axis, count

"""
Tiny Tensor
A buffer that layers read from (bottom) and write to (top), holding two things
- data: the actual numeric values
- grad: the gradient of the loss w.r.t. data, filled in by a backward pass

This is the blob of a layer-based framework, not an autograd node:
there is no graph and no creator operation. A layer receives lists of tensors,
e.g. loss.forward(bottom=[predictions, labels], top=[loss])
and during backward it reads top[0].grad (the loss weight) and writes bottom[0].grad

i.e.
bottom[0].data  shape (N, C, H, W)  scores
bottom[1].data  shape (N, H, W)     labels stored as reals
top[0].data     shape ()            scalar loss
top[0].grad     shape ()            dL_total/dloss, usually 1.0
"""
class Tensor:
    def __init__(self, data=(), requires_grad=False):
        self.data = np.asarray(data, dtype=float)
        self.grad = np.zeros_like(self.data) if requires_grad else None
        self.requires_grad = requires_grad

    @property
    def shape(self):
        return self.data.shape

    @property
    def ndim(self):
        return self.data.ndim

    @property
    def size(self):
        return self.data.size

    def count(self, start=0, end=None):
        return count(self.data.shape, start, end)

    def canonical_axis_index(self, axis):
        return canonical_axis(axis, self.data.ndim)

    def ensure_grad(self):
        """Initializes gradient storage if it doesn't exist or no longer matches data."""
        if self.grad is None or self.grad.shape != self.data.shape:
            self.grad = np.zeros_like(self.data)
        return self.grad

    """
    reshape

    resizes the buffer, keeping the values (and grad) when the element count is unchanged
    and zero-filling otherwise
    """
    def reshape(self, shape):
        shape = tuple(int(d) for d in shape)
        if count(shape) == self.data.size:
            self.data = self.data.reshape(shape)
        else:
            self.data = np.zeros(shape, dtype=self.data.dtype)
        if self.grad is not None:
            # keep a loss weight written into grad across same-size reshapes
            if self.grad.size == self.data.size:
                self.grad = self.grad.reshape(self.data.shape)
            else:
                self.grad = np.zeros_like(self.data)
        return self

    def reshape_like(self, other: "Tensor"):
        return self.reshape(other.shape)

    def __repr__(self):
        return f"Tensor(shape={self.shape}, requires_grad={self.requires_grad})"
