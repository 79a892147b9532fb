# src/bootloss/losses/__init__.py
from dataclasses import dataclass
from typing import Optional
import numpy as np

from ..core.registry import Registry
from ..core.tensor import Tensor


@dataclass
class LossOut:
    value: float                       # reduced (scalar) loss
    grad: Optional[np.ndarray] = None  # gradient w.r.t. predictions or logits


# common interface for loss layers
# setup(bottom, top) -> reshape(bottom, top) -> forward(bottom, top) -> backward(top, propagate_down, bottom)
class Loss:
    type = "Loss"

    def setup(self, bottom, top):
        raise NotImplementedError

    def reshape(self, bottom, top):
        raise NotImplementedError

    def forward(self, bottom, top):
        raise NotImplementedError

    def backward(self, top, propagate_down, bottom):
        raise NotImplementedError

    def __call__(self, prediction, target, return_grad=False, loss_weight=1.0) -> LossOut:
        # runs the whole lifecycle on plain arrays
        bottom = [Tensor(prediction), Tensor(target)]
        top = [Tensor(requires_grad=True)]
        self.setup(bottom, top)
        value = self.forward(bottom, top)
        if not return_grad:
            return LossOut(value=value)
        top[0].ensure_grad()[...] = loss_weight
        grad = self.backward(top, [True, False], bottom)
        return LossOut(value=value, grad=grad)


def default_losses() -> Registry:
    """Fresh table with every loss layer of the package."""
    from .bootstrap import BootstrapLoss
    return Registry({BootstrapLoss.type: BootstrapLoss})
