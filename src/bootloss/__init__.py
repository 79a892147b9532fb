"""
bootloss: a bootstrap (noisy-label) softmax loss layer in numpy
"""

import logging

from .config import BootstrapParam
from .errors import BootstrapLossError, ConfigurationError, LabelError, LifecycleError
# losses before core.ops, the ops import their softmax from losses.utils
from .losses import Loss, LossOut, default_losses
from .losses.bootstrap import BootstrapLoss, LayerState, bootstrap_loss
from .core.ops import ArgMax, Op, Softmax
from .core.registry import Registry, default_ops
from .core.tensor import Tensor

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ArgMax",
    "BootstrapLoss",
    "BootstrapLossError",
    "BootstrapParam",
    "ConfigurationError",
    "LabelError",
    "LayerState",
    "LifecycleError",
    "Loss",
    "LossOut",
    "Op",
    "Registry",
    "Softmax",
    "Tensor",
    "bootstrap_loss",
    "default_losses",
    "default_ops",
]
