"""
Sub-computations a loss layer delegates to.

Each op is configured once per input shape and then computes a fresh output
array on every call, nothing is cached between calls:

    op.configure(shape, axis)
    out = op.compute(x)
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError, LifecycleError
from ..losses.utils import stable_softmax
from .utils import canonical_axis

logger = logging.getLogger(__name__)


class Op:
    def __init__(self):
        self.shape: Optional[Tuple[int, ...]] = None
        self.axis: Optional[int] = None

    def configure(self, shape: Sequence[int], axis: int) -> None:
        shape = tuple(int(d) for d in shape)
        self.axis = canonical_axis(axis, len(shape))
        self.shape = shape
        logger.debug("%s configured for shape=%s axis=%d", type(self).__name__, shape, self.axis)

    @property
    def output_shape(self) -> Tuple[int, ...]:
        if self.shape is None:
            raise LifecycleError(f"{type(self).__name__} used before configure()")
        return self._output_shape()

    def compute(self, x) -> np.ndarray:
        if self.shape is None:
            raise LifecycleError(f"{type(self).__name__} used before configure()")
        x = np.asarray(x, dtype=float)
        if x.shape != self.shape:
            raise ConfigurationError(
                f"{type(self).__name__} configured for shape {self.shape}, got {x.shape}"
            )
        return self._compute(x)

    def _output_shape(self) -> Tuple[int, ...]:
        raise NotImplementedError

    def _compute(self, x: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class Softmax(Op):
    """Normalized exponentials along the configured axis, same shape as the input."""

    def _output_shape(self):
        return self.shape

    def _compute(self, x):
        return stable_softmax(x, axis=self.axis)


class ArgMax(Op):
    """
    Index of the largest value along the configured axis.
    The axis is removed from the output, ties go to the lowest index.
    """

    def __init__(self, top_k: int = 1):
        super().__init__()
        if top_k != 1:
            raise ConfigurationError(f"ArgMax supports top_k=1 only, got {top_k}")
        self.top_k = top_k

    def _output_shape(self):
        return self.shape[:self.axis] + self.shape[self.axis + 1:]

    def _compute(self, x):
        # np.argmax returns the first occurrence of the maximum
        return np.argmax(x, axis=self.axis)
