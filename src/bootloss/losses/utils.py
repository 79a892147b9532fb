"""
Numerically stable utilites for loss computations
"""

from __future__ import annotations
# postponed evaluation of type annotations
from typing import Optional
import numpy as np

Array = np.ndarray
# type alias for readability

# Core numerically stable ops

def logsumexp(x: Array, axis: int = -1, keepdims: bool = False) -> Array:
    # Stable log-sum-exp
    # logsumexp(x) = log(sum(exp(x))) computed by factoring out max(x)

    x = np.asarray(x, dtype=float)
    m = np.max(x, axis=axis, keepdims=True)
    # a row of all -inf would give inf - inf = nan, shift by 0 there instead
    m = np.where(np.isfinite(m), m, 0.0)
    y = np.log(np.sum(np.exp(x - m), axis=axis, keepdims=True)) + m
    return y if keepdims else np.squeeze(y, axis=axis)

def stable_log_softmax(logits: Array, axis: int = -1) -> Array:
    # Stable log-softmax(logits)
    # log_softmax(x) = x - logsumexp(x)
    logits = np.asarray(logits, dtype=float)
    lse = logsumexp(logits, axis=axis, keepdims=True)
    return logits - lse

def stable_softmax(logits: Array, axis: int = -1) -> Array:
    # Stable softmax using log-softmax, returns probabilities with rows (or along axis) summing to ~1
    return np.exp(stable_log_softmax(logits, axis=axis))

def log_floor(dtype) -> float:
    # smallest positive normal number of dtype, the floor applied before log
    return float(np.finfo(dtype).tiny)

def safe_log(p: Array, floor: Optional[float] = None) -> Array:
    # log(max(p, floor)), a zero probability gives a large finite value instead of -inf
    p = np.asarray(p, dtype=float)
    floor = log_floor(p.dtype) if floor is None else floor
    return np.log(np.maximum(p, floor))
