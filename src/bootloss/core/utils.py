import numpy as np
from typing import Sequence, Tuple

from ..errors import ConfigurationError


def canonical_axis(axis: int, ndim: int) -> int:
    """Maps a possibly negative axis onto [0, ndim), raising if it is out of range."""
    if not -ndim <= axis < ndim:
        raise ConfigurationError(
            f"axis {axis} out of range for a {ndim}-d tensor"
        )
    return axis + ndim if axis < 0 else axis


def count(shape: Sequence[int], start: int = 0, end: int = None) -> int:
    """
    Number of elements spanned by dims [start, end) of `shape`.
    An empty range counts as 1 so that outer/inner extents of edge axes are 1.
    """
    end = len(shape) if end is None else end
    return int(np.prod(shape[start:end], dtype=np.int64))


def split_extents(shape: Sequence[int], axis: int) -> Tuple[int, int, int]:
    """
    Splits `shape` around the class axis into (outer, classes, inner).

    (N, C, H, W) with axis=1 gives (N, C, H*W)
    (N, C)       with axis=1 gives (N, C, 1)
    (C,)         with axis=0 gives (1, C, 1)
    """
    axis = canonical_axis(axis, len(shape))
    return count(shape, 0, axis), int(shape[axis]), count(shape, axis + 1)


def as_outer_class_inner(x: np.ndarray, axis: int) -> np.ndarray:
    """
    Views `x` as a 3-d (outer, classes, inner) array.
    Row-major layout keeps element [i, k, j] at i*classes*inner + k*inner + j.
    """
    outer, classes, inner = split_extents(x.shape, axis)
    return x.reshape(outer, classes, inner)


def one_hot(index: np.ndarray, classes: int) -> np.ndarray:
    """
    One-hot encodes an (outer, inner) index grid along a new middle axis,
    giving an (outer, classes, inner) float array.
    """
    k = np.arange(classes).reshape(1, classes, 1)
    return (k == index[:, None, :]).astype(float)
