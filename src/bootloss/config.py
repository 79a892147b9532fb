# src/bootloss/config.py
from __future__ import annotations
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional

from .errors import ConfigurationError


def _as_label(value) -> int:
    # labels are stored as reals upstream, so 255.0 is a valid ignore label
    try:
        label = int(value)
    except (TypeError, ValueError):
        label = None
    if isinstance(value, bool) or label is None or label != value:
        raise ConfigurationError(f"ignore_label must be an integer, got {value!r}")
    return label


@dataclass(frozen=True)
class BootstrapParam:
    """
    Configuration of a BootstrapLoss layer, fixed once the layer is set up.

    axis         class dimension of the prediction tensor (negative wraps)
    ignore_label label value excluded from loss and gradient, None = no ignore
    normalize    divide by the number of valid positions instead of outer extent
    hard_mode    blend with the argmax one-hot instead of the soft probabilities
    beta         trust placed in the noisy label, in [0, 1]
    """
    axis: int = 1
    ignore_label: Optional[int] = None
    normalize: bool = True
    hard_mode: bool = False
    beta: float = 0.95

    def __post_init__(self):
        if isinstance(self.axis, bool) or not isinstance(self.axis, int):
            raise ConfigurationError(f"axis must be an int, got {self.axis!r}")
        if self.ignore_label is not None:
            object.__setattr__(self, "ignore_label", _as_label(self.ignore_label))
        try:
            beta = float(self.beta)
        except (TypeError, ValueError):
            raise ConfigurationError(f"beta must be a real number, got {self.beta!r}") from None
        if not 0.0 <= beta <= 1.0:
            raise ConfigurationError(f"beta must be in [0, 1], got {self.beta}")
        # frozen dataclass, normalise field types in place
        object.__setattr__(self, "beta", beta)
        object.__setattr__(self, "normalize", bool(self.normalize))
        object.__setattr__(self, "hard_mode", bool(self.hard_mode))

    @property
    def has_ignore_label(self) -> bool:
        return self.ignore_label is not None

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "BootstrapParam":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(
                f"unknown bootstrap options {unknown}; expected a subset of {sorted(known)}"
            )
        return cls(**dict(options))

    def to_dict(self) -> dict:
        return asdict(self)
