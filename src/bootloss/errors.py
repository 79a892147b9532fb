# src/bootloss/errors.py


class BootstrapLossError(Exception):
    """Base class for every error raised by bootloss."""


class ConfigurationError(BootstrapLossError, ValueError):
    """Invalid parameters, shapes or propagate-down requests. Not recoverable."""


class LifecycleError(BootstrapLossError, RuntimeError):
    """A layer or op was used out of order (e.g. backward before forward)."""


class LabelError(BootstrapLossError, ValueError):
    """A noisy label falls outside [0, num_classes)."""
