import logging
from typing import Callable, Dict, Iterable, Mapping, Optional

from ..errors import ConfigurationError
from .ops import ArgMax, Softmax

logger = logging.getLogger(__name__)


class Registry:
    """
    Name -> constructor table.

    Tables are built and handed around by the caller, there is no module-level
    instance, so two layers can be wired to different implementations:

        ops = default_ops()
        ops.register("FastSoftmax", MySoftmax)
        softmax = ops.create("FastSoftmax")
    """

    def __init__(self, entries: Optional[Mapping[str, Callable]] = None):
        self._ctors: Dict[str, Callable] = {}
        for name, ctor in (entries or {}).items():
            self.register(name, ctor)

    def register(self, name: str, ctor: Callable) -> Callable:
        if name in self._ctors:
            raise ConfigurationError(f"'{name}' is already registered")
        self._ctors[name] = ctor
        return ctor

    def create(self, name: str, **kwargs):
        try:
            ctor = self._ctors[name]
        except KeyError:
            raise ConfigurationError(
                f"unknown type '{name}' (known types: {', '.join(self.names())})"
            ) from None
        logger.debug("creating %s", name)
        return ctor(**kwargs)

    def names(self) -> Iterable[str]:
        return sorted(self._ctors)

    def __contains__(self, name) -> bool:
        return name in self._ctors

    def __len__(self) -> int:
        return len(self._ctors)


def default_ops() -> Registry:
    """Fresh table with the numpy Softmax and ArgMax ops."""
    return Registry({"Softmax": Softmax, "ArgMax": ArgMax})
