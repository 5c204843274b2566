"""
Transforms between a parameter's bounded model space and the real line.

Estimators work on the real line; each parameter carries a transform that
uses the parameter's effective bounds for the active regime.
"""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

Bounds = Tuple[float, float]


class Transform(ABC):

    name = None

    @abstractmethod
    def to_real_line(self, x, bounds: Bounds):
        """Map a model-space value to the real line."""

    @abstractmethod
    def to_model_space(self, x, bounds: Bounds):
        """Map a real-line value back to model space."""

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return f"{type(self).__name__}()"


class Untransformed(Transform):

    name = 'untransformed'

    def to_real_line(self, x, bounds):
        return x

    def to_model_space(self, x, bounds):
        return x


class SquareRoot(Transform):
    """Maps the open interval (a, b) onto the real line."""

    name = 'square_root'

    @staticmethod
    def _check(bounds):
        a, b = bounds
        if not (np.isfinite(a) and np.isfinite(b)):
            raise ValueError(f"SquareRoot transform requires finite bounds, got {bounds}")
        return a, b

    def to_real_line(self, x, bounds):
        a, b = self._check(bounds)
        cx = 2.0 * (np.asarray(x, dtype=float) - (a + b) / 2.0) / (b - a)
        with np.errstate(divide='ignore'):
            y = cx / np.sqrt(1.0 - cx**2)
        return float(y) if np.ndim(y) == 0 else y

    def to_model_space(self, x, bounds):
        a, b = self._check(bounds)
        y = np.asarray(x, dtype=float)
        out = (a + b) / 2.0 + (b - a) / 2.0 * y / np.sqrt(1.0 + y**2)
        return float(out) if np.ndim(out) == 0 else out


class Exponential(Transform):
    """Maps (a, inf) onto the real line."""

    name = 'exponential'

    def to_real_line(self, x, bounds):
        a = bounds[0]
        with np.errstate(divide='ignore'):
            y = np.log(np.asarray(x, dtype=float) - a)
        return float(y) if np.ndim(y) == 0 else y

    def to_model_space(self, x, bounds):
        a = bounds[0]
        out = a + np.exp(np.asarray(x, dtype=float))
        return float(out) if np.ndim(out) == 0 else out


TRANSFORMS = {t.name: t for t in (Untransformed, SquareRoot, Exponential)}


def get_transform(name_or_transform) -> Transform:
    """Return a transform instance from its name (or pass an instance through)."""
    if isinstance(name_or_transform, Transform):
        return name_or_transform
    if name_or_transform is None:
        return Untransformed()
    try:
        return TRANSFORMS[str(name_or_transform).lower()]()
    except KeyError:
        raise ValueError(f"Unknown transform {name_or_transform!r}; "
                         f"expected one of {sorted(TRANSFORMS)}") from None
