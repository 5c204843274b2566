"""
Regime-indexed parameters.

A `Parameter` holds a base record (value, fixed flag, prior, bounds) and any
number of partial overlays keyed by parameter regime. Plain reads of
``value``, ``fixed``, ``prior`` and ``bounds`` resolve against the parameter
regime the parameter is currently pointed at, which is regime 1 until the
owning model toggles it.
"""

import copy

from dataclasses import dataclass
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple, Union

import numpy as np
import sympy

from .exceptions import OutOfBounds, check_regime_index
from .transforms import Transform, get_transform
from .logging_config import get_logger

logger = get_logger("parameters")

Bounds = Tuple[float, float]

_x = sympy.Symbol('x')


@dataclass
class RegimeOverlay:
    """Partial record for one parameter regime; ``None`` fields fall back to the base."""
    value: Optional[float] = None
    fixed: Optional[bool] = None
    prior: Any = None
    bounds: Optional[Bounds] = None

    def is_empty(self):
        return all(getattr(self, f) is None for f in ('value', 'fixed', 'prior', 'bounds'))


class ResolvedParameter(NamedTuple):
    value: float
    fixed: bool
    prior: Any
    bounds: Bounds


def check_bounds(bounds) -> Bounds:
    lower, upper = (float(b) for b in bounds)
    if np.isnan(lower) or np.isnan(upper) or lower > upper:
        raise ValueError(f"Invalid bounds {bounds}: need lower <= upper")
    return lower, upper


def in_bounds(x, bounds: Bounds) -> bool:
    return bounds[0] <= x <= bounds[1]


def check_flag(flag, what='fixed') -> bool:
    if not isinstance(flag, (bool, np.bool_)):
        raise TypeError(f"{what} must be a bool, got {flag!r}")
    return bool(flag)


def parse_scaling(scaling) -> Tuple[Optional[str], Optional[Callable]]:
    """Turn a scaling expression in ``x`` (e.g. ``'1/(1 + x/100)'``) into a callable."""
    if scaling is None:
        return None, None
    if callable(scaling):
        return None, scaling
    expr = sympy.sympify(str(scaling), locals={'x': _x})
    unknown = expr.free_symbols - {_x}
    if unknown:
        raise ValueError(f"Scaling expression {scaling!r} may only depend on x, found {unknown}")
    return str(scaling), sympy.lambdify(_x, expr, modules='numpy')


class Parameter(object):
    """A named model parameter whose attributes can vary by parameter regime."""

    def __init__(self, key: str, value: float,
                 bounds: Bounds = (-np.inf, np.inf),
                 transform: Union[str, Transform, None] = None,
                 prior=None,
                 fixed: bool = False,
                 description: str = '',
                 tex_label: Optional[str] = None,
                 scaling: Union[str, Callable, None] = None):
        self.key = str(key)
        bounds = check_bounds(bounds)
        value = float(value)
        if not in_bounds(value, bounds):
            raise OutOfBounds(f"{self.key}: value {value} outside bounds {bounds}")

        self._value = value
        self._fixed = check_flag(fixed, f"{self.key}: fixed")
        self._prior = copy.deepcopy(prior)
        self._bounds = bounds

        self.transform = get_transform(transform)
        self.description = description
        self.tex_label = tex_label if tex_label is not None else self.key
        self.scaling_expr, self.scaling = parse_scaling(scaling)

        self.regimes: Dict[int, RegimeOverlay] = {}
        self.active = 1

    # ------------------------------------------------------------------
    # base record
    # ------------------------------------------------------------------
    @property
    def base(self) -> ResolvedParameter:
        return ResolvedParameter(self._value, self._fixed, self._prior, self._bounds)

    def set_base_value(self, x):
        x = float(x)
        self.check_base_value(x)
        self._value = x

    def check_base_value(self, x):
        """Raise OutOfBounds unless `x` fits the base bounds and every bounded overlay that inherits it."""
        if not in_bounds(x, self._bounds):
            raise OutOfBounds(f"{self.key}: value {x} outside base bounds {self._bounds}")
        for regime, overlay in self.regimes.items():
            if overlay.value is None and overlay.bounds is not None and not in_bounds(x, overlay.bounds):
                raise OutOfBounds(f"{self.key}: base value {x} outside regime {regime} "
                                  f"bounds {overlay.bounds}, which inherit it")

    def set_bounds(self, bounds):
        """Replace the base bounds, e.g. widening them so that zero becomes admissible."""
        bounds = check_bounds(bounds)
        if not in_bounds(self._value, bounds):
            raise OutOfBounds(f"{self.key}: base value {self._value} outside new bounds {bounds}")
        for regime, overlay in self.regimes.items():
            if overlay.bounds is None and overlay.value is not None and not in_bounds(overlay.value, bounds):
                raise OutOfBounds(f"{self.key}: regime {regime} value {overlay.value} "
                                  f"outside new base bounds {bounds}")
        logger.debug(f"{self.key}: base bounds {self._bounds} -> {bounds}")
        self._bounds = bounds

    # ------------------------------------------------------------------
    # overlays
    # ------------------------------------------------------------------
    def _overlay(self, regime) -> RegimeOverlay:
        return self.regimes.setdefault(regime, RegimeOverlay())

    def effective_bounds(self, regime) -> Bounds:
        regime = check_regime_index(regime, 'parameter regime')
        overlay = self.regimes.get(regime)
        if overlay is not None and overlay.bounds is not None:
            return overlay.bounds
        return self._bounds

    def set_regime_value(self, regime, x):
        regime = check_regime_index(regime, 'parameter regime')
        x = float(x)
        bounds = self.effective_bounds(regime)
        if not in_bounds(x, bounds):
            raise OutOfBounds(f"{self.key}: regime {regime} value {x} outside bounds {bounds}; "
                              "widen the bounds first")
        self._overlay(regime).value = x

    def set_regime_fixed(self, regime, flag):
        regime = check_regime_index(regime, 'parameter regime')
        flag = check_flag(flag, f"{self.key}: regime {regime} fixed")
        self._overlay(regime).fixed = flag

    def set_regime_prior(self, regime, prior):
        regime = check_regime_index(regime, 'parameter regime')
        self._overlay(regime).prior = copy.deepcopy(prior)

    def set_regime_bounds(self, regime, bounds):
        regime = check_regime_index(regime, 'parameter regime')
        bounds = check_bounds(bounds)
        value = self.resolve(regime).value
        if not in_bounds(value, bounds):
            raise OutOfBounds(f"{self.key}: regime {regime} value {value} outside new bounds {bounds}")
        self._overlay(regime).bounds = bounds

    def set_regime_record(self, regime, value=None, bounds=None):
        """
        Write an overlay's value and bounds together.

        The value is checked against the new bounds (or the effective bounds
        when none are given) and the bounds against the value the overlay will
        resolve to, before either field changes.
        """
        regime = check_regime_index(regime, 'parameter regime')
        if value is None and bounds is None:
            return
        if bounds is None:
            return self.set_regime_value(regime, value)
        bounds = check_bounds(bounds)
        x = self.resolve(regime).value if value is None else float(value)
        if not in_bounds(x, bounds):
            raise OutOfBounds(f"{self.key}: regime {regime} value {x} outside bounds {bounds}")
        overlay = self._overlay(regime)
        overlay.bounds = bounds
        if value is not None:
            overlay.value = x

    def resolve(self, regime) -> ResolvedParameter:
        regime = check_regime_index(regime, 'parameter regime')
        overlay = self.regimes.get(regime)
        if overlay is None:
            return self.base
        return ResolvedParameter(
            self._value if overlay.value is None else overlay.value,
            self._fixed if overlay.fixed is None else overlay.fixed,
            self._prior if overlay.prior is None else overlay.prior,
            self._bounds if overlay.bounds is None else overlay.bounds,
        )

    @property
    def regime_indices(self):
        return sorted(self.regimes)

    # ------------------------------------------------------------------
    # reads against the active parameter regime
    # ------------------------------------------------------------------
    @property
    def value(self) -> float:
        return self.resolve(self.active).value

    @property
    def fixed(self) -> bool:
        return self.resolve(self.active).fixed

    @property
    def prior(self):
        return self.resolve(self.active).prior

    @property
    def bounds(self) -> Bounds:
        return self.resolve(self.active).bounds

    @property
    def scaledvalue(self) -> float:
        if self.scaling is None:
            return self.value
        return float(self.scaling(self.value))

    def __float__(self):
        return self.value

    def __repr__(self):
        resolved = self.resolve(self.active)
        regimes = f", regimes={self.regime_indices}" if self.regimes else ""
        return (f"Parameter({self.key!r}, value={resolved.value}, fixed={resolved.fixed}, "
                f"bounds={resolved.bounds}, active={self.active}{regimes})")
