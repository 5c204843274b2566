#!/usr/bin/env python3
"""
RegimeModel - a model's parameters together with its regime configuration.

The model owns the parameters, the regime date table, the
model-to-parameter regime map and the active regime cursor. Nothing here is
global: parallel estimation workers each take their own `copy()`.
"""

import copy

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import sympy

from sympy import default_sort_key, topological_sort
from sympy.utilities.lambdify import lambdify

from .exceptions import InvalidRegime, UnknownParameter, OutOfBounds, check_regime_index
from .parameters import Parameter, ResolvedParameter, in_bounds
from .regimes import RegimeDates, RegimeMap
from .Prior import Prior
from .logging_config import get_logger

logger = get_logger("model")


@dataclass
class Setting:
    key: str
    value: Any
    description: str = ''


def default_settings() -> Dict[str, Setting]:
    return {
        'regime_switching': Setting('regime_switching', False,
                                    'Whether the model has more than one model regime'),
        'n_regimes': Setting('n_regimes', 1, 'Number of model regimes'),
    }


class RegimeModel(object):
    """
    Parameters of a DSGE model with regime-indexed values.

    Args:
        name: Model name
        parameters: Iterable of `Parameter` objects
        auxiliary_parameters: Mapping of derived parameter name to an expression
            in the parameters (and other derived parameters)
        settings: Mapping of setting name to value
        subspec: Name of the subspecification the model was configured with
    """

    def __init__(self, name: str = 'model',
                 parameters: Optional[Iterable[Parameter]] = None,
                 auxiliary_parameters: Optional[Mapping[str, Any]] = None,
                 settings: Optional[Mapping[str, Any]] = None,
                 subspec: str = 'ss0'):
        self.name = name
        self.subspec = subspec
        self.parameters: Dict[str, Parameter] = {}
        self.regime_dates = RegimeDates()
        self.model2para_regime = RegimeMap()
        self.active_regime = 1

        self.settings = default_settings()
        for key, value in (settings or {}).items():
            self.add_setting(key, value)

        for para in parameters or []:
            self.add_parameter(para)

        self.auxiliary_parameters: Dict[str, sympy.Expr] = {}
        self._auxiliary_functions = []
        if auxiliary_parameters:
            self.set_auxiliary_parameters(auxiliary_parameters)

    # ------------------------------------------------------------------
    # declarations
    # ------------------------------------------------------------------
    def add_parameter(self, parameter: Union[Parameter, str], *args, **kwargs) -> Parameter:
        if not isinstance(parameter, Parameter):
            parameter = Parameter(parameter, *args, **kwargs)
        if parameter.key in self.parameters:
            raise ValueError(f"Parameter {parameter.key!r} already declared")
        self.parameters[parameter.key] = parameter
        return parameter

    def __getitem__(self, key) -> Parameter:
        try:
            return self.parameters[key]
        except KeyError:
            raise UnknownParameter(key) from None

    def _check_key(self, key):
        if key not in self.parameters:
            raise UnknownParameter(key)

    def __contains__(self, key):
        return key in self.parameters

    def __iter__(self):
        return iter(self.parameters.values())

    def __len__(self):
        return len(self.parameters)

    @property
    def parameter_names(self) -> List[str]:
        return list(self.parameters)

    def add_setting(self, key: str, value, description: str = ''):
        self.settings[key] = Setting(key, value, description)

    def get_setting(self, key: str):
        return self.settings[key].value

    # ------------------------------------------------------------------
    # regime value store
    # ------------------------------------------------------------------
    def set_bounds(self, key, bounds):
        self[key].set_bounds(bounds)

    def set_regime_value(self, key, parameter_regime, x):
        self[key].set_regime_value(parameter_regime, x)
        logger.debug(f"{key}[{parameter_regime}].value = {x}")

    def set_regime_fixed(self, key, parameter_regime, flag):
        self[key].set_regime_fixed(parameter_regime, flag)
        logger.debug(f"{key}[{parameter_regime}].fixed = {flag}")

    def set_regime_prior(self, key, parameter_regime, prior):
        self[key].set_regime_prior(parameter_regime, prior)
        logger.debug(f"{key}[{parameter_regime}].prior = {prior}")

    def set_regime_bounds(self, key, parameter_regime, bounds):
        self[key].set_regime_bounds(parameter_regime, bounds)
        logger.debug(f"{key}[{parameter_regime}].bounds = {bounds}")

    def set_regime_record(self, key, parameter_regime, value=None, bounds=None):
        self[key].set_regime_record(parameter_regime, value=value, bounds=bounds)
        logger.debug(f"{key}[{parameter_regime}].value, bounds = {value}, {bounds}")

    def resolve(self, key, parameter_regime) -> ResolvedParameter:
        return self[key].resolve(parameter_regime)

    # ------------------------------------------------------------------
    # regime dates and the model-to-parameter regime map
    # ------------------------------------------------------------------
    def set_regime_dates(self, mapping: Mapping):
        self.regime_dates.set_regime_dates(mapping)
        n = self.regime_dates.n_regimes()
        self.add_setting('n_regimes', max(n, 1), 'Number of model regimes')
        self.add_setting('regime_switching', n > 1, 'Whether the model has more than one model regime')

    def n_regimes(self) -> int:
        return self.regime_dates.n_regimes()

    def regime_for_date(self, d) -> int:
        return self.regime_dates.regime_for_date(d)

    def set_mapping(self, key, mapping: Mapping):
        self._check_key(key)
        self.model2para_regime.set_mapping(key, mapping)
        logger.debug(f"{key}: model2para_regime = {dict(mapping)}")

    def clear_mapping(self, key):
        self._check_key(key)
        self.model2para_regime.clear(key)

    def resolve_for_model_regime(self, key, model_regime) -> int:
        self._check_key(key)
        return self.model2para_regime.resolve_for_model_regime(key, model_regime, self.n_regimes())

    # ------------------------------------------------------------------
    # activation
    # ------------------------------------------------------------------
    def toggle_regime(self, model_regime, keys: Optional[Sequence[str]] = None):
        """
        Point every parameter (or those in `keys`) at the parameter regime it
        uses in `model_regime`. No overlay is modified; if any key fails to
        resolve, no parameter is re-pointed.

        ``active_regime`` records the last full toggle only: toggling a subset
        of keys leaves it unchanged, and `in_regime` restores every parameter
        to that regime on exit.
        """
        model_regime = check_regime_index(model_regime, 'model regime')
        if model_regime > max(self.n_regimes(), 1):
            raise InvalidRegime(f"Model regime {model_regime} exceeds the {self.n_regimes()} regime(s) defined")
        full = keys is None
        keys = list(self.parameters) if full else list(keys)
        targets = {key: self.resolve_for_model_regime(key, model_regime) for key in keys}
        for key, parameter_regime in targets.items():
            self.parameters[key].active = parameter_regime
        if full:
            self.active_regime = model_regime
        logger.debug(f"Toggled {len(targets)} parameter(s) to model regime {model_regime}")
        return self

    @contextmanager
    def in_regime(self, model_regime):
        """Toggle to `model_regime` for the duration of a with-block."""
        previous = self.active_regime
        self.toggle_regime(model_regime)
        try:
            yield self
        finally:
            self.toggle_regime(previous)

    # ------------------------------------------------------------------
    # estimation vector
    # ------------------------------------------------------------------
    def parameter_regimes(self, key) -> List[int]:
        """Parameter regimes in use for `key`: 1, explicit overlays and mapped targets."""
        para = self[key]
        used = {1, *para.regimes}
        used.update(self.model2para_regime.get(key, {}).values())
        return sorted(used)

    def estimated_parameters(self) -> List[Tuple[str, int]]:
        """``(key, parameter_regime)`` for every entry that is free in that regime."""
        return [(key, r) for key in self.parameters
                for r in self.parameter_regimes(key)
                if not self.parameters[key].resolve(r).fixed]

    def estimated_names(self) -> List[str]:
        return [key if r == 1 else f"{key}_reg{r}" for key, r in self.estimated_parameters()]

    def get_values(self) -> np.ndarray:
        return np.array([self.parameters[k].resolve(r).value
                         for k, r in self.estimated_parameters()], dtype=float)

    def update(self, values):
        """Write a vector of estimated values back into the store (all or nothing)."""
        entries = self.estimated_parameters()
        values = np.asarray(values, dtype=float).reshape(-1)
        if values.size != len(entries):
            raise ValueError(f"Expected {len(entries)} values, got {values.size}")

        written = {}
        for key, r in entries:
            written.setdefault(key, set()).add(r)
        for (key, r), x in zip(entries, values):
            para = self.parameters[key]
            bounds = para.effective_bounds(r)
            if not in_bounds(x, bounds):
                raise OutOfBounds(f"{key}: regime {r} value {x} outside bounds {bounds}")
            if r == 1 and 1 not in para.regimes:
                # overlays without a value of their own inherit the new base value
                for other, overlay in para.regimes.items():
                    if (other not in written[key] and overlay.value is None
                            and overlay.bounds is not None and not in_bounds(x, overlay.bounds)):
                        raise OutOfBounds(f"{key}: base value {x} outside regime {other} "
                                          f"bounds {overlay.bounds}, which inherit it")

        # overlays before the base they may currently inherit from
        for (key, r), x in reversed(list(zip(entries, values))):
            para = self.parameters[key]
            if r == 1 and 1 not in para.regimes:
                para.set_base_value(x)
            else:
                para.set_regime_value(r, x)
        return self

    def prior(self) -> Prior:
        entries = self.estimated_parameters()
        priors = [self.parameters[k].resolve(r).prior for k, r in entries]
        missing = [f"{k}[{r}]" for (k, r), p in zip(entries, priors) if p is None]
        if missing:
            raise ValueError(f"Estimated parameters without a prior: {', '.join(missing)}")
        return Prior(priors, names=self.estimated_names())

    def prior_logpdf(self, values=None) -> float:
        values = self.get_values() if values is None else values
        return self.prior().logpdf(values)

    def _transform(self, values, direction):
        entries = self.estimated_parameters()
        values = self.get_values() if values is None else np.asarray(values, dtype=float)
        if values.size != len(entries):
            raise ValueError(f"Expected {len(entries)} values, got {values.size}")
        out = np.empty(len(entries))
        for i, ((key, r), x) in enumerate(zip(entries, values)):
            para = self.parameters[key]
            transform = getattr(para.transform, direction)
            out[i] = transform(x, para.effective_bounds(r))
        return out

    def transform_to_real_line(self, values=None) -> np.ndarray:
        return self._transform(values, 'to_real_line')

    def transform_to_model_space(self, values) -> np.ndarray:
        return self._transform(values, 'to_model_space')

    # ------------------------------------------------------------------
    # derived parameters
    # ------------------------------------------------------------------
    def set_auxiliary_parameters(self, auxiliary_parameters: Mapping[str, Any]):
        context = {key: sympy.Symbol(key) for key in self.parameters}
        context.update({str(name): sympy.Symbol(str(name)) for name in auxiliary_parameters})
        allowed = set(context.values())

        parsed = {}
        for name, expr in auxiliary_parameters.items():
            parsed[sympy.Symbol(str(name))] = sympy.sympify(str(expr), locals=context)
            unknown = parsed[sympy.Symbol(str(name))].free_symbols - allowed
            if unknown:
                raise ValueError(f"Unknown symbol(s) in auxiliary parameter {name}: {sorted(map(str, unknown))}")

        edges = [(name, dep) for name, expr in parsed.items()
                 for dep in expr.free_symbols if dep in parsed]
        # dependencies first
        order = topological_sort([list(parsed), edges], default_sort_key)[::-1]

        self.auxiliary_parameters = {str(s): parsed[s] for s in order}
        self._auxiliary_functions = []
        for s in order:
            args = sorted(parsed[s].free_symbols, key=default_sort_key)
            self._auxiliary_functions.append((str(s), [str(a) for a in args],
                                              lambdify(args, parsed[s], modules='numpy')))

    def steady_state(self) -> Dict[str, float]:
        """Evaluate the derived parameters under the active regime."""
        values = {key: para.scaledvalue for key, para in self.parameters.items()}
        out = {}
        for name, args, f in self._auxiliary_functions:
            out[name] = values[name] = float(f(*[values[a] for a in args]))
        return out

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------
    def copy(self) -> 'RegimeModel':
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        from .parse_yaml import to_dict
        return to_dict(self)

    def parameter_table(self, field: str = 'value') -> pd.DataFrame:
        """Resolved `field` for every parameter (rows) in every model regime (columns)."""
        if field not in ResolvedParameter._fields:
            raise ValueError(f"field must be one of {ResolvedParameter._fields}")
        regimes = list(range(1, max(self.n_regimes(), 1) + 1))
        rows = {}
        for key, para in self.parameters.items():
            rows[key] = [getattr(para.resolve(self.resolve_for_model_regime(key, r)), field)
                         for r in regimes]
        table = pd.DataFrame.from_dict(rows, orient='index', columns=regimes)
        table.columns.name = 'regime'
        return table

    def __repr__(self):
        return (f"RegimeModel(name={self.name!r}, subspec={self.subspec!r}, "
                f"npara={len(self.parameters)}, n_regimes={self.n_regimes()}, "
                f"active_regime={self.active_regime})")


def toggle_regime(model: RegimeModel, model_regime, keys: Optional[Sequence[str]] = None) -> RegimeModel:
    """Activate `model_regime` for the parameters of `model`."""
    return model.toggle_regime(model_regime, keys=keys)
