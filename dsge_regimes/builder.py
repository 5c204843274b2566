"""
Declarative construction of regime configurations.

A subspecification is usually "these parameters take a different value (and
a recentred prior) in these model regimes". `RegimeBuilder` collects such
rules and applies them to a `RegimeModel` in one pass:

    RegimeBuilder({1: '1959-07-01', 2: '2020-03-31', 3: '2020-06-30', 4: '2020-09-30'}) \\
        .rule(['sigma_g', 'sigma_b'], {1: 1, 2: 2, 3: 2, 4: 1}, value_scale=10.0, prior_location=10.0) \\
        .apply(model)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .Prior import rescale_prior
from .exceptions import check_regime_index
from .logging_config import get_logger

logger = get_logger("builder")


@dataclass
class RegimeRule:
    """
    Overlay instructions for a group of parameters.

    Attributes:
        parameters: Parameter keys the rule applies to
        grouping: Model regime -> parameter regime map shared by the keys
        value_scale: Multiplies the regime-1 value (ignored if `value` is given)
        value: Absolute value for the targeted regimes
        fixed: Fixed flag for the targeted regimes (inherited when None)
        bounds: Bounds for the targeted regimes (inherited when None)
        prior_location: Factor applied to the location of the regime-1 prior
        prior_spread: Factor applied to the dispersion of the regime-1 prior
        regimes: Parameter regimes to write; defaults to every mapped regime except 1
    """
    parameters: Sequence[str]
    grouping: Mapping[int, int]
    value_scale: float = 1.0
    value: Optional[float] = None
    fixed: Optional[bool] = None
    bounds: Optional[Tuple[float, float]] = None
    prior_location: Optional[float] = None
    prior_spread: float = 1.0
    regimes: Optional[Sequence[int]] = None

    def target_regimes(self) -> List[int]:
        if self.regimes is not None:
            return sorted(check_regime_index(r, 'parameter regime') for r in self.regimes)
        return sorted(set(self.grouping.values()) - {1})

    def rescales_prior(self) -> bool:
        return (self.prior_location not in (None, 1.0)) or self.prior_spread != 1.0


@dataclass
class RegimeBuilder:
    dates: Optional[Mapping] = None
    rules: List[RegimeRule] = field(default_factory=list)
    widenings: List[Tuple[Sequence[str], Tuple[float, float]]] = field(default_factory=list)

    def widen_bounds(self, parameters: Sequence[str], bounds: Tuple[float, float]) -> 'RegimeBuilder':
        """Replace the base bounds of `parameters` before any overlay is written."""
        self.widenings.append((list(parameters), bounds))
        return self

    def rule(self, parameters: Sequence[str], grouping: Mapping[int, int], **kwargs) -> 'RegimeBuilder':
        self.rules.append(RegimeRule(list(parameters), dict(grouping), **kwargs))
        return self

    def groupings(self) -> Dict[str, Dict[int, int]]:
        """Model-to-parameter regime map per key; one key cannot carry two groupings."""
        out: Dict[str, Dict[int, int]] = {}
        for rule in self.rules:
            for key in rule.parameters:
                if key in out and out[key] != dict(rule.grouping):
                    raise ValueError(f"{key}: conflicting regime groupings {out[key]} and {dict(rule.grouping)}")
                out[key] = dict(rule.grouping)
        return out

    def apply(self, model):
        """Write dates, bounds, mappings and overlays into `model`, then toggle to regime 1."""
        groupings = self.groupings()

        if self.dates is not None:
            model.set_regime_dates(self.dates)

        for keys, bounds in self.widenings:
            for key in keys:
                model.set_bounds(key, bounds)

        for key, grouping in groupings.items():
            model.set_mapping(key, grouping)

        # regime-1 records as they were before any rule wrote an overlay
        baselines = {key: model.resolve(key, 1) for key in groupings}

        for rule in self.rules:
            for key in rule.parameters:
                baseline = baselines[key]
                for r in rule.target_regimes():
                    x = rule.value if rule.value is not None else baseline.value * rule.value_scale
                    model.set_regime_record(key, r, value=x, bounds=rule.bounds)
                    if rule.fixed is not None:
                        model.set_regime_fixed(key, r, rule.fixed)
                    if rule.rescales_prior() and baseline.prior is not None:
                        location = 1.0 if rule.prior_location is None else rule.prior_location
                        model.set_regime_prior(key, r, rescale_prior(baseline.prior, location, rule.prior_spread))
            logger.debug(f"Applied regime rule to {list(rule.parameters)} for regimes {rule.target_regimes()}")

        return model.toggle_regime(1)
