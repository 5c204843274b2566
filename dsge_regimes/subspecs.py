"""
Subspecifications: named configuration programs run against a `RegimeModel`.

Each member of `Subspec` has exactly one handler, registered with
`@register(Subspec.X)`. Handlers set the regime dates, the
model-to-parameter regime map and the overlays; `init_subspec` runs the
handler and leaves the model toggled to regime 1.
"""

from enum import Enum
from typing import Callable, Dict, List, Union

from .builder import RegimeBuilder
from .logging_config import get_logger

logger = get_logger("subspecs")

SAMPLE_START = '1959-07-01'

COVID_DATES = {1: SAMPLE_START,
               2: '2020-03-31',
               3: '2020-06-30',
               4: '2020-09-30'}

# 2020-Q2 and 2020-Q3 share one parameter regime, after which the baseline returns
COVID_GROUPING = {1: 1, 2: 2, 3: 2, 4: 1}

COVID_SHOCKS = ['sigma_g', 'sigma_b', 'sigma_mu', 'sigma_z',
                'sigma_lambda_f', 'sigma_lambda_w', 'sigma_r_m']
COVID_SHOCK_SCALE = 10.0
COVID_SHOCK_BOUNDS = (1e-8, 100.0)

FORWARD_GUIDANCE_DATES = {1: SAMPLE_START, 2: '2008-10-01'}
POLICY_CHANGE_DATES = {1: SAMPLE_START, 2: '2020-09-30'}
POLICY_RULE = ['psi1', 'psi2', 'psi3', 'rho']


class Subspec(Enum):
    BASELINE = 'ss0'
    COVID_VOLATILITY = 'ss_covid'
    COVID_RECENTRED = 'ss_covid_recentred'
    FORWARD_GUIDANCE = 'ss_fg'
    POLICY_CHANGE = 'ss_policy'


_HANDLERS: Dict[Subspec, Callable] = {}


def register(subspec: Subspec):
    def decorator(f):
        if subspec in _HANDLERS:
            raise RuntimeError(f"Handler for {subspec} registered twice")
        _HANDLERS[subspec] = f
        return f
    return decorator


def anticipated_shocks(model) -> List[str]:
    n = model.settings['n_anticipated_shocks'].value if 'n_anticipated_shocks' in model.settings else 4
    return [f"sigma_r_m{i}" for i in range(1, n + 1)]


@register(Subspec.BASELINE)
def baseline(model):
    """Regime-invariant calibration; any configuration already on the model is kept."""
    return model


@register(Subspec.COVID_VOLATILITY)
def covid_volatility(model):
    """
    Shock standard deviations take a separate parameter regime during
    2020-Q2/Q3, starting from ten times their baseline values.
    """
    return (RegimeBuilder(COVID_DATES)
            .rule(COVID_SHOCKS, COVID_GROUPING,
                  value_scale=COVID_SHOCK_SCALE, bounds=COVID_SHOCK_BOUNDS)
            .apply(model))


@register(Subspec.COVID_RECENTRED)
def covid_recentred(model):
    """As `covid_volatility`, with the COVID-regime priors recentred on the scaled values."""
    return (RegimeBuilder(COVID_DATES)
            .rule(COVID_SHOCKS, COVID_GROUPING,
                  value_scale=COVID_SHOCK_SCALE, bounds=COVID_SHOCK_BOUNDS,
                  prior_location=COVID_SHOCK_SCALE)
            .apply(model))


@register(Subspec.FORWARD_GUIDANCE)
def forward_guidance(model):
    """
    Anticipated policy shocks are switched off (fixed at zero) before
    2008-Q4 and estimated afterwards. Their base bounds exclude zero, so they
    are widened first.
    """
    keys = anticipated_shocks(model)
    grouping = {1: 1, 2: 2}
    return (RegimeBuilder(FORWARD_GUIDANCE_DATES)
            .widen_bounds(keys, (0.0, 100.0))
            .rule(keys, grouping, value=0.0, fixed=True, regimes=[1])
            .rule(keys, grouping, fixed=False, regimes=[2])
            .apply(model))


@register(Subspec.POLICY_CHANGE)
def policy_change(model):
    """Policy rule coefficients are estimated separately from 2020-Q3 onwards."""
    return (RegimeBuilder(POLICY_CHANGE_DATES)
            .rule(POLICY_RULE, {1: 1, 2: 2})
            .apply(model))


missing = [s for s in Subspec if s not in _HANDLERS]
if missing:
    raise RuntimeError(f"No handler registered for subspec(s) {missing}")
del missing


def init_subspec(model, subspec: Union[Subspec, str, None] = None):
    """
    Configure `model` for `subspec` (default: ``model.subspec``) and toggle to regime 1.

    Raises:
        ValueError: `subspec` is not a known subspecification
    """
    if subspec is None:
        subspec = model.subspec
    if not isinstance(subspec, Subspec):
        try:
            subspec = Subspec(subspec)
        except ValueError:
            raise ValueError(f"Unknown subspec {subspec!r}; "
                             f"expected one of {[s.value for s in Subspec]}") from None

    _HANDLERS[subspec](model)
    model.subspec = subspec.value
    model.toggle_regime(1)
    logger.info(f"Initialized {model.name} with subspec {subspec.value} "
                f"({max(model.n_regimes(), 1)} model regime(s))")
    return model
