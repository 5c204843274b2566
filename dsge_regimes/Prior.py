"""
Prior distributions for regime-indexed parameters.

Priors are frozen scipy distributions. They are built from the
``[type, p1, p2]`` triples used in model files, and can be recentred for a
regime by building a rescaled copy; the source distribution is never mutated.
"""

import numpy as np

from typing import Dict, List, Optional, Sequence, Tuple, Union

from numpy.random import Generator, RandomState
from scipy.stats import beta, norm, uniform, gamma

from .OtherPriors import root_invgamma

BAD_LOG_PRIOR = -100000000000.0

# scipy family name -> name used in model files
FAMILIES = {"beta": "beta",
            "gamma": "gamma",
            "norm": "normal",
            "root_invgamma": "inv_gamma",
            "uniform": "uniform"}

PRIOR_TYPES = tuple(FAMILIES.values())


def build_prior(ptype: str, p1: float, p2: float):
    """
    Build a frozen distribution from a model-file prior triple.

    Para (1) and Para (2) are the mean and standard deviation for the beta,
    gamma and normal families, the lower and upper bound for the uniform, and
    ``s`` and ``nu`` for the root inverse gamma (``inv_gamma``).
    """
    p1, p2 = float(p1), float(p2)
    if ptype == "beta":
        if not (0 < p1 < 1) or p2 <= 0:
            raise ValueError(f"beta prior needs 0 < mean < 1 and std > 0, got ({p1}, {p2})")
        a = (1 - p1) * p1 ** 2 / p2 ** 2 - p1
        b = a * (1 / p1 - 1)
        if a <= 0 or b <= 0:
            raise ValueError(f"beta prior with mean {p1} and std {p2} has no valid shape")
        return beta(a, b)
    if ptype == "gamma":
        if p1 <= 0 or p2 <= 0:
            raise ValueError(f"gamma prior needs mean > 0 and std > 0, got ({p1}, {p2})")
        b = p2 ** 2 / p1
        return gamma(p1 / b, scale=b)
    if ptype == "normal":
        if p2 <= 0:
            raise ValueError(f"normal prior needs std > 0, got {p2}")
        return norm(loc=p1, scale=p2)
    if ptype == "inv_gamma":
        if p1 <= 0 or p2 <= 0:
            raise ValueError(f"inv_gamma prior needs s > 0 and nu > 0, got ({p1}, {p2})")
        return root_invgamma(p1, p2)
    if ptype == "uniform":
        if p2 <= p1:
            raise ValueError(f"uniform prior needs lower < upper, got ({p1}, {p2})")
        return uniform(loc=p1, scale=(p2 - p1))
    raise ValueError(f"Unknown prior type {ptype!r}; expected one of {PRIOR_TYPES}")


def construct_prior(prior_list: Dict[str, Sequence], parameters: Sequence[str]) -> List:
    """Build a list of frozen distributions, one per name in `parameters`."""
    prior = []
    for par in parameters:
        ptype, p1, p2 = prior_list[str(par)]
        prior.append(build_prior(ptype, p1, p2))
    return prior


def prior_type(dist) -> str:
    try:
        return FAMILIES[dist.dist.name]
    except (AttributeError, KeyError):
        raise ValueError(f"Unsupported prior distribution: {dist!r}") from None


def prior_spec(dist) -> Tuple[str, float, float]:
    """Inverse of `build_prior`: return the ``(type, p1, p2)`` triple of `dist`."""
    ptype = prior_type(dist)
    if ptype == "uniform":
        lower, upper = dist.support()
        return ptype, float(lower), float(upper)
    if ptype == "inv_gamma":
        s, nu = dist.args[:2]
        return ptype, float(s), float(nu)
    return ptype, float(dist.mean()), float(dist.std())


def rescale_prior(dist, location: float = 1.0, spread: float = 1.0):
    """
    Return a new prior whose location is scaled by `location` and whose
    dispersion is scaled by `spread`.

    Used to recentre a prior when a regime's typical magnitude differs from
    the baseline (e.g. shock standard deviations ten times larger). The
    argument is left untouched.
    """
    ptype, p1, p2 = prior_spec(dist)
    if ptype == "inv_gamma":
        if spread != 1.0:
            raise ValueError("spread rescaling is not defined for inv_gamma priors")
        return build_prior(ptype, p1 * location, p2)
    if ptype == "uniform":
        center, half = (p1 + p2) / 2, (p2 - p1) / 2
        center *= location
        half *= abs(location) * spread
        return build_prior(ptype, center - half, center + half)
    return build_prior(ptype, p1 * location, p2 * spread)


class Prior(object):
    """Independent product of per-parameter priors."""

    def __init__(self, individual_prior, names: Optional[Sequence[str]] = None):
        self.priors = individual_prior
        self.names = list(names) if names is not None else None
        if self.priors is None:
            self.npara = 0
        else:
            self.npara = len(individual_prior)

    def __len__(self):
        return self.npara

    def logpdf(self, para):
        if self.priors is None:
            return None

        para = np.asarray(para, dtype=float)
        if para.shape[-1] != self.npara:
            raise ValueError(f"Expected {self.npara} parameters, got {para.shape[-1]}")

        ldens = float(np.sum([x.logpdf(y) for x, y in zip(self.priors, para)]))
        if not np.isfinite(ldens):
            ldens = BAD_LOG_PRIOR
        return ldens

    def rvs(self, size: Optional[int] = None,
            random_state: Optional[Union[int, Generator, RandomState]] = None):
        if self.priors is None:
            return None

        if size is not None and not isinstance(size, int):
            raise TypeError("size must be an integer or None")

        if isinstance(random_state, (Generator, RandomState)):
            rng = random_state
        else:
            rng = np.random.default_rng(random_state)

        if size is None:
            return np.array([float(np.asarray(dist.rvs(random_state=rng)).reshape(-1)[0])
                             for dist in self.priors])

        draws = np.empty((size, self.npara), dtype=float)
        for idx, dist in enumerate(self.priors):
            draws[:, idx] = np.asarray(dist.rvs(size=size, random_state=rng)).reshape(size)
        return draws
