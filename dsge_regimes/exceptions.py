"""
Exceptions raised by the regime-indexed parameter store.

All configuration errors are raised at the call that triggers them; none are
recovered internally.
"""

import numpy as np


class RegimeError(ValueError):
    """Base class for regime configuration errors."""
    pass


class UnknownParameter(RegimeError, KeyError):
    """An overlay read or write against an undeclared parameter key."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Unknown parameter: {key!r}")

    def __str__(self):
        return self.args[0]


class InvalidRegime(RegimeError):
    """A non-positive or otherwise malformed regime index."""
    pass


class NonMonotonicDates(RegimeError):
    """The regime date table is not strictly increasing from regime 1."""
    pass


class IncompleteRegimeMap(RegimeError):
    """A model regime has no parameter-regime assignment at use time."""
    pass


class OutOfBounds(RegimeError):
    """A value falls outside the effective bounds of its overlay."""
    pass


class DateBeforeFirstRegime(RegimeError):
    """A date lookup precedes the start of the first regime."""
    pass


class ValidationError(Exception):
    """Custom exception for schema validation errors."""
    pass


def check_regime_index(regime, what='regime'):
    """Return `regime` as an int if it is a positive integer, else raise InvalidRegime."""
    # bool is an int subclass but never a meaningful regime index
    if isinstance(regime, bool) or not isinstance(regime, (int, np.integer)):
        raise InvalidRegime(f"{what} index must be a positive integer, got {regime!r}")
    if regime < 1:
        raise InvalidRegime(f"{what} index must be >= 1, got {regime}")
    return int(regime)
