"""
dsge_regimes: regime-indexed parameter sets for DSGE models.

A parameter may hold different values, fixed flags, priors and bounds in
different parameter regimes; calendar-dated model regimes are mapped onto
those parameter regimes per parameter, and a per-model cursor selects which
one is live.
"""

# Configure logging first
from .logging_config import configure_logging, get_logger

from .exceptions import (RegimeError,
                         UnknownParameter,
                         InvalidRegime,
                         NonMonotonicDates,
                         IncompleteRegimeMap,
                         OutOfBounds,
                         DateBeforeFirstRegime,
                         ValidationError)

# Core model classes
from .parameters import Parameter, ResolvedParameter
from .regimes import RegimeDates, RegimeMap
from .RegimeModel import RegimeModel, Setting, toggle_regime
from .Prior import Prior, build_prior, rescale_prior

# Configuration programs
from .builder import RegimeBuilder, RegimeRule
from .subspecs import Subspec, init_subspec

# YAML parsing and utilities
from .parse_yaml import read_yaml, write_yaml

# Validation utilities
from .validation import validate_regime_configuration, check_regime_configuration

__version__ = '0.1.0'
