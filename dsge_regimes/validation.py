#!/usr/bin/env python3
"""
Validation utilities for regime configurations.

These checks look across the date table, the model-to-parameter regime map
and the overlays for configurations that are legal piece by piece but
almost certainly not what the author meant.
"""

from typing import List

from .exceptions import IncompleteRegimeMap
from .logging_config import get_logger

logger = get_logger("validation")


def validate_regime_configuration(model) -> List[str]:
    """
    Perform consistency checks on the regime configuration of a model.

    Args:
        model: A `RegimeModel`

    Returns:
        List of warning messages (empty if no issues found)
    """
    warnings = []
    n = max(model.n_regimes(), 1)

    for key in model.model2para_regime:
        mapping = model.model2para_regime.get(key)
        missing = model.model2para_regime.missing_regimes(key, n)
        if missing:
            warnings.append(f"{key}: no parameter regime assigned for model regime(s) {missing}")
        extra = [r for r in mapping if r > n]
        if extra:
            warnings.append(f"{key}: mapping refers to model regime(s) {extra} beyond the {n} defined")

    for key, para in model.parameters.items():
        mapping = model.model2para_regime.get(key, {})
        reachable = set(mapping.values()) if mapping else {1}

        unused = [r for r in para.regime_indices if r not in reachable]
        if unused:
            warnings.append(f"{key}: overlay(s) for parameter regime(s) {unused} are never active")

        bare = [r for r in sorted(reachable) if r != 1 and r not in para.regimes]
        if bare:
            warnings.append(f"{key}: parameter regime(s) {bare} have no overlay and resolve to the base record")

    for key, r in model.estimated_parameters():
        if model.parameters[key].resolve(r).prior is None:
            warnings.append(f"{key}: estimated in parameter regime {r} without a prior")

    for w in warnings:
        logger.warning(w)
    return warnings


def check_regime_configuration(model) -> List[str]:
    """
    Raise on hard configuration errors, otherwise return the warnings of
    `validate_regime_configuration`.

    Raises:
        IncompleteRegimeMap: A mapped parameter lacks an assignment for some model regime
    """
    n = max(model.n_regimes(), 1)
    for key in model.model2para_regime:
        missing = model.model2para_regime.missing_regimes(key, n)
        if missing:
            raise IncompleteRegimeMap(f"{key}: no parameter regime assigned for model regime(s) {missing}")
    return validate_regime_configuration(model)
