"""
Regime date table and model-to-parameter regime map.

Model regimes are contiguous calendar intervals: regime ``r`` covers
``[d_r, d_{r+1})`` and the last regime is open-ended. Each regime-varying
parameter maps every model regime onto one of its parameter regimes.
"""

from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .exceptions import (DateBeforeFirstRegime,
                         IncompleteRegimeMap,
                         InvalidRegime,
                         NonMonotonicDates,
                         check_regime_index)
from .logging_config import get_logger

logger = get_logger("regimes")


def to_timestamp(d) -> pd.Timestamp:
    """Normalize a date-like (str, date, datetime, Timestamp, Period) to a Timestamp."""
    if isinstance(d, pd.Period):
        return d.start_time
    ts = pd.Timestamp(d)
    if pd.isna(ts):
        raise ValueError(f"Not a valid date: {d!r}")
    return ts


class RegimeDates(object):
    """Ordered mapping from model regime (1, 2, ...) to the date it begins."""

    def __init__(self, mapping: Optional[Mapping] = None):
        self._dates = pd.DatetimeIndex([])
        if mapping:
            self.set_regime_dates(mapping)

    def set_regime_dates(self, mapping: Mapping):
        """Replace the table; keys must be exactly 1..R and dates strictly increasing."""
        regimes = sorted(check_regime_index(r, 'model regime') for r in mapping.keys())
        if regimes != list(range(1, len(regimes) + 1)):
            raise NonMonotonicDates(f"Regime dates must be indexed 1..R without gaps, got {regimes}")

        dates = [to_timestamp(mapping[r]) for r in regimes]
        for r in range(1, len(dates)):
            if dates[r] <= dates[r - 1]:
                raise NonMonotonicDates(
                    f"Regime {r + 1} starts {dates[r].date()}, not after regime {r} ({dates[r - 1].date()})")

        self._dates = pd.DatetimeIndex(dates)
        logger.debug(f"Regime dates set for {len(dates)} regime(s)")

    def n_regimes(self) -> int:
        return len(self._dates)

    def __len__(self):
        return len(self._dates)

    def __getitem__(self, regime) -> pd.Timestamp:
        regime = check_regime_index(regime, 'model regime')
        if regime > len(self._dates):
            raise InvalidRegime(f"Model regime {regime} not in date table of {len(self._dates)} regime(s)")
        return self._dates[regime - 1]

    def items(self):
        return [(i + 1, d) for i, d in enumerate(self._dates)]

    def to_dict(self) -> Dict[int, pd.Timestamp]:
        return dict(self.items())

    def regime_for_date(self, d) -> int:
        """Largest regime r whose start date is on or before `d`."""
        ts = to_timestamp(d)
        r = int(self._dates.searchsorted(ts, side='right'))
        if r == 0:
            first = self._dates[0].date() if len(self._dates) else None
            raise DateBeforeFirstRegime(f"{ts.date()} precedes the first regime start ({first})")
        return r

    def regimes_for_dates(self, dates) -> np.ndarray:
        """Vectorized `regime_for_date` over a sequence of dates or a PeriodIndex."""
        if isinstance(dates, pd.PeriodIndex):
            stamps = dates.start_time
        else:
            stamps = pd.DatetimeIndex([to_timestamp(d) for d in dates])
        r = self._dates.searchsorted(stamps, side='right')
        if len(r) and r.min() == 0:
            bad = stamps[r == 0][0]
            raise DateBeforeFirstRegime(f"{bad.date()} precedes the first regime start")
        return np.asarray(r, dtype=int)

    def regime_ranges(self) -> List[Tuple[pd.Timestamp, Optional[pd.Timestamp]]]:
        """``(start, end)`` per regime with an exclusive end; ``None`` for the last regime."""
        ends = list(self._dates[1:]) + [None]
        return list(zip(self._dates, ends))

    def __eq__(self, other):
        return isinstance(other, RegimeDates) and self._dates.equals(other._dates)

    def __repr__(self):
        inner = ', '.join(f"{r}: {d.date()}" for r, d in self.items())
        return f"RegimeDates({{{inner}}})"


class RegimeMap(object):
    """Per-parameter mapping from model regime to parameter regime."""

    def __init__(self):
        self._map: Dict[str, Dict[int, int]] = {}

    def set_mapping(self, key: str, mapping: Mapping):
        checked = {check_regime_index(m, 'model regime'): check_regime_index(p, 'parameter regime')
                   for m, p in mapping.items()}
        self._map[str(key)] = dict(sorted(checked.items()))

    def clear(self, key: str):
        self._map.pop(str(key), None)

    def __contains__(self, key):
        return key in self._map

    def __iter__(self):
        return iter(self._map)

    def __len__(self):
        return len(self._map)

    def get(self, key, default=None):
        return self._map.get(key, default)

    def missing_regimes(self, key: str, n_regimes: int) -> List[int]:
        mapping = self._map.get(key)
        if mapping is None:
            return []
        return [r for r in range(1, n_regimes + 1) if r not in mapping]

    def resolve_for_model_regime(self, key: str, model_regime, n_regimes: int) -> int:
        """
        Parameter regime that `key` uses in `model_regime`.

        Keys absent from the map are regime invariant and resolve to 1. A
        mapped key must cover every model regime 1..n_regimes.
        """
        model_regime = check_regime_index(model_regime, 'model regime')
        if model_regime > max(n_regimes, 1):
            raise InvalidRegime(f"Model regime {model_regime} exceeds the {n_regimes} regime(s) defined")

        mapping = self._map.get(key)
        if mapping is None:
            return 1

        missing = self.missing_regimes(key, max(n_regimes, 1))
        if missing:
            raise IncompleteRegimeMap(f"{key}: no parameter regime assigned for model regime(s) {missing}")
        return mapping[model_regime]

    def to_dict(self) -> Dict[str, Dict[int, int]]:
        return {k: dict(v) for k, v in self._map.items()}

    def __repr__(self):
        return f"RegimeMap({self._map})"
