"""
binning.py
----------
Equal-width histogram bins with explicit thresholds.

Thresholds: first = lo + width, middle ones step by width from the previous
one, last = hi exactly. Bin i covers [edge_i, edge_{i+1}) and the last bin is
closed on the right, so the observed maximum always lands in the last bin.
Since the last threshold sits on hi, the last two bins are not the same
width as the others.

When lo == hi every threshold collapses onto lo: all values fall into the
last bin and the other bins are empty with zero width.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from .errors import InsufficientSampleError


def make_thresholds(lo: float, hi: float, n_bins: int) -> List[float]:
    if n_bins < 1:
        raise ValueError(f"n_bins must be >= 1, got {n_bins}")
    n_thresholds = n_bins - 1
    width = (hi - lo) / n_bins

    thresholds = []
    for i in range(n_thresholds):
        if i == 0:
            thresholds.append(lo + width)
        elif i == n_thresholds - 1:
            thresholds.append(hi)
        else:
            thresholds.append(thresholds[i - 1] + width)
    return thresholds


@dataclass
class Binning:
    lo: float
    hi: float
    thresholds: List[float]
    edges: List[Tuple[float, float]]
    members: List[list]
    _index: dict = field(default_factory=dict, repr=False)

    @property
    def n_bins(self) -> int:
        return len(self.members)

    @property
    def counts(self) -> List[int]:
        return [len(m) for m in self.members]

    def index_of(self, value) -> int:
        """Bin index of a value that was binned; KeyError otherwise."""
        return self._index[value]


def bin_values(values, lo: float, hi: float, thresholds) -> Binning:
    values = np.asarray(values, dtype=float)
    thresholds = [float(t) for t in thresholds]
    if values.size and (np.isnan(values).any() or values.min() < lo or values.max() > hi):
        raise ValueError(f"Values must lie within [{lo}, {hi}] and not be NaN.")

    n_bins = len(thresholds) + 1
    lowers = [lo] + thresholds
    uppers = thresholds + [hi]
    edges = list(zip(lowers, uppers))

    # number of thresholds <= value; the max sits on the last threshold -> last bin
    idx = np.searchsorted(np.asarray(thresholds), values, side="right")
    idx = np.minimum(idx, n_bins - 1)

    members = [[] for _ in range(n_bins)]
    index = {}
    for value, i in zip(values.tolist(), idx.tolist()):
        members[i].append(value)
        index[value] = i

    return Binning(lo=float(lo), hi=float(hi), thresholds=thresholds,
                   edges=edges, members=members, _index=index)


def equal_width_bins(values, n_bins: int) -> Binning:
    """Bin values over their own [min, max] range."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise InsufficientSampleError("Cannot bin an empty sample.")
    lo, hi = float(values.min()), float(values.max())
    return bin_values(values, lo, hi, make_thresholds(lo, hi, n_bins))
