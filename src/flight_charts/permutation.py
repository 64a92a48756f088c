"""
permutation.py
--------------
Label-permutation test for "does group A have a higher rate than the rest?"

- label_of(records)     -> bool per record (group membership, e.g. airline == WN)
- statistic_of(records) -> bool per record (the outcome, e.g. delayed/cancelled)

Observed statistic: outcome rate among the true-labelled records.
Null distribution: the same rate after shuffling the labels, num_simulations
times. p-value is upper-tailed and counts ties as extreme.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.utils import check_random_state

from .errors import InsufficientSampleError


@dataclass
class PermutationResult:
    observed_statistic: float
    null_distribution: np.ndarray
    p_value: float
    reject: bool
    alpha: float

    @property
    def num_simulations(self) -> int:
        return int(self.null_distribution.size)


def _as_bool(records: pd.DataFrame, fn) -> np.ndarray:
    values = fn(records) if callable(fn) else records[fn]
    return np.asarray(values, dtype=bool)


def observed_statistic(records: pd.DataFrame, label_of, statistic_of) -> float:
    labels = _as_bool(records, label_of)
    outcome = _as_bool(records, statistic_of)
    if not labels.any():
        raise InsufficientSampleError("No records carry the study label.")
    return float(outcome[labels].mean())


def run(records: pd.DataFrame, label_of, statistic_of, num_simulations: int,
        observed: float = None, alpha: float = 0.01, random_state=None) -> PermutationResult:
    """
    Run the permutation test.

    random_state may be None, an int seed or a numpy RandomState; the same
    seed and inputs always give the same null distribution and p-value.
    """
    if num_simulations < 1:
        raise ValueError(f"num_simulations must be >= 1, got {num_simulations}")

    labels = _as_bool(records, label_of)
    outcome = _as_bool(records, statistic_of)
    label_count = int(labels.sum())
    if label_count == 0:
        raise InsufficientSampleError("No records carry the study label.")

    if observed is None:
        observed = float(outcome[labels].mean())

    rng = check_random_state(random_state)

    # one working copy, reshuffled in place every trial
    shuffled = labels.copy()
    results = np.empty(num_simulations, dtype=float)
    for j in range(num_simulations):
        rng.shuffle(shuffled)
        results[j] = np.count_nonzero(shuffled & outcome) / label_count

    p_value = float(np.mean(results >= observed))
    return PermutationResult(
        observed_statistic=float(observed),
        null_distribution=results,
        p_value=p_value,
        reject=bool(p_value < alpha),
        alpha=float(alpha),
    )
