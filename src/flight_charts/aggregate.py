"""
aggregate.py
------------
Group a flight table by one or two keys and reduce every group to a number.

Keys and predicates are either a column name or a callable that takes the
frame and returns one value per record (a Series aligned on the index).

Reductions used by the charts:
- mean_of(pred)  -> share of records where pred holds (delay / cancel rates)
- sum_of(pred)   -> number of records where pred holds (stacked bar counts)
- count_records  -> group size (streamgraph)
"""

import pandas as pd

from .errors import InsufficientSampleError


def _resolve(records: pd.DataFrame, key) -> pd.Series:
    if callable(key):
        return pd.Series(key(records), index=records.index)
    return records[key]


def group_reduce(records: pd.DataFrame, reduce_fn, *keys) -> dict:
    """
    Reduce every observed key combination of `records` with `reduce_fn`.

    One key gives {key: value}, two keys give {(key1, key2): value}.
    Missing key values form their own group, so group sizes always add up
    to len(records). Absent combinations are not filled in.
    """
    if not 1 <= len(keys) <= 2:
        raise ValueError(f"group_reduce takes 1 or 2 keys, got {len(keys)}")

    by = [_resolve(records, key) for key in keys]
    grouper = by[0] if len(by) == 1 else by

    return {
        key: reduce_fn(group)
        for key, group in records.groupby(grouper, dropna=False, sort=False)
    }


def nest(grouped: dict) -> dict:
    """Turn {(outer, inner): value} into {outer: {inner: value}}."""
    nested = {}
    for (outer, inner), value in grouped.items():
        nested.setdefault(outer, {})[inner] = value
    return nested


# ---------- reductions ----------
def mean_of(predicate):
    def reduce(group: pd.DataFrame) -> float:
        values = _resolve(group, predicate)
        if len(values) == 0:
            raise InsufficientSampleError("Cannot take a rate over an empty group.")
        return float(values.astype(bool).mean())
    return reduce


def sum_of(predicate):
    def reduce(group: pd.DataFrame) -> int:
        return int(_resolve(group, predicate).astype(bool).sum())
    return reduce


def count_records(group: pd.DataFrame) -> int:
    return int(len(group))
