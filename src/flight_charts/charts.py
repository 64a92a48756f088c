"""
charts.py
---------
One builder per chart. Each takes the enriched flight table (see
joiner.enrich) plus whatever reference tables it needs, and returns
everything the drawing code uses, so no statistic is recomputed there.

- choropleth_data   -> delayed/cancelled rate per state, 4 color bins
- stacked_bar_data  -> prompt / delayed / cancelled counts per airline
- scatter_data      -> departure vs arrival delay + OLS line
- histogram_data    -> permutation test for the study airline, 8 bins
- matrix_data       -> in-state routes with at least one cancellation
- streamgraph_data  -> monthly flight counts for the West Coast states
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from . import config
from .aggregate import count_records, group_reduce, mean_of, nest, sum_of
from .binning import Binning, equal_width_bins
from .errors import DegenerateRegressionError, InsufficientSampleError
from .joiner import boundary_bounds, drop_territories, filter_by_state_set, polygon_rings
from .palettes import ColorScheme, bin_colors
from .permutation import PermutationResult, run
from .regression import RegressionResult, fit, predict

STACK_KEYS = ("prompt", "delayed", "cancelled")
NOT_APPLICABLE = "NA"


def stack_layers(frame: pd.DataFrame, keys) -> dict:
    """
    Cumulative (lower, upper) per row for each key, stacked in key order.

    Same layout d3.stack produces: the first key starts at 0, every next key
    starts where the previous one ended.
    """
    keys = list(keys)
    values = frame[keys].astype(float)
    upper = values.cumsum(axis=1)
    lower = upper - values
    return {key: list(zip(lower[key].tolist(), upper[key].tolist())) for key in keys}


# ---------- choropleth ----------
@dataclass
class ChoroplethData:
    rates: dict                 # stusab -> delayed/cancelled rate
    binning: Optional[Binning]
    states: pd.DataFrame        # stusab, name, rate, bin, fill, rings
    bounds: dict                # lon_min, lon_max, lat_min, lat_max
    colors: list
    scheme: ColorScheme
    error: Optional[str] = None

    @property
    def thresholds(self):
        return self.binning.thresholds if self.binning is not None else []


def choropleth_data(flights: pd.DataFrame, boundaries: pd.DataFrame,
                    n_bins: int = config.CHOROPLETH_BINS,
                    scheme: ColorScheme = ColorScheme.BLUES) -> ChoroplethData:
    """
    Delayed/cancelled rate per state plus its color bin.

    With no flight leaving a mapped state there is nothing to bin: every
    state stays uncolored and the reason is kept in `error`.
    """
    states = drop_territories(boundaries)
    filtered = filter_by_state_set(flights, states["stusab"])

    rates = group_reduce(filtered, mean_of("DELAYED_OR_CANCELLED"), "STATE")
    try:
        binning, error = equal_width_bins(list(rates.values()), n_bins), None
    except InsufficientSampleError as err:
        binning, error = None, str(err)
    colors = bin_colors(scheme, n_bins)

    table = states[["stusab", "name"]].reset_index(drop=True)
    table["rate"] = table["stusab"].map(rates).astype(float)
    # states without any departing flight stay uncolored
    table["bin"] = [binning.index_of(r) if pd.notna(r) else -1 for r in table["rate"]]
    table["fill"] = pd.Series([colors[b] if b >= 0 else None for b in table["bin"]],
                              index=table.index, dtype=object)
    table["rings"] = pd.Series([polygon_rings(g) for g in states["geometry"]],
                               index=table.index, dtype=object)

    return ChoroplethData(
        rates=rates,
        binning=binning,
        states=table,
        bounds=boundary_bounds(states),
        colors=colors,
        scheme=scheme,
        error=error,
    )


# ---------- stacked bar ----------
@dataclass
class StackedBarData:
    counts: pd.DataFrame        # index AIRLINE, columns STACK_KEYS
    layers: dict                # key -> [(lower, upper), ...] per airline
    y_max: int


def _cancelled(df):
    return df["CANCELLED"].fillna(0).astype(bool)


def stacked_bar_data(flights: pd.DataFrame) -> StackedBarData:
    """
    Per airline: prompt (departed on time or early), delayed (departed late)
    and cancelled. Cancelled flights only count as cancelled.
    """
    prompt = group_reduce(
        flights, sum_of(lambda df: ~_cancelled(df) & df["DEPARTURE_DELAY"].le(0)), "AIRLINE")
    delayed = group_reduce(
        flights, sum_of(lambda df: ~_cancelled(df) & df["DEPARTURE_DELAY"].gt(0)), "AIRLINE")
    cancelled = group_reduce(flights, sum_of(_cancelled), "AIRLINE")

    airlines = list(prompt.keys())
    counts = pd.DataFrame(
        {"prompt": pd.Series(prompt), "delayed": pd.Series(delayed), "cancelled": pd.Series(cancelled)}
    ).reindex(airlines).fillna(0).astype(int)
    counts.index.name = "AIRLINE"

    y_max = int(counts.sum(axis=1).max()) if len(counts) else 0
    return StackedBarData(counts=counts, layers=stack_layers(counts, STACK_KEYS), y_max=y_max)


# ---------- scatter ----------
@dataclass
class ScatterData:
    points: pd.DataFrame        # AIRLINE, DEPARTURE_DELAY, ARRIVAL_DELAY
    x_extent: Optional[tuple]
    y_extent: Optional[tuple]
    regression: Optional[RegressionResult]
    line: Optional[tuple]       # ((x_min, y1), (x_max, y2))
    fit_error: Optional[str] = None


def scatter_data(flights: pd.DataFrame) -> ScatterData:
    cols = ["AIRLINE", "DEPARTURE_DELAY", "ARRIVAL_DELAY"]
    points = (
        flights.dropna(subset=["DEPARTURE_DELAY", "ARRIVAL_DELAY"])[cols]
        .reset_index(drop=True)
    )
    x, y = points["DEPARTURE_DELAY"], points["ARRIVAL_DELAY"]
    x_extent = (float(x.min()), float(x.max())) if len(points) else None
    y_extent = (float(y.min()), float(y.max())) if len(points) else None

    try:
        regression = fit(x, y)
    except (DegenerateRegressionError, InsufficientSampleError) as err:
        return ScatterData(points=points, x_extent=x_extent, y_extent=y_extent,
                           regression=None, line=None, fit_error=str(err))

    x_min, x_max = x_extent
    line = ((x_min, float(predict(regression, x_min))),
            (x_max, float(predict(regression, x_max))))
    return ScatterData(points=points, x_extent=x_extent, y_extent=y_extent,
                       regression=regression, line=line)


# ---------- histogram ----------
@dataclass
class HistogramData:
    study_airline: str
    test: Optional[PermutationResult]
    binning: Optional[Binning]
    x_domain: Optional[tuple]   # covers the null distribution and the observed value
    error: Optional[str] = None


def histogram_data(flights: pd.DataFrame, study_airline: str = config.STUDY_AIRLINE,
                   num_simulations: int = config.NUM_SIMULATIONS,
                   alpha: float = config.ALPHA, n_bins: int = config.HISTOGRAM_BINS,
                   random_state=None) -> HistogramData:
    try:
        test = run(
            flights,
            lambda df: df["AIRLINE"] == study_airline,
            "DELAYED_OR_CANCELLED",
            num_simulations,
            alpha=alpha,
            random_state=random_state,
        )
        binning = equal_width_bins(test.null_distribution, n_bins)
    except InsufficientSampleError as err:
        return HistogramData(study_airline=study_airline, test=None, binning=None,
                             x_domain=None, error=str(err))

    extremes = [binning.lo, binning.hi, test.observed_statistic]
    return HistogramData(study_airline=study_airline, test=test, binning=binning,
                         x_domain=(min(extremes), max(extremes)))


# ---------- matrix ----------
@dataclass
class MatrixData:
    state: str
    codes: list
    names: dict                 # code -> airport name
    adjacency: pd.DataFrame     # True / False off the diagonal, NOT_APPLICABLE on it

    @property
    def cells(self) -> pd.DataFrame:
        """Long form: one row per (origin, destination)."""
        return self.adjacency.reset_index().melt(
            id_vars="origin", var_name="destination", value_name="value")


def matrix_data(airports: pd.DataFrame, flights: pd.DataFrame,
                state: str = config.MATRIX_STATE) -> MatrixData:
    in_state = airports[airports["STATE"] == state].drop_duplicates("IATA_CODE", keep="first")
    codes = in_state["IATA_CODE"].tolist()
    names = dict(zip(codes, in_state["AIRPORT"]))

    local = flights[flights["ORIGIN_AIRPORT"].isin(codes) & flights["DESTINATION_AIRPORT"].isin(codes)]
    local = local[_cancelled(local)]
    # a route counts in both directions
    cancelled_routes = {
        frozenset(pair) for pair in zip(local["ORIGIN_AIRPORT"], local["DESTINATION_AIRPORT"])
    }

    rows = [
        [NOT_APPLICABLE if origin == dest else frozenset((origin, dest)) in cancelled_routes
         for dest in codes]
        for origin in codes
    ]
    adjacency = pd.DataFrame(
        rows,
        index=pd.Index(codes, name="origin"),
        columns=pd.Index(codes, name="destination"),
        dtype=object,
    )
    return MatrixData(state=state, codes=codes, names=names, adjacency=adjacency)


# ---------- streamgraph ----------
@dataclass
class StreamgraphData:
    states: tuple
    counts: pd.DataFrame        # index MONTH (ascending), one column per state
    layers: dict
    y_max: int


def streamgraph_data(flights: pd.DataFrame, states=config.WEST_COAST) -> StreamgraphData:
    states = tuple(states)
    region = filter_by_state_set(flights, states)
    by_month = nest(group_reduce(region, count_records, "MONTH", "STATE"))

    months = sorted(by_month)
    # a state with no flights in a month still needs a 0 in the stack
    rows = [[by_month[month].get(state, 0) for state in states] for month in months]
    counts = pd.DataFrame(
        np.asarray(rows, dtype=int).reshape(len(months), len(states)),
        index=pd.Index(months, name="MONTH"),
        columns=list(states),
    )
    y_max = int(counts.sum(axis=1).max()) if len(counts) else 0
    return StreamgraphData(states=states, counts=counts,
                           layers=stack_layers(counts, states), y_max=y_max)
