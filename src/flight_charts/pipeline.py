"""
pipeline.py
-----------
Load the tables, enrich flights once, build the six chart datasets and
write them out for the front end.

Outputs (in out_dir):
- <chart>.parquet            tabular part of each chart
- choropleth_rings.json      outer rings per state
- charts_summary.json        scalars: fits, p-value, thresholds, extents, ...

Usage:
    python -m flight_charts.pipeline
    python -m flight_charts.pipeline --seed 42 --simulations 1000 --scheme 2
    python -m flight_charts.pipeline --data-dir ./data --out-dir ./outputs --jobs 6
"""

import argparse
import json
import os

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from . import config
from .charts import (
    choropleth_data, histogram_data, matrix_data, scatter_data,
    stacked_bar_data, streamgraph_data,
)
from .joiner import enrich
from .loaders import load_tables
from .palettes import ColorScheme

CHART_NAMES = ("choropleth", "stacked_bar", "scatter", "histogram", "matrix", "streamgraph")


def build_charts(tables: dict, seed=None, num_simulations: int = config.NUM_SIMULATIONS,
                 scheme: ColorScheme = ColorScheme.BLUES, n_jobs: int = 1) -> dict:
    """
    Build every chart dataset from the loaded tables.

    Flights are enriched once, before any builder runs; builders only read
    the enriched table, so they may run in parallel threads (n_jobs > 1).
    """
    airports = tables["airports"]
    flights = enrich(tables["flights"], airports)

    jobs = {
        "choropleth": (choropleth_data, (flights, tables["state_boundaries"]), {"scheme": scheme}),
        "stacked_bar": (stacked_bar_data, (flights,), {}),
        "scatter": (scatter_data, (flights,), {}),
        "histogram": (histogram_data, (flights,),
                      {"num_simulations": num_simulations, "random_state": seed}),
        "matrix": (matrix_data, (airports, flights), {}),
        "streamgraph": (streamgraph_data, (flights,), {}),
    }
    results = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(fn)(*args, **kwargs) for fn, args, kwargs in jobs.values()
    )
    return dict(zip(jobs, results))


def _to_builtin(obj):
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def summarize(charts: dict) -> dict:
    choropleth = charts["choropleth"]
    scatter = charts["scatter"]
    histogram = charts["histogram"]
    reg = scatter.regression
    test = histogram.test
    hist_bins = histogram.binning
    return {
        "choropleth": {
            "scheme": choropleth.scheme.name,
            "thresholds": choropleth.thresholds,
            "bin_edges": choropleth.binning.edges if choropleth.binning else None,
            "colors": choropleth.colors,
            "bounds": choropleth.bounds,
            "error": choropleth.error,
        },
        "stacked_bar": {"y_max": charts["stacked_bar"].y_max},
        "scatter": {
            "n_points": len(scatter.points),
            "x_extent": scatter.x_extent,
            "y_extent": scatter.y_extent,
            "slope": reg.slope if reg else None,
            "intercept": reg.intercept if reg else None,
            "r_squared": reg.r_squared if reg else None,
            "line": scatter.line,
            "fit_error": scatter.fit_error,
        },
        "histogram": {
            "study_airline": histogram.study_airline,
            "observed_statistic": test.observed_statistic if test else None,
            "p_value": test.p_value if test else None,
            "reject": test.reject if test else None,
            "alpha": test.alpha if test else None,
            "num_simulations": test.num_simulations if test else None,
            "thresholds": hist_bins.thresholds if hist_bins else [],
            "bin_counts": hist_bins.counts if hist_bins else [],
            "x_domain": histogram.x_domain,
            "error": histogram.error,
        },
        "matrix": {"state": charts["matrix"].state, "names": charts["matrix"].names},
        "streamgraph": {"states": charts["streamgraph"].states, "y_max": charts["streamgraph"].y_max},
    }


def export_charts(charts: dict, out_dir: str = config.OUT_DIR) -> dict:
    """
    Write every chart to out_dir; returns {name: path}.

    A histogram without a test result has no table, so no histogram.parquet
    is written for it; its error still lands in the summary.
    """
    os.makedirs(out_dir, exist_ok=True)
    histogram = charts["histogram"]

    frames = {
        "choropleth": charts["choropleth"].states.drop(columns=["rings"]),
        "stacked_bar": charts["stacked_bar"].counts.reset_index(),
        "scatter": charts["scatter"].points,
        # True / False / NA as text so the column has a single type
        "matrix": charts["matrix"].cells.astype({"value": str}),
        "streamgraph": charts["streamgraph"].counts.reset_index(),
    }
    if histogram.test is not None:
        null = histogram.test.null_distribution
        frames["histogram"] = pd.DataFrame({
            "statistic": null,
            "bin": [histogram.binning.index_of(v) for v in null.tolist()],
        })
    else:
        print(f"⚠️ Skipping histogram table: {histogram.error}")

    written = {}
    for name, frame in frames.items():
        path = os.path.join(out_dir, f"{name}.parquet")
        frame.to_parquet(path, index=False)
        written[name] = path
        print(f"💾 Saved {name} -> {path} (rows: {len(frame):,})")

    rings = dict(zip(charts["choropleth"].states["stusab"], charts["choropleth"].states["rings"]))
    written["choropleth_rings"] = os.path.join(out_dir, "choropleth_rings.json")
    with open(written["choropleth_rings"], "w") as f:
        json.dump(rings, f, default=_to_builtin)

    written["summary"] = os.path.join(out_dir, "charts_summary.json")
    with open(written["summary"], "w") as f:
        json.dump(summarize(charts), f, indent=2, default=_to_builtin)
    print(f"💾 Saved summary -> {written['summary']}")
    return written


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build the flight delay chart datasets.")
    parser.add_argument("--data-dir", default=config.DATA_DIR, help="Folder with the four input CSVs")
    parser.add_argument("--out-dir", default=config.OUT_DIR, help="Where chart files are written")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the permutation test")
    parser.add_argument("--simulations", type=int, default=config.NUM_SIMULATIONS,
                        help="Number of label permutations")
    parser.add_argument("--scheme", type=int, default=ColorScheme.BLUES.value,
                        choices=[s.value for s in ColorScheme], help="Choropleth color scheme id")
    parser.add_argument("--jobs", type=int, default=1, help="Threads for building charts")
    args = parser.parse_args(argv)

    tables = load_tables(args.data_dir)

    print("🚀 Building charts ...")
    charts = build_charts(
        tables,
        seed=args.seed,
        num_simulations=args.simulations,
        scheme=ColorScheme.from_id(args.scheme),
        n_jobs=args.jobs,
    )
    test = charts["histogram"].test
    if test is not None:
        print(f"🔢 {charts['histogram'].study_airline} delayed/cancelled rate: {test.observed_statistic:.4f} "
              f"(p={test.p_value:.3f}, reject={test.reject})")
    else:
        print(f"⚠️ No permutation test: {charts['histogram'].error}")
    if charts["choropleth"].error is not None:
        print(f"⚠️ Choropleth left uncolored: {charts['choropleth'].error}")
    if charts["scatter"].regression is not None:
        reg = charts["scatter"].regression
        print(f"📈 Arrival ~ departure delay: slope={reg.slope:.3f}, intercept={reg.intercept:.3f}")
    else:
        print(f"⚠️ No regression line: {charts['scatter'].fit_error}")

    export_charts(charts, args.out_dir)
    print("✅ Done.")


if __name__ == "__main__":
    main()
