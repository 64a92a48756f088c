"""
loaders.py
----------
Read the four input tables and coerce their columns.

Inputs (in data_dir):
- airlines.csv               IATA_CODE, AIRLINE
- airports.csv               IATA_CODE, AIRPORT, CITY, STATE, COUNTRY, LATITUDE, LONGITUDE
- shuffled_flights.csv       YEAR, MONTH, DAY, AIRLINE, ORIGIN_AIRPORT, DESTINATION_AIRPORT,
                             DEPARTURE_DELAY, ARRIVAL_DELAY, CANCELLED (+ unused columns)
- us-state-boundaries.csv    ';'-separated; name, St Asgeojson, stusab, region

The four files are read in parallel threads and load_tables only returns
once all of them are in memory. Any failure aborts the whole load.
"""

import json
import os

import pandas as pd
from joblib import Parallel, delayed

from . import config

FLIGHT_COLS = [
    "YEAR", "MONTH", "DAY", "AIRLINE", "ORIGIN_AIRPORT", "DESTINATION_AIRPORT",
    "DEPARTURE_DELAY", "ARRIVAL_DELAY", "CANCELLED",
]


def read_airlines(path: str) -> pd.DataFrame:
    return pd.read_csv(path, dtype=str)


def read_airports(path: str) -> pd.DataFrame:
    df = pd.read_csv(path, dtype={"IATA_CODE": str, "STATE": str})
    for col in ["LATITUDE", "LONGITUDE"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def read_flights(path: str) -> pd.DataFrame:
    # origin/destination codes are numeric for part of the year in the raw data
    df = pd.read_csv(
        path,
        usecols=FLIGHT_COLS,
        dtype={"AIRLINE": str, "ORIGIN_AIRPORT": str, "DESTINATION_AIRPORT": str},
        low_memory=False,
    )
    for col in ["YEAR", "MONTH", "DAY", "CANCELLED"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0).astype("int16")
    # missing delays stay NaN
    for col in ["DEPARTURE_DELAY", "ARRIVAL_DELAY"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float32")
    return df


def read_state_boundaries(path: str) -> pd.DataFrame:
    df = pd.read_csv(path, sep=";", dtype={"name": str, "stusab": str})
    df = df.rename(columns={"St Asgeojson": "geometry"})
    df["geometry"] = df["geometry"].map(json.loads)
    df["region"] = pd.to_numeric(df["region"], errors="coerce").fillna(0).astype(int)
    return df[["name", "stusab", "region", "geometry"]]


READERS = {
    "airlines": (config.AIRLINES_CSV, read_airlines),
    "airports": (config.AIRPORTS_CSV, read_airports),
    "flights": (config.FLIGHTS_CSV, read_flights),
    "state_boundaries": (config.STATE_BOUNDARIES_CSV, read_state_boundaries),
}


def load_tables(data_dir: str = config.DATA_DIR, n_jobs: int = 4) -> dict:
    """Load all four tables; returns {name: DataFrame}."""
    paths = {name: os.path.join(data_dir, fname) for name, (fname, _) in READERS.items()}
    missing = [p for p in paths.values() if not os.path.exists(p)]
    if missing:
        raise FileNotFoundError("Input table(s) not found: " + ", ".join(missing))

    print(f"📂 Loading {len(paths)} tables from {data_dir} ...")
    names = list(READERS)
    frames = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(READERS[name][1])(paths[name]) for name in names
    )
    tables = dict(zip(names, frames))
    for name, df in tables.items():
        print(f"✅ {name}: {len(df):,} rows")
    return tables
