"""
joiner.py
---------
Attach derived per-flight fields and prepare state boundary geometry.

- STATE: state of the origin airport ("Other" when the code is unknown)
- DELAYED_OR_CANCELLED: cancelled, or departure delay > 0

Every function returns a new DataFrame; the caller's table is never mutated.
"""

import numpy as np
import pandas as pd

from .config import OTHER_STATE, TERRITORY_REGION


def attach_state(flights: pd.DataFrame, airports: pd.DataFrame) -> pd.DataFrame:
    """Add a STATE column looked up from the origin airport code."""
    # first airport wins if a code shows up twice
    code_to_state = (
        airports.drop_duplicates("IATA_CODE", keep="first")
        .set_index("IATA_CODE")["STATE"]
    )
    out = flights.copy()
    out["STATE"] = out["ORIGIN_AIRPORT"].map(code_to_state).fillna(OTHER_STATE)
    return out


def attach_delay_flag(flights: pd.DataFrame) -> pd.DataFrame:
    """Add DELAYED_OR_CANCELLED; a missing (NaN) departure delay counts as not delayed."""
    out = flights.copy()
    cancelled = out["CANCELLED"].fillna(0).astype(bool)
    delayed = out["DEPARTURE_DELAY"].gt(0)   # NaN > 0 -> False
    out["DELAYED_OR_CANCELLED"] = cancelled | delayed
    return out


def enrich(flights: pd.DataFrame, airports: pd.DataFrame) -> pd.DataFrame:
    """Single enrichment pass shared by every chart builder."""
    return attach_delay_flag(attach_state(flights, airports))


def filter_by_state_set(flights: pd.DataFrame, valid_states) -> pd.DataFrame:
    return flights[flights["STATE"].isin(list(valid_states))]


def drop_territories(boundaries: pd.DataFrame) -> pd.DataFrame:
    return boundaries[boundaries["region"] != TERRITORY_REGION]


# ---------- geometry ----------
def polygon_rings(geometry: dict) -> list:
    """
    Outer rings of a GeoJSON Polygon / MultiPolygon.

    A Polygon gives one ring, a MultiPolygon one ring per member polygon.
    Holes are never returned.
    """
    kind = geometry.get("type")
    coordinates = geometry["coordinates"]
    if kind == "Polygon":
        return [coordinates[0]]
    if kind == "MultiPolygon":
        return [polygon[0] for polygon in coordinates]
    raise ValueError(f"Unsupported geometry type: {kind!r}")


def boundary_bounds(boundaries: pd.DataFrame) -> dict:
    """
    Longitude / latitude extent of all outer rings.

    Longitudes east of the prime meridian (> 0) are left out of lon_max so
    the Aleutians crossing the dateline do not stretch the map.
    """
    points = [
        point
        for geometry in boundaries["geometry"]
        for ring in polygon_rings(geometry)
        for point in ring
    ]
    if not points:
        raise ValueError("No boundary coordinates to take bounds from.")
    coords = np.asarray(points, dtype=float)[:, :2]
    lon, lat = coords[:, 0], coords[:, 1]
    western = lon[lon <= 0]
    return {
        "lon_min": float(lon.min()),
        "lon_max": float(western.max()) if western.size else float("-inf"),
        "lat_min": float(lat.min()),
        "lat_max": float(lat.max()),
    }
