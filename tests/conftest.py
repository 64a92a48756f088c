# tests/conftest.py

import numpy as np
import pandas as pd
import pytest


def square(x0, y0, size=1.0):
    return [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]


@pytest.fixture
def airports():
    return pd.DataFrame({
        "IATA_CODE": ["LAX", "SFO", "SAN", "PDX", "SEA", "JFK"],
        "AIRPORT": ["Los Angeles Intl", "San Francisco Intl", "San Diego Intl",
                    "Portland Intl", "Seattle-Tacoma Intl", "John F. Kennedy Intl"],
        "CITY": ["Los Angeles", "San Francisco", "San Diego", "Portland", "Seattle", "New York"],
        "STATE": ["CA", "CA", "CA", "OR", "WA", "NY"],
        "COUNTRY": ["USA"] * 6,
        "LATITUDE": [33.94, 37.62, 32.73, 45.59, 47.45, 40.64],
        "LONGITUDE": [-118.41, -122.37, -117.19, -122.60, -122.31, -73.78],
    })


@pytest.fixture
def flights():
    nan = np.nan
    return pd.DataFrame({
        "YEAR": [2015] * 10,
        "MONTH": [1, 1, 1, 2, 2, 3, 3, 3, 1, 2],
        "DAY": [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
        "AIRLINE": ["WN", "WN", "AA", "WN", "AA", "AS", "WN", "AA", "B6", "WN"],
        "ORIGIN_AIRPORT": ["LAX", "SFO", "LAX", "PDX", "SEA", "SEA", "SAN", "JFK", "JFK", "XXX"],
        "DESTINATION_AIRPORT": ["SFO", "LAX", "SAN", "SEA", "PDX", "LAX", "LAX", "LAX", "SFO", "LAX"],
        "DEPARTURE_DELAY": [10, -3, 0, nan, 25, -1, 5, 2, -7, 15],
        "ARRIVAL_DELAY": [12, -8, 4, nan, 30, -4, nan, 1, -12, 20],
        "CANCELLED": [0, 0, 0, 1, 0, 0, 0, 0, 0, 0],
    })


@pytest.fixture
def boundaries():
    return pd.DataFrame({
        "name": ["California", "Oregon", "Washington", "New York", "Guam"],
        "stusab": ["CA", "OR", "WA", "NY", "GU"],
        "region": [4, 4, 4, 1, 9],
        "geometry": [
            {"type": "Polygon", "coordinates": [square(-124, 32, 8), square(-130, 20, 1)]},
            {"type": "MultiPolygon", "coordinates": [[square(-124, 42, 5)], [square(-123, 46, 0.5)]]},
            {"type": "Polygon", "coordinates": [square(-124, 45.5, 7)]},
            {"type": "Polygon", "coordinates": [square(-79, 40.5, 7)]},
            {"type": "Polygon", "coordinates": [square(144.6, 13.2, 0.5)]},
        ],
    })
