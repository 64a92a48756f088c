# tests/test_loaders.py

import csv
import json

import numpy as np
import pytest

from flight_charts import config
from flight_charts.loaders import load_tables, read_flights, read_state_boundaries

FLIGHTS_CSV = """YEAR,MONTH,DAY,DAY_OF_WEEK,AIRLINE,FLIGHT_NUMBER,ORIGIN_AIRPORT,DESTINATION_AIRPORT,DEPARTURE_DELAY,ARRIVAL_DELAY,CANCELLED
2015,1,1,4,WN,100,LAX,SFO,10,12,0
2015,1,2,5,AA,200,SFO,LAX,,,1
2015,10,3,6,DL,300,10397,LAX,-4,-9,0
"""

AIRPORTS_CSV = """IATA_CODE,AIRPORT,CITY,STATE,COUNTRY,LATITUDE,LONGITUDE
LAX,Los Angeles International Airport,Los Angeles,CA,USA,33.94254,-118.40807
SFO,San Francisco International Airport,San Francisco,CA,USA,37.619,-122.37484
"""

AIRLINES_CSV = """IATA_CODE,AIRLINE
WN,Southwest Airlines Co.
AA,American Airlines Inc.
"""


def write_boundaries(path):
    ca = {"type": "Polygon", "coordinates": [[[-124, 32], [-114, 32], [-114, 42], [-124, 32]]]}
    gu = {"type": "Polygon", "coordinates": [[[144.6, 13.2], [145.0, 13.2], [145.0, 13.7], [144.6, 13.2]]]}
    with open(path, "w", newline="") as f:
        writer = csv.writer(f, delimiter=";")
        writer.writerow(["name", "St Asgeojson", "stusab", "region"])
        writer.writerow(["California", json.dumps(ca), "CA", 4])
        writer.writerow(["Guam", json.dumps(gu), "GU", 9])


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / config.FLIGHTS_CSV).write_text(FLIGHTS_CSV)
    (tmp_path / config.AIRPORTS_CSV).write_text(AIRPORTS_CSV)
    (tmp_path / config.AIRLINES_CSV).write_text(AIRLINES_CSV)
    write_boundaries(tmp_path / config.STATE_BOUNDARIES_CSV)
    return tmp_path


def test_read_flights_keeps_missing_delays(data_dir):
    flights = read_flights(str(data_dir / config.FLIGHTS_CSV))
    assert list(flights.columns) == [
        "YEAR", "MONTH", "DAY", "AIRLINE", "ORIGIN_AIRPORT", "DESTINATION_AIRPORT",
        "DEPARTURE_DELAY", "ARRIVAL_DELAY", "CANCELLED",
    ]
    assert np.isnan(flights.loc[1, "DEPARTURE_DELAY"])
    assert flights["CANCELLED"].tolist() == [0, 1, 0]
    # numeric airport ids stay text
    assert flights.loc[2, "ORIGIN_AIRPORT"] == "10397"


def test_read_state_boundaries_decodes_geometry(data_dir):
    boundaries = read_state_boundaries(str(data_dir / config.STATE_BOUNDARIES_CSV))
    assert boundaries["stusab"].tolist() == ["CA", "GU"]
    assert boundaries["region"].tolist() == [4, 9]
    assert boundaries.loc[0, "geometry"]["type"] == "Polygon"


def test_load_tables_returns_all_four(data_dir):
    tables = load_tables(str(data_dir), n_jobs=2)
    assert set(tables) == {"airlines", "airports", "flights", "state_boundaries"}
    assert len(tables["flights"]) == 3
    assert tables["airports"]["LATITUDE"].dtype == float


def test_missing_table_aborts(data_dir):
    (data_dir / config.AIRPORTS_CSV).unlink()
    with pytest.raises(FileNotFoundError):
        load_tables(str(data_dir))
