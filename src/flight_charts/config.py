"""
config.py
---------
Paths and analysis defaults shared by the loaders, chart builders and CLI.
"""

import os

# ---------- Paths ----------
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.path.join(BASE_DIR, "data")
OUT_DIR = os.path.join(BASE_DIR, "outputs")

AIRLINES_CSV = "airlines.csv"
AIRPORTS_CSV = "airports.csv"
FLIGHTS_CSV = "shuffled_flights.csv"
STATE_BOUNDARIES_CSV = "us-state-boundaries.csv"

# ---------- Joins ----------
OTHER_STATE = "Other"     # origin airport not found in the airport table
TERRITORY_REGION = 9      # Guam, Virgin Islands, ...

# ---------- Charts ----------
CHOROPLETH_BINS = 4
HISTOGRAM_BINS = 8

STUDY_AIRLINE = "WN"      # Southwest
ALPHA = 0.01
NUM_SIMULATIONS = 100

MATRIX_STATE = "CA"
WEST_COAST = ("CA", "OR", "WA")
