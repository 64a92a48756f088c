"""
flight_charts
-------------
Data pipeline behind the flight delay charts: joins flights to airport
states, aggregates, bins and tests them, and hands each chart the table
it needs.
"""

__version__ = "0.1.0"
