# ========================
# src/tripstats/records.py
# ========================

"""
Trip Record Types

Column schema of the monthly Citi Bike trip exports and the immutable row
types the pipeline passes between stages.
"""

from datetime import datetime
from typing import NamedTuple, Optional

# CSV header -> record field, in file order
TRIP_COLUMNS = [
    ('tripduration', 'trip_duration'),
    ('starttime', 'start_time'),
    ('stoptime', 'stop_time'),
    ('start station id', 'start_station_id'),
    ('start station name', 'start_station_name'),
    ('start station latitude', 'start_station_latitude'),
    ('start station longitude', 'start_station_longitude'),
    ('end station id', 'end_station_id'),
    ('end station name', 'end_station_name'),
    ('end station latitude', 'end_station_latitude'),
    ('end station longitude', 'end_station_longitude'),
    ('bikeid', 'bike_id'),
    ('usertype', 'user_type'),
    ('birth year', 'birth_year'),
    ('gender', 'gender'),
]

CSV_HEADER = [header for header, _ in TRIP_COLUMNS]

USER_TYPES = ('Customer', 'Subscriber')

GENDER_LABELS = {
    1: 'Male',
    2: 'Female',
}
UNKNOWN_GENDER = 'Unknown'


class TripRecord(NamedTuple):
    """One row of a monthly trip export."""
    trip_duration: int
    start_time: datetime
    stop_time: datetime
    start_station_id: int
    start_station_name: str
    start_station_latitude: float
    start_station_longitude: float
    end_station_id: int
    end_station_name: str
    end_station_latitude: float
    end_station_longitude: float
    bike_id: int
    user_type: str
    birth_year: int
    gender: int


class DerivedTrip(NamedTuple):
    """A trip record extended with the computed analysis columns."""
    trip_duration: int
    start_time: datetime
    stop_time: datetime
    start_station_id: int
    start_station_name: str
    start_station_latitude: float
    start_station_longitude: float
    end_station_id: int
    end_station_name: str
    end_station_latitude: float
    end_station_longitude: float
    bike_id: int
    user_type: str
    birth_year: int
    gender: int
    age: int
    ride_duration_minutes: float
    distance_traveled_mi: float
    gender_str: str
    age_bucket: Optional[str]
