# ========================
# src/tripstats/derivation.py
# ========================

"""
Derived Column Module

Computes the analysis columns (age, ride duration in minutes, distance
traveled, gender label, age bucket) for every trip record.
"""

import math
import logging
from typing import Dict, Iterable, Optional, Tuple

from .records import GENDER_LABELS, UNKNOWN_GENDER, DerivedTrip, TripRecord

logger = logging.getLogger(__name__)

REFERENCE_YEAR = 2021

MILES_PER_DEGREE = 69.1
DEGREES_PER_RADIAN = 57.3

AGE_BUCKET_MIN = 10
AGE_BUCKET_MAX = 80
AGE_BUCKET_WIDTH = 10


def compute_age(birth_year: int, reference_year: int = REFERENCE_YEAR) -> int:
    return abs(birth_year - reference_year)


def duration_minutes(duration_seconds: float) -> float:
    return duration_seconds / 60


def distance_traveled_miles(start_lat: float, start_lon: float,
                            end_lat: float, end_lon: float) -> float:
    """
    Flat-earth distance in miles between two coordinates.

    Latitude degrees are scaled by 69.1 miles; longitude degrees are
    additionally shrunk by the cosine of the start latitude. Only accurate
    over the few miles a bike trip covers.
    """
    dy = MILES_PER_DEGREE * (start_lat - end_lat)
    dx = MILES_PER_DEGREE * (end_lon - start_lon) * math.cos(start_lat / DEGREES_PER_RADIAN)
    return math.sqrt(dy ** 2 + dx ** 2)


def gender_label(code: int) -> str:
    return GENDER_LABELS.get(code, UNKNOWN_GENDER)


def age_bucket(age: int) -> Optional[str]:
    """
    Half-open decade label for an age, e.g. 27 -> "[20-30)".
    Ages outside [10, 80) have no bucket.
    """
    if age < AGE_BUCKET_MIN or age >= AGE_BUCKET_MAX:
        return None
    lower = age // AGE_BUCKET_WIDTH * AGE_BUCKET_WIDTH
    return f"[{lower}-{lower + AGE_BUCKET_WIDTH})"


def age_bucket_labels() -> Tuple[str, ...]:
    """All bucket labels in ascending order."""
    return tuple(
        age_bucket(lower)
        for lower in range(AGE_BUCKET_MIN, AGE_BUCKET_MAX, AGE_BUCKET_WIDTH)
    )


def derive_trip(trip: TripRecord, reference_year: int = REFERENCE_YEAR) -> DerivedTrip:
    """Extend a trip record with its computed columns."""
    age = compute_age(trip.birth_year, reference_year)
    return DerivedTrip(
        *trip,
        age=age,
        ride_duration_minutes=duration_minutes(trip.trip_duration),
        distance_traveled_mi=distance_traveled_miles(
            trip.start_station_latitude, trip.start_station_longitude,
            trip.end_station_latitude, trip.end_station_longitude,
        ),
        gender_str=gender_label(trip.gender),
        age_bucket=age_bucket(age),
    )


class TripDeriver:
    """
    Applies derive_trip() to a whole table and counts what it saw along the
    way, so the run summary can report how many riders fall outside the
    bucketed age range.
    """

    def __init__(self, reference_year: int = REFERENCE_YEAR):
        self.reference_year = reference_year
        self.records_processed = 0
        self.records_unbucketed = 0
        self.round_trips = 0
        logger.info(f"TripDeriver initialized with reference year {reference_year}")

    def derive_all(self, trips: Iterable[TripRecord]) -> Tuple[DerivedTrip, ...]:
        derived = []
        for trip in trips:
            row = derive_trip(trip, self.reference_year)
            self.records_processed += 1
            if row.age_bucket is None:
                self.records_unbucketed += 1
            if row.start_station_id == row.end_station_id:
                self.round_trips += 1
            derived.append(row)

        if self.records_unbucketed:
            logger.warning(
                f"{self.records_unbucketed:,} riders have an age outside "
                f"[{AGE_BUCKET_MIN}, {AGE_BUCKET_MAX}) and no age bucket"
            )
        logger.info(f"Derived columns for {self.records_processed:,} trips")
        return tuple(derived)

    def get_statistics(self) -> Dict[str, int]:
        return {
            'records_processed': self.records_processed,
            'records_unbucketed': self.records_unbucketed,
            'round_trips': self.round_trips,
            'reference_year': self.reference_year,
        }
