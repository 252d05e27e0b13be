# ========================
# src/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Writes synthetic monthly trip exports in the Citi Bike CSV layout, for demo
runs and tests when the real monthly files are not at hand.
"""

import csv
import calendar
import random
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..tripstats.derivation import distance_traveled_miles
from ..tripstats.records import CSV_HEADER

logger = logging.getLogger(__name__)

# (id, name, latitude, longitude)
STATIONS = [
    (72, "W 52 St & 11 Ave", 40.76727216, -73.99392888),
    (79, "Franklin St & W Broadway", 40.71911552, -74.00666661),
    (82, "St James Pl & Pearl St", 40.71117416, -74.00016545),
    (83, "Atlantic Ave & Fort Greene Pl", 40.68382604, -73.97632328),
    (116, "W 17 St & 8 Ave", 40.74177603, -74.00149746),
    (119, "Park Ave & St Edwards St", 40.69608941, -73.97803415),
    (127, "Barrow St & Hudson St", 40.73172428, -74.00674436),
    (128, "MacDougal St & Prince St", 40.72710258, -74.00297088),
    (143, "Clinton St & Joralemon St", 40.69239502, -73.99337909),
    (144, "Nassau St & Navy St", 40.69839895, -73.98068914),
    (146, "Hudson St & Reade St", 40.71625008, -74.00910590),
    (150, "E 2 St & Avenue C", 40.72087360, -73.98085795),
]


class TripDataGenerator:
    """
    Generates trip datasets with a controlled share of round trips and of
    riders outside the bucketed age range.
    """

    def __init__(self, seed: Optional[int] = None, reference_year: int = 2021):
        """
        Args:
            seed (int): Random seed for reproducible data generation
            reference_year (int): Year rider ages are measured against
        """
        self._random = random.Random(seed)
        self.reference_year = reference_year
        logger.info(f"TripDataGenerator initialized with seed: {seed}")

    def generate_months(self,
                        data_dir: str,
                        months: Sequence[str],
                        rows_per_month: int,
                        round_trip_rate: float = 0.05,
                        out_of_range_age_rate: float = 0.03) -> Dict[str, Any]:
        """
        Write one file per month, named like the public exports.

        Args:
            data_dir (str): Output directory
            months (list[str]): Months as 'YYYY-MM'
            rows_per_month (int): Trips per file

        Returns:
            dict: Generation statistics including the written file paths
        """
        totals = {'files': [], 'total_rows': 0, 'round_trips': 0, 'out_of_range_ages': 0}

        for month in months:
            year, month_number = (int(part) for part in month.split('-'))
            file_path = Path(data_dir) / f"{year}{month_number:02d}-citibike-tripdata.csv"
            stats = self.generate_month(
                file_path, year, month_number, rows_per_month,
                round_trip_rate=round_trip_rate,
                out_of_range_age_rate=out_of_range_age_rate,
            )
            totals['files'].append(str(file_path))
            for key in ('total_rows', 'round_trips', 'out_of_range_ages'):
                totals[key] += stats[key]

        return totals

    def generate_month(self,
                       file_path,
                       year: int,
                       month: int,
                       num_rows: int,
                       round_trip_rate: float = 0.05,
                       out_of_range_age_rate: float = 0.03) -> Dict[str, Any]:
        """
        Generate a single monthly export.

        Args:
            file_path (str): Output CSV file path
            year (int): Year of the trips
            month (int): Month of the trips
            num_rows (int): Number of trips to generate
            round_trip_rate (float): Fraction of trips returning to their start station
            out_of_range_age_rate (float): Fraction of riders younger than 10 or 80 and over

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} trips for {year}-{month:02d}...")

        stats = {
            'file_path': str(file_path),
            'total_rows': num_rows,
            'round_trips': 0,
            'out_of_range_ages': 0,
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)

            for _ in range(num_rows):
                writer.writerow(
                    self._generate_single_trip(year, month, round_trip_rate, out_of_range_age_rate, stats)
                )

        logger.info(
            f"Dataset generated: {file_path} "
            f"({stats['round_trips']} round trips, {stats['out_of_range_ages']} unbucketed ages)"
        )
        return stats

    def _generate_single_trip(self,
                              year: int,
                              month: int,
                              round_trip_rate: float,
                              out_of_range_age_rate: float,
                              stats: Dict[str, Any]) -> List[Any]:
        rng = self._random

        start = rng.choice(STATIONS)
        if rng.random() < round_trip_rate:
            end = start
            stats['round_trips'] += 1
            minutes = rng.uniform(2, 90)
        else:
            end = rng.choice([station for station in STATIONS if station[0] != start[0]])
            miles = distance_traveled_miles(start[2], start[3], end[2], end[3])
            # roughly 7.5 mph plus time spent docking and stopping
            minutes = miles / rng.uniform(5.5, 9.5) * 60 + rng.uniform(1, 8)

        days_in_month = calendar.monthrange(year, month)[1]
        start_time = datetime(year, month, 1) + timedelta(
            seconds=rng.randint(0, days_in_month * 86400 - 1),
            microseconds=rng.randint(0, 9999) * 100,
        )
        duration = max(61, int(minutes * 60))
        stop_time = start_time + timedelta(seconds=duration, microseconds=rng.randint(0, 9999) * 100)

        user_type = 'Subscriber' if rng.random() < 0.8 else 'Customer'
        birth_year, gender = self._rider(user_type, out_of_range_age_rate, stats)

        return [
            duration,
            self._format_timestamp(start_time),
            self._format_timestamp(stop_time),
            start[0], start[1], start[2], start[3],
            end[0], end[1], end[2], end[3],
            rng.randint(14529, 50000),
            user_type,
            birth_year,
            gender,
        ]

    def _rider(self, user_type: str, out_of_range_age_rate: float, stats: Dict[str, Any]):
        rng = self._random

        if rng.random() < out_of_range_age_rate:
            stats['out_of_range_ages'] += 1
            age = rng.choice([rng.randint(80, 95), rng.randint(5, 9)])
            return self.reference_year - age, rng.choice([1, 2])

        # casual riders often leave the default birth year and no gender
        if user_type == 'Customer' and rng.random() < 0.4:
            return 1969, 0

        age = int(rng.triangular(16, 79, 33))
        gender = rng.choices([1, 2, 0], weights=[0.62, 0.30, 0.08])[0]
        return self.reference_year - age, gender

    @staticmethod
    def _format_timestamp(value: datetime) -> str:
        # exports carry four fractional digits, e.g. 2021-01-01 00:00:11.8450
        return value.strftime("%Y-%m-%d %H:%M:%S.%f")[:-2]
