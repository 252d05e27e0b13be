# ========================
# src/tripstats/queries.py
# ========================

"""
Query Catalogue

The analysis questions asked of the trip table, each described as a
TripQuery: which columns to group by, which measure to summarise, and how
the reporter should order and truncate the result.
"""

from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from .transformation import SUPPORTED_STATS as ALL_STATS, cube, rollup


class TripQuery(NamedTuple):
    name: str
    title: str
    keys: Tuple[str, ...]
    measure: str
    stats: Tuple[str, ...]
    order_by: Optional[str] = None
    descending: bool = True
    top_n: Optional[int] = None
    enforce_min_group_size: bool = False
    grouping_sets: Optional[Callable[[Sequence[str]], List[Tuple[str, ...]]]] = None
    exclude_round_trips: bool = True


QUERIES = [
    TripQuery(
        name='longest_avg_duration_by_age',
        title='Age with the longest average ride (minutes)',
        keys=('age',),
        measure='ride_duration_minutes',
        stats=('count', 'mean'),
        order_by='mean',
        top_n=1,
    ),
    TripQuery(
        name='highest_median_duration_by_age',
        title='Ages with the highest median ride (minutes, groups of 10+ rides)',
        keys=('age',),
        measure='ride_duration_minutes',
        stats=('count', 'median'),
        order_by='median',
        top_n=2,
        enforce_min_group_size=True,
    ),
    TripQuery(
        name='duration_by_age_bucket',
        title='Ride duration by age bucket (minutes)',
        keys=('age_bucket',),
        measure='ride_duration_minutes',
        stats=ALL_STATS,
    ),
    TripQuery(
        name='distance_by_gender',
        title='Distance traveled by gender (miles)',
        keys=('gender_str',),
        measure='distance_traveled_mi',
        stats=('count', 'mean', 'min', 'max'),
        order_by='mean',
    ),
    TripQuery(
        name='longest_avg_distance_by_age',
        title='Age with the longest average distance (miles)',
        keys=('age',),
        measure='distance_traveled_mi',
        stats=('count', 'mean'),
        order_by='mean',
        top_n=1,
    ),
    TripQuery(
        name='distance_by_age_bucket_gender',
        title='Distance traveled by age bucket and gender, with totals (miles)',
        keys=('age_bucket', 'gender_str'),
        measure='distance_traveled_mi',
        stats=('count', 'mean', 'min', 'max'),
        grouping_sets=cube,
    ),
    TripQuery(
        name='duration_by_age_bucket_user_type',
        title='Ride duration by age bucket and user type, with totals (minutes)',
        keys=('age_bucket', 'user_type'),
        measure='ride_duration_minutes',
        stats=ALL_STATS,
        grouping_sets=rollup,
    ),
    TripQuery(
        name='highest_median_duration_by_user_type',
        title='Median ride by user type (minutes, groups of 10+ rides)',
        keys=('user_type',),
        measure='ride_duration_minutes',
        stats=('count', 'median'),
        order_by='median',
        enforce_min_group_size=True,
    ),
]


def get_query(name: str) -> TripQuery:
    for query in QUERIES:
        if query.name == name:
            return query
    raise KeyError(f"Unknown query '{name}'")
