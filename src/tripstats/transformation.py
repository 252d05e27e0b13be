# ========================
# src/tripstats/transformation.py
# ========================

"""
Data Transformation Module

Grouped aggregation over the derived trip table: filter, group by one or
more key columns (optionally across several grouping sets) and summarise a
numeric measure per group.
"""

import logging
import statistics
from collections import OrderedDict
from itertools import combinations
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

SUPPORTED_STATS = ('count', 'mean', 'min', 'max', 'median')
DEFAULT_STATS = ('count', 'mean', 'min', 'max')


class _RolledUp:
    """Value of a key column that a grouping set summed over (SQL GROUPING() = 1)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'ROLLED_UP'


# Distinct from None, which is a real (missing) key value
ROLLED_UP = _RolledUp()


def is_station_change(row) -> bool:
    """True unless the trip started and ended at the same station."""
    return row.start_station_id != row.end_station_id


def filter_rows(rows: Iterable, predicate: Optional[Callable[[Any], bool]]) -> List:
    if predicate is None:
        return list(rows)
    return [row for row in rows if predicate(row)]


def rollup(keys: Sequence[str]) -> List[Tuple[str, ...]]:
    """Grouping sets for ROLLUP(keys): every prefix, longest first."""
    return [tuple(keys[:size]) for size in range(len(keys), -1, -1)]


def cube(keys: Sequence[str]) -> List[Tuple[str, ...]]:
    """Grouping sets for CUBE(keys): every subset, largest first."""
    sets = []
    for size in range(len(keys), -1, -1):
        sets.extend(combinations(keys, size))
    return sets


def group_rows(rows: Iterable, keys: Sequence[str]) -> "OrderedDict[Tuple, List]":
    """Partition rows by the values of the key columns, in first-seen order."""
    groups: "OrderedDict[Tuple, List]" = OrderedDict()
    for row in rows:
        group_key = tuple(getattr(row, key) for key in keys)
        groups.setdefault(group_key, []).append(row)
    return groups


def summarize(values: Sequence[float], stats: Sequence[str] = DEFAULT_STATS) -> Dict[str, Any]:
    """
    Compute the requested statistics for one group.

    Median interpolates between the two middle values when the group size
    is even (continuous 50th percentile).
    """
    summary: Dict[str, Any] = {}
    for stat in stats:
        if stat == 'count':
            summary['count'] = len(values)
        elif stat == 'mean':
            summary['mean'] = statistics.mean(values) if values else None
        elif stat == 'min':
            summary['min'] = min(values) if values else None
        elif stat == 'max':
            summary['max'] = max(values) if values else None
        elif stat == 'median':
            summary['median'] = statistics.median(values) if values else None
        else:
            raise ValueError(f"Unsupported statistic '{stat}', expected one of {SUPPORTED_STATS}")
    return summary


def _sort_key(group_key: Tuple) -> Tuple:
    # missing (None) values sort after concrete ones
    return tuple((value is None, value if value is not None else 0) for value in group_key)


def aggregate(rows: Iterable,
              keys: Sequence[str],
              measure: str,
              stats: Sequence[str] = DEFAULT_STATS,
              where: Optional[Callable[[Any], bool]] = is_station_change,
              grouping_sets: Optional[Sequence[Sequence[str]]] = None,
              min_count: int = 0,
              drop_null_keys: bool = True) -> List[Dict[str, Any]]:
    """
    Grouped aggregate over a table of rows.

    Args:
        rows: Derived trip rows
        keys: Grouping key columns
        measure: Numeric column to summarise
        stats: Statistics to compute per group
        where: Row predicate applied before grouping (round trips are
            excluded by default); None keeps every row
        grouping_sets: Subsets of ``keys`` to group by in turn; defaults to
            the single set ``keys``. Keys missing from a set are reported
            as ROLLED_UP. The empty set always yields a grand-total row,
            even over an empty table.
        min_count: Groups with fewer rows are dropped
        drop_null_keys: Drop rows whose value for any of ``keys`` is None

    Returns:
        list[dict]: One dict per group holding key values and statistics,
        ordered by grouping set and then key values.
    """
    keys = tuple(keys)
    unknown = [stat for stat in stats if stat not in SUPPORTED_STATS]
    if unknown:
        raise ValueError(f"Unsupported statistics {unknown}, expected any of {SUPPORTED_STATS}")

    selected = filter_rows(rows, where)

    if drop_null_keys:
        kept = [row for row in selected if all(getattr(row, key) is not None for key in keys)]
        dropped = len(selected) - len(kept)
        if dropped:
            logger.warning(f"Dropped {dropped:,} rows with no value for {', '.join(keys)}")
        selected = kept

    if grouping_sets is None:
        grouping_sets = [keys]

    results: List[Dict[str, Any]] = []
    for grouping_set in grouping_sets:
        grouping_set = tuple(grouping_set)
        stray = [key for key in grouping_set if key not in keys]
        if stray:
            raise ValueError(f"Grouping set {grouping_set} uses columns not in keys: {stray}")

        groups = group_rows(selected, grouping_set)
        if not grouping_set and not groups:
            # GROUP BY () over no rows still has one group
            groups[()] = []
        for group_key in sorted(groups, key=_sort_key):
            members = groups[group_key]
            if len(members) < min_count:
                continue
            key_values = dict(zip(grouping_set, group_key))
            result = {key: key_values.get(key, ROLLED_UP) for key in keys}
            result.update(summarize([getattr(row, measure) for row in members], stats))
            results.append(result)

    return results


class TripAggregator:
    """
    Runs catalogue queries against the derived trip table and keeps a
    summary of each run for the final report.
    """

    def __init__(self, min_group_size: int = 10, drop_null_keys: bool = True):
        """
        Args:
            min_group_size (int): Minimum group size for queries that rank by median
            drop_null_keys (bool): Drop rows with a missing grouping key
        """
        self.min_group_size = min_group_size
        self.drop_null_keys = drop_null_keys
        self.query_summaries: Dict[str, Dict[str, Any]] = {}
        logger.info(f"TripAggregator initialized with min_group_size={min_group_size}")

    def run_query(self, query, rows: Sequence) -> List[Dict[str, Any]]:
        """
        Aggregate ``rows`` as described by a TripQuery.

        Returns:
            list[dict]: Unordered group rows; ordering is left to the reporter
        """
        where = is_station_change if query.exclude_round_trips else None
        min_count = self.min_group_size if query.enforce_min_group_size else 0
        grouping_sets = query.grouping_sets(query.keys) if query.grouping_sets else None

        filtered = filter_rows(rows, where)
        without_key = sum(
            1 for row in filtered if any(getattr(row, key) is None for key in query.keys)
        )

        results = aggregate(
            filtered,
            keys=query.keys,
            measure=query.measure,
            stats=query.stats,
            where=None,
            grouping_sets=grouping_sets,
            min_count=min_count,
            drop_null_keys=self.drop_null_keys,
        )

        self.query_summaries[query.name] = {
            'rows_in': len(rows),
            'rows_filtered_out': len(rows) - len(filtered),
            'rows_without_key': without_key if self.drop_null_keys else 0,
            'groups_out': len(results),
            'min_count': min_count,
        }
        logger.info(
            f"Query '{query.name}': {len(filtered):,}/{len(rows):,} rows after filter, "
            f"{len(results)} groups"
        )
        return results

    def get_aggregation_summary(self) -> Dict[str, Dict[str, Any]]:
        return dict(self.query_summaries)
