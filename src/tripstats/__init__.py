# ========================
# src/tripstats/__init__.py
# ========================

"""
Trip Statistics Package

Batch analysis of Citi Bike trip exports:
- ingestion: Chunked CSV reading into typed trip records
- derivation: Age, duration, distance, gender and age bucket columns
- transformation: Grouped aggregation with grouping sets
- queries: The catalogue of analysis questions
- reporting: Ordering, top-N and text rendering
- storage: Optional report export
- orchestrator: Pipeline coordination
"""

from .records import TripRecord, DerivedTrip
from .ingestion import (
    CSVReader, TripLoader, load_trips,
    IngestionError, SchemaMismatchError, ColumnCountError, RowCoercionError,
)
from .derivation import TripDeriver, derive_trip
from .transformation import ROLLED_UP, TripAggregator, aggregate, cube, rollup
from .queries import QUERIES, TripQuery
from .reporting import TripReporter, rank, format_table
from .storage import ReportSaver
from .orchestrator import TripAnalysisPipeline

__all__ = [
    'TripRecord',
    'DerivedTrip',
    'CSVReader',
    'TripLoader',
    'load_trips',
    'IngestionError',
    'SchemaMismatchError',
    'ColumnCountError',
    'RowCoercionError',
    'TripDeriver',
    'derive_trip',
    'ROLLED_UP',
    'TripAggregator',
    'aggregate',
    'cube',
    'rollup',
    'QUERIES',
    'TripQuery',
    'TripReporter',
    'rank',
    'format_table',
    'ReportSaver',
    'TripAnalysisPipeline',
]

__version__ = "1.0.0"
