# ========================
# src/tripstats/ingestion.py
# ========================

"""
Data Ingestion Module

Reads the monthly trip CSV exports in chunks and coerces every row into a
typed, immutable TripRecord. Any schema or type problem aborts the load.
"""

import csv
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .records import CSV_HEADER, TRIP_COLUMNS, USER_TYPES, TripRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS = [
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
]


class IngestionError(ValueError):
    """Base class for fatal problems found while loading trip files."""

    def __init__(self, message: str, file_path: Optional[str] = None, line: Optional[int] = None):
        self.file_path = file_path
        self.line = line
        location = ""
        if file_path is not None:
            location = f"{file_path}:{line}: " if line is not None else f"{file_path}: "
        super().__init__(f"{location}{message}")


class SchemaMismatchError(IngestionError):
    """The header row does not match the trip export schema."""


class ColumnCountError(IngestionError):
    """A data row has more or fewer values than the header."""


class RowCoercionError(IngestionError):
    """A value could not be converted to its column type."""

    def __init__(self, column: str, value: Any, reason: str,
                 file_path: Optional[str] = None, line: Optional[int] = None):
        self.column = column
        self.value = value
        super().__init__(f"column '{column}' has invalid value {value!r} ({reason})", file_path, line)


class CSVReader:
    """
    A memory-efficient CSV reader that reads a file in chunks.
    When an expected header is given, the file's header is checked before
    any rows are yielded.
    """

    def __init__(self, file_path, expected_header: Optional[List[str]] = None):
        """
        Initialize the CSV reader.

        Args:
            file_path (str): Path to the CSV file to read
            expected_header (list[str]): Column names the file must carry, in order
        """
        self.file_path = file_path
        self.expected_header = expected_header
        self.header = []
        logger.debug(f"Initialized CSVReader for file: {file_path}")

    def read_in_chunks(self, chunk_size):
        """
        A generator that yields a list of dictionaries for each chunk of data.

        Args:
            chunk_size (int): The number of rows to yield per chunk.

        Yields:
            list[dict]: A list of dictionaries representing a chunk of rows.
        """
        try:
            # utf-8-sig drops a leading byte-order mark from the header
            with open(self.file_path, 'r', newline='', encoding='utf-8-sig') as f:
                reader = csv.DictReader(f)
                self.header = reader.fieldnames
                self._check_header()

                chunk = []
                row_count = 0

                for row in reader:
                    chunk.append(row)
                    row_count += 1

                    if len(chunk) == chunk_size:
                        logger.debug(f"Yielding chunk with {len(chunk)} rows")
                        yield chunk
                        chunk = []

                if chunk:
                    logger.debug(f"Yielding final chunk with {len(chunk)} rows")
                    yield chunk

                logger.info(f"Read {row_count} rows from {self.file_path}")

        except FileNotFoundError:
            logger.error(f"File '{self.file_path}' was not found")
            raise
        except csv.Error as e:
            logger.error(f"Malformed CSV in '{self.file_path}': {e}")
            raise

    def _check_header(self) -> None:
        if self.expected_header is None:
            return
        if not self.header:
            raise SchemaMismatchError("file has no header row", str(self.file_path))

        actual = [name.strip() for name in self.header]
        if actual != self.expected_header:
            missing = [name for name in self.expected_header if name not in actual]
            unexpected = [name for name in actual if name not in self.expected_header]
            raise SchemaMismatchError(
                f"header does not match trip schema "
                f"(missing={missing}, unexpected={unexpected}, got {len(actual)} columns)",
                str(self.file_path)
            )
        # Tolerate padded header names by normalising them for DictReader lookups
        self.header[:] = actual


def _parse_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        number = float(value)
        if not number.is_integer():
            raise ValueError("not a whole number")
        return int(number)


def _parse_timestamp(value: str) -> datetime:
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError("unrecognised timestamp format")


def _parse_user_type(value: str) -> str:
    if value not in USER_TYPES:
        raise ValueError(f"expected one of {', '.join(USER_TYPES)}")
    return value


def _parse_text(value: str) -> str:
    return value


COLUMN_PARSERS: Dict[str, Callable[[str], Any]] = {
    'trip_duration': _parse_int,
    'start_time': _parse_timestamp,
    'stop_time': _parse_timestamp,
    'start_station_id': _parse_int,
    'start_station_name': _parse_text,
    'start_station_latitude': float,
    'start_station_longitude': float,
    'end_station_id': _parse_int,
    'end_station_name': _parse_text,
    'end_station_latitude': float,
    'end_station_longitude': float,
    'bike_id': _parse_int,
    'user_type': _parse_user_type,
    'birth_year': _parse_int,
    'gender': _parse_int,
}


def coerce_trip(raw: Dict[Optional[str], Any],
                file_path: Optional[str] = None,
                line: Optional[int] = None) -> TripRecord:
    """
    Convert one raw CSV row into a TripRecord.

    Args:
        raw (dict): Row as produced by csv.DictReader
        file_path (str): Source file, used in error messages
        line (int): Line number of the row in its file

    Returns:
        TripRecord: The typed record

    Raises:
        ColumnCountError: The row has extra or missing values
        RowCoercionError: A value does not fit its column type
    """
    if None in raw:
        extra = len(raw[None])
        raise ColumnCountError(
            f"expected {len(CSV_HEADER)} values, got {len(CSV_HEADER) + extra}", file_path, line
        )
    missing = [header for header in CSV_HEADER if raw.get(header) is None]
    if missing:
        raise ColumnCountError(
            f"expected {len(CSV_HEADER)} values, got {len(CSV_HEADER) - len(missing)}", file_path, line
        )

    values = {}
    for header, field in TRIP_COLUMNS:
        raw_value = raw[header].strip()
        try:
            values[field] = COLUMN_PARSERS[field](raw_value)
        except ValueError as e:
            raise RowCoercionError(header, raw_value, str(e), file_path, line) from e

    return TripRecord(**values)


class TripLoader:
    """
    Loads one or more monthly trip files into a single immutable table.
    Rows are concatenated in file order with no deduplication.
    """

    def __init__(self, chunk_size: int = 10000):
        """
        Args:
            chunk_size (int): Number of CSV rows read per chunk
        """
        self.chunk_size = chunk_size
        self.rows_per_file: Dict[str, int] = {}

    @property
    def rows_loaded(self) -> int:
        return sum(self.rows_per_file.values())

    def load(self, file_paths: Iterable, monitor=None) -> Tuple[TripRecord, ...]:
        """
        Load every file and concatenate the rows.

        Args:
            file_paths (iterable): CSV files, one per month
            monitor (PerformanceMonitor): Optional progress tracker

        Returns:
            tuple[TripRecord]: The combined trip table
        """
        table: List[TripRecord] = []
        for file_path in file_paths:
            table.extend(self.load_file(file_path, monitor))

        logger.info(f"Loaded {len(table):,} trips from {len(self.rows_per_file)} files")
        return tuple(table)

    def load_file(self, file_path, monitor=None) -> List[TripRecord]:
        """Load a single monthly file."""
        logger.info(f"Loading trips from {file_path}")
        reader = CSVReader(file_path, expected_header=CSV_HEADER)
        records: List[TripRecord] = []
        row_number = 0

        try:
            for chunk in reader.read_in_chunks(self.chunk_size):
                for raw in chunk:
                    row_number += 1
                    # header occupies line 1
                    records.append(coerce_trip(raw, str(file_path), row_number + 1))
                if monitor is not None:
                    monitor.update_progress(len(chunk))
        except IngestionError as e:
            logger.error(f"Ingestion failed: {e}")
            raise

        # the same file may be listed more than once
        key = str(file_path)
        self.rows_per_file[key] = self.rows_per_file.get(key, 0) + len(records)
        return records


def load_trips(file_paths: Iterable, chunk_size: int = 10000) -> Tuple[TripRecord, ...]:
    """Convenience wrapper around TripLoader.load()."""
    return TripLoader(chunk_size=chunk_size).load(file_paths)
