# ========================
# tests/test_ingestion.py
# ========================

import unittest
import tempfile
import os
import sys
import csv
from datetime import datetime

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.tripstats.ingestion import (
    CSVReader, TripLoader, load_trips, coerce_trip,
    IngestionError, SchemaMismatchError, ColumnCountError, RowCoercionError,
)
from src.tripstats.records import CSV_HEADER, TripRecord

TRIP_ROWS = [
    ['542', '2021-01-01 00:00:11.8450', '2021-01-01 00:09:14.1080', '3186', 'Grove St PATH',
     '40.71958612', '-74.04311746', '3211', 'Newark Ave', '40.72152515', '-74.04630454',
     '42406', 'Subscriber', '1994', '1'],
    ['1171', '2021-01-01 00:13:24.1950', '2021-01-01 00:32:56.1800', '3186', 'Grove St PATH',
     '40.71958612', '-74.04311746', '3186', 'Grove St PATH', '40.71958612', '-74.04311746',
     '42381', 'Customer', '1969', '0'],
    ['300', '2021-02-03 17:45:00.0000', '2021-02-03 17:50:00.0000', '3211', 'Newark Ave',
     '40.72152515', '-74.04630454', '3269', 'Brunswick & 6th', '40.72601173', '-74.05038893',
     '44900', 'Subscriber', '1985', '2'],
    ['905', '1/5/2021 08:15', '1/5/2021 08:30:05', '3269', 'Brunswick & 6th',
     '40.72601173', '-74.05038893', '3186', 'Grove St PATH', '40.71958612', '-74.04311746',
     '44901', 'Customer', '2001', '2'],
]


class TestCSVReader(unittest.TestCase):
    """Test the chunked CSV reader."""

    def _write_csv(self, rows):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False, newline='') as f:
            writer = csv.writer(f)
            writer.writerows(rows)
            path = f.name
        self.addCleanup(os.unlink, path)
        return path

    def test_csv_reader_chunked_processing(self):
        """Test that CSVReader properly chunks data."""
        path = self._write_csv([CSV_HEADER] + TRIP_ROWS)

        reader = CSVReader(path, expected_header=CSV_HEADER)
        chunks = list(reader.read_in_chunks(chunk_size=2))

        self.assertEqual(len(chunks), 2)
        self.assertEqual(len(chunks[0]), 2)
        self.assertEqual(len(chunks[1]), 2)
        self.assertEqual(reader.header, CSV_HEADER)
        self.assertEqual(chunks[0][0]['start station name'], 'Grove St PATH')

    def test_csv_reader_file_not_found(self):
        reader = CSVReader("non_existent_file.csv")

        with self.assertRaises(FileNotFoundError):
            list(reader.read_in_chunks(chunk_size=10))

    def test_csv_reader_empty_file(self):
        """Without an expected header an empty file simply yields nothing."""
        path = self._write_csv([])

        reader = CSVReader(path)
        self.assertEqual(list(reader.read_in_chunks(chunk_size=10)), [])

    def test_csv_reader_empty_file_with_expected_header(self):
        path = self._write_csv([])

        reader = CSVReader(path, expected_header=CSV_HEADER)
        with self.assertRaises(SchemaMismatchError):
            list(reader.read_in_chunks(chunk_size=10))

    def test_csv_reader_large_chunk_size(self):
        path = self._write_csv([CSV_HEADER] + TRIP_ROWS[:2])

        reader = CSVReader(path)
        chunks = list(reader.read_in_chunks(chunk_size=100))

        self.assertEqual(len(chunks), 1)
        self.assertEqual(len(chunks[0]), 2)

    def test_csv_reader_tolerates_padded_header_names(self):
        path = self._write_csv([[f" {name} " for name in CSV_HEADER]] + TRIP_ROWS[:1])

        reader = CSVReader(path, expected_header=CSV_HEADER)
        chunks = list(reader.read_in_chunks(chunk_size=10))

        self.assertEqual(chunks[0][0]['tripduration'], '542')

    def test_csv_reader_accepts_byte_order_mark(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False, newline='',
                                         encoding='utf-8-sig') as f:
            csv.writer(f).writerows([CSV_HEADER] + TRIP_ROWS[:1])
            path = f.name
        self.addCleanup(os.unlink, path)

        reader = CSVReader(path, expected_header=CSV_HEADER)
        chunks = list(reader.read_in_chunks(chunk_size=10))

        self.assertEqual(reader.header[0], 'tripduration')
        self.assertEqual(chunks[0][0]['tripduration'], '542')


class TestTripLoader(unittest.TestCase):
    """Test loading monthly trip files into typed records."""

    def _write_csv(self, rows):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False, newline='') as f:
            writer = csv.writer(f)
            writer.writerows(rows)
            path = f.name
        self.addCleanup(os.unlink, path)
        return path

    def test_loader_concatenates_files_in_order(self):
        january = self._write_csv([CSV_HEADER] + TRIP_ROWS[:2])
        february = self._write_csv([CSV_HEADER] + TRIP_ROWS[2:3])

        loader = TripLoader(chunk_size=1)
        trips = loader.load([january, february])

        self.assertIsInstance(trips, tuple)
        self.assertEqual(len(trips), 3)
        self.assertEqual([trip.trip_duration for trip in trips], [542, 1171, 300])
        self.assertEqual(loader.rows_per_file, {january: 2, february: 1})
        self.assertEqual(loader.rows_loaded, 3)

    def test_loader_coerces_column_types(self):
        path = self._write_csv([CSV_HEADER] + TRIP_ROWS[:1])

        trip = load_trips([path])[0]

        self.assertIsInstance(trip, TripRecord)
        self.assertEqual(trip.trip_duration, 542)
        self.assertEqual(trip.start_time, datetime(2021, 1, 1, 0, 0, 11, 845000))
        self.assertEqual(trip.start_station_id, 3186)
        self.assertAlmostEqual(trip.start_station_latitude, 40.71958612)
        self.assertEqual(trip.end_station_name, 'Newark Ave')
        self.assertEqual(trip.bike_id, 42406)
        self.assertEqual(trip.user_type, 'Subscriber')
        self.assertEqual(trip.birth_year, 1994)
        self.assertEqual(trip.gender, 1)

    def test_loader_accepts_slash_timestamps(self):
        path = self._write_csv([CSV_HEADER] + TRIP_ROWS[3:4])

        trip = load_trips([path])[0]

        self.assertEqual(trip.start_time, datetime(2021, 1, 5, 8, 15))
        self.assertEqual(trip.stop_time, datetime(2021, 1, 5, 8, 30, 5))

    def test_loader_keeps_duplicate_rows(self):
        path = self._write_csv([CSV_HEADER] + TRIP_ROWS[:1] + TRIP_ROWS[:1])

        self.assertEqual(len(load_trips([path])), 2)

    def test_loader_counts_file_listed_twice(self):
        path = self._write_csv([CSV_HEADER] + TRIP_ROWS[:2])

        loader = TripLoader()
        trips = loader.load([path, path])

        self.assertEqual(len(trips), 4)
        self.assertEqual(loader.rows_loaded, 4)
        self.assertEqual(loader.rows_per_file, {path: 4})

    def test_header_mismatch_is_fatal(self):
        header = list(CSV_HEADER)
        header[0] = 'duration'
        path = self._write_csv([header] + TRIP_ROWS[:1])

        with self.assertRaises(SchemaMismatchError) as ctx:
            load_trips([path])
        self.assertIn(path, str(ctx.exception))
        self.assertIn('tripduration', str(ctx.exception))

    def test_header_with_missing_column_is_fatal(self):
        path = self._write_csv([CSV_HEADER[:-1]] + [row[:-1] for row in TRIP_ROWS[:1]])

        with self.assertRaises(SchemaMismatchError):
            load_trips([path])

    def test_extra_value_in_row_is_fatal(self):
        path = self._write_csv([CSV_HEADER, TRIP_ROWS[0], TRIP_ROWS[1] + ['surplus']])

        with self.assertRaises(ColumnCountError) as ctx:
            load_trips([path])
        self.assertEqual(ctx.exception.line, 3)
        self.assertEqual(ctx.exception.file_path, path)

    def test_missing_value_in_row_is_fatal(self):
        path = self._write_csv([CSV_HEADER, TRIP_ROWS[0][:10]])

        with self.assertRaises(ColumnCountError) as ctx:
            load_trips([path])
        self.assertEqual(ctx.exception.line, 2)

    def test_bad_number_is_fatal(self):
        row = list(TRIP_ROWS[0])
        row[13] = 'unknown'
        path = self._write_csv([CSV_HEADER, row])

        with self.assertRaises(RowCoercionError) as ctx:
            load_trips([path])
        self.assertEqual(ctx.exception.column, 'birth year')
        self.assertEqual(ctx.exception.value, 'unknown')

    def test_unknown_user_type_is_fatal(self):
        row = list(TRIP_ROWS[0])
        row[12] = 'Member'
        path = self._write_csv([CSV_HEADER, row])

        with self.assertRaises(RowCoercionError) as ctx:
            load_trips([path])
        self.assertEqual(ctx.exception.column, 'usertype')

    def test_bad_timestamp_is_fatal(self):
        row = list(TRIP_ROWS[0])
        row[1] = 'yesterday'
        path = self._write_csv([CSV_HEADER, row])

        with self.assertRaises(RowCoercionError):
            load_trips([path])

    def test_missing_file_is_fatal(self):
        with self.assertRaises(FileNotFoundError):
            load_trips(["does_not_exist.csv"])

    def test_ingestion_errors_are_value_errors(self):
        self.assertTrue(issubclass(IngestionError, ValueError))
        for error in (SchemaMismatchError, ColumnCountError, RowCoercionError):
            self.assertTrue(issubclass(error, IngestionError))

    def test_coerce_trip_accepts_whole_float_ids(self):
        raw = dict(zip(CSV_HEADER, TRIP_ROWS[0]))
        raw['start station id'] = '3186.0'

        self.assertEqual(coerce_trip(raw).start_station_id, 3186)


if __name__ == '__main__':
    unittest.main()
