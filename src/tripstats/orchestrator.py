# ========================
# src/tripstats/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Coordinates the trip analysis: load the monthly files, derive the analysis
columns, run every catalogue query and build the reports.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .ingestion import TripLoader
from .derivation import TripDeriver
from .transformation import TripAggregator
from .reporting import TripReporter
from .storage import ReportSaver
from .queries import QUERIES, TripQuery
from ..utils.performance_monitor import monitor_performance
from ..utils.config import Config

logger = logging.getLogger(__name__)


class TripAnalysisPipeline:
    """
    Runs the whole analysis as one batch. The derived table is built once
    and every query reads it independently.
    """

    def __init__(self,
                 input_files: Sequence[str],
                 output_dir: Optional[str] = None,
                 chunk_size: Optional[int] = None,
                 config: Optional[Config] = None,
                 queries: Optional[Sequence[TripQuery]] = None):
        """
        Initialize the pipeline.

        Args:
            input_files (list[str]): Monthly trip CSV files
            output_dir (str): Directory for exported reports; nothing is written when None
            chunk_size (int): Number of CSV rows read per chunk
            config (Config): Configuration object
            queries (list[TripQuery]): Queries to run, defaults to the full catalogue
        """
        self.config = config or Config()
        self.input_files = [str(path) for path in input_files]
        self.output_dir = output_dir
        self.chunk_size = chunk_size or self.config.CHUNK_SIZE
        self.queries = list(queries) if queries is not None else list(QUERIES)

        self.loader = TripLoader(chunk_size=self.chunk_size)
        self.deriver = TripDeriver(reference_year=self.config.REFERENCE_YEAR)
        self.aggregator = TripAggregator(
            min_group_size=self.config.MIN_GROUP_SIZE,
            drop_null_keys=self.config.DROP_NULL_KEYS
        )
        self.reporter = TripReporter()

        logger.info("TripAnalysisPipeline initialized:")
        logger.info(f"  Inputs: {', '.join(self.input_files)}")
        logger.info(f"  Output: {self.output_dir or '(console only)'}")
        logger.info(f"  Chunk size: {self.chunk_size}")

    def run(self) -> Dict[str, Any]:
        """
        Execute the analysis from start to finish.

        Returns:
            dict: Reports, row counts and run statistics

        Raises:
            FileNotFoundError: An input file is missing
            IngestionError: An input file does not match the trip schema
        """
        logger.info(f"Starting trip analysis over {len(self.input_files)} files...")

        with monitor_performance("Trip analysis") as monitor:
            trips = self.loader.load(self.input_files, monitor)
            monitor.add_checkpoint('load', {'rows': len(trips)})

            derived = self.deriver.derive_all(trips)
            monitor.add_checkpoint('derive', self.deriver.get_statistics())

            reports = self._run_queries(derived)
            monitor.add_checkpoint('aggregate', {'queries': len(reports)})

            results = {
                'pipeline_status': 'completed',
                'input_files': self.input_files,
                'row_counts': {
                    'loaded': len(trips),
                    'per_file': dict(self.loader.rows_per_file),
                    'round_trips_excluded': self.deriver.round_trips,
                    'without_age_bucket': self.deriver.records_unbucketed,
                },
                'derivation_stats': self.deriver.get_statistics(),
                'query_summaries': self.aggregator.get_aggregation_summary(),
                'reports': reports,
                'saved_files': {},
            }

            if self.output_dir:
                saver = ReportSaver(self.output_dir)
                results['saved_files'] = saver.save_reports(reports, self._summary(results))
                monitor.add_checkpoint('export', {'files': len(results['saved_files'])})

        results['performance'] = monitor.summary
        self._log_final_summary(results)
        return results

    def _run_queries(self, derived) -> List[Dict[str, Any]]:
        reports = []
        for query in self.queries:
            rows = self.aggregator.run_query(query, derived)
            reports.append(self.reporter.build_report(query, rows))
        return reports

    def render_reports(self, results: Dict[str, Any]) -> str:
        return self.reporter.render_all(results['reports'])

    @staticmethod
    def _summary(results: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'input_files': results['input_files'],
            'row_counts': results['row_counts'],
            'derivation_stats': results['derivation_stats'],
            'query_summaries': results['query_summaries'],
        }

    def _log_final_summary(self, results: Dict[str, Any]) -> None:
        row_counts = results['row_counts']

        logger.info("=" * 60)
        logger.info("TRIP ANALYSIS SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Input files: {len(results['input_files'])}")
        logger.info(f"Trips loaded: {row_counts['loaded']:,}")
        logger.info(f"Round trips excluded from statistics: {row_counts['round_trips_excluded']:,}")
        logger.info(f"Riders without an age bucket: {row_counts['without_age_bucket']:,}")
        logger.info(f"Reports built: {len(results['reports'])}")
        for name, file_path in results['saved_files'].items():
            logger.info(f"  - {name}: {file_path}")
        logger.info("=" * 60)

    def validate_input(self) -> bool:
        """
        Validate every input file exists and is readable.

        Returns:
            bool: True if all inputs are valid
        """
        if not self.input_files:
            logger.error("No input files given")
            return False

        for input_file in self.input_files:
            input_path = Path(input_file)
            if not input_path.exists():
                logger.error(f"Input file does not exist: {input_file}")
                return False

            if not input_path.is_file():
                logger.error(f"Input path is not a file: {input_file}")
                return False

            try:
                with open(input_path, 'r', encoding='utf-8') as f:
                    f.readline()
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Cannot read input file {input_file}: {e}")
                return False

        logger.info(f"Input validation passed for {len(self.input_files)} files")
        return True
