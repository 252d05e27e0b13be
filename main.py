#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Citi Bike Trip Statistics Analysis

Usage:
    python main.py [trips.csv ...]

Without arguments the configured monthly files are analysed; if they do not
exist yet, four months of synthetic trips are generated first.
"""

import sys
import logging
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from src.tripstats import TripAnalysisPipeline
from src.utils import Config, setup_logging, TripDataGenerator


def main(argv=None):
    """Main execution function."""
    argv = sys.argv[1:] if argv is None else argv
    config = Config()

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file=config.LOG_FILE,
        log_dir=config.LOG_DIR
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("CITI BIKE TRIP STATISTICS - MAIN EXECUTION")
    logger.info("=" * 60)

    try:
        config.ensure_directories()

        input_files = list(argv) or config.INPUT_FILES
        generation_stats = None

        # Step 1: Make sure there is something to analyse
        if not argv and not all(Path(path).exists() for path in input_files):
            logger.info("Step 1: Monthly files not found, generating sample trips...")
            generator = TripDataGenerator(seed=config.SAMPLE_SEED, reference_year=config.REFERENCE_YEAR)
            generation_stats = generator.generate_months(
                data_dir=config.DATA_DIR,
                months=config.SAMPLE_MONTHS,
                rows_per_month=config.SAMPLE_ROWS_PER_MONTH
            )
            input_files = generation_stats['files']
        else:
            logger.info("Step 1: Using existing trip files")

        # Step 2: Run the analysis
        logger.info("Step 2: Running trip analysis...")
        pipeline = TripAnalysisPipeline(
            input_files=input_files,
            output_dir=config.OUTPUT_DIR if config.EXPORT_REPORTS else None,
            chunk_size=config.CHUNK_SIZE,
            config=config
        )

        if not pipeline.validate_input():
            logger.error("Input validation failed. Exiting.")
            return 1

        results = pipeline.run()

        # Step 3: Show the reports
        print()
        print(pipeline.render_reports(results))
        _print_execution_summary(results, generation_stats)

        logger.info("Trip analysis completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Trip analysis failed: {e}", exc_info=True)
        return 1


def _print_execution_summary(results: dict, generation_stats=None) -> None:
    """Print final execution summary."""
    row_counts = results['row_counts']

    print("\n" + "=" * 70)
    print("TRIP ANALYSIS SUMMARY")
    print("=" * 70)

    if generation_stats:
        print("Sample data:")
        print(f"   - Trips generated: {generation_stats['total_rows']:,}")
        print(f"   - Round trips injected: {generation_stats['round_trips']:,}")
        print(f"   - Riders outside bucketed ages: {generation_stats['out_of_range_ages']:,}")

    print("Processing:")
    print(f"   - Trips loaded: {row_counts['loaded']:,}")
    print(f"   - Round trips excluded: {row_counts['round_trips_excluded']:,}")
    print(f"   - Riders without an age bucket: {row_counts['without_age_bucket']:,}")
    print(f"   - Processing time: {results['performance']['total_processing_time_seconds']:.2f}s")

    if results['saved_files']:
        print("Exported reports:")
        for name, file_path in results['saved_files'].items():
            print(f"   - {name}: {Path(file_path).name}")

    print("=" * 70)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
