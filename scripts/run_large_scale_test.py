#!/usr/bin/env python3
# ========================
# scripts/run_large_scale_test.py
# ========================

"""
Run the trip analysis over a large synthetic dataset (four months of
generated trips) to check throughput and memory use.

Usage:
    python scripts/run_large_scale_test.py [rows_per_month]
"""

import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.tripstats.orchestrator import TripAnalysisPipeline
from src.utils.config import Config
from src.utils.data_generator import TripDataGenerator
from src.utils.logging_setup import setup_logging


def main():
    """Run a large-scale test of the trip analysis."""
    if len(sys.argv) > 1:
        try:
            rows_per_month = int(sys.argv[1])
        except ValueError:
            print("Usage: python run_large_scale_test.py [rows_per_month]")
            print("Example: python run_large_scale_test.py 250000")
            sys.exit(1)
    else:
        rows_per_month = 250_000

    config = Config({'data_dir': 'data/large', 'output_dir': 'data/large/reports'})
    setup_logging(log_level=config.LOG_LEVEL)

    print("=" * 60)
    print("LARGE SCALE TRIP ANALYSIS TEST")
    print("=" * 60)
    print(f"Trips per month: {rows_per_month:,}")
    print(f"Months: {', '.join(config.SAMPLE_MONTHS)}")
    print(f"Data directory: {config.DATA_DIR}")
    print("=" * 60)

    print(f"\nStep 1: Generating {rows_per_month * len(config.SAMPLE_MONTHS):,} trips...")
    generator = TripDataGenerator(seed=config.SAMPLE_SEED, reference_year=config.REFERENCE_YEAR)
    stats = generator.generate_months(config.DATA_DIR, config.SAMPLE_MONTHS, rows_per_month)

    print("\nStep 2: Running trip analysis...")
    pipeline = TripAnalysisPipeline(stats['files'], config.OUTPUT_DIR, config=config)
    results = pipeline.run()

    print("\nStep 3: Verifying outputs...")
    loaded = results['row_counts']['loaded']
    if loaded != stats['total_rows']:
        print(f"Loaded {loaded:,} trips but generated {stats['total_rows']:,}")
        sys.exit(1)

    missing = [path for path in results['saved_files'].values() if not os.path.exists(path)]
    for name, path in results['saved_files'].items():
        if path not in missing:
            print(f"  {name}: {os.path.getsize(path):,} bytes")
    if missing:
        print(f"\nWarning: {len(missing)} output files are missing: {missing}")
        sys.exit(1)

    performance = results['performance']
    print(f"\nProcessed {loaded:,} trips in {performance['total_processing_time_seconds']:.1f}s, "
          f"peak memory {performance['peak_memory_usage_mb']:.0f} MB")


if __name__ == '__main__':
    main()
