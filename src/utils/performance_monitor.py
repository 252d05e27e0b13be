# ========================
# src/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks elapsed time, row throughput and resident memory of a run, with a
checkpoint per pipeline stage.
"""

import os
import time
import logging
from contextlib import contextmanager
from typing import Dict, Any, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for the trip analysis.
    Tracks memory usage, processing time, and throughput.
    """

    def __init__(self, name: str = "Trip analysis", log_every: int = 10):
        """
        Args:
            name (str): Name for this monitoring session
            log_every (int): Log progress every N chunks
        """
        self.name = name
        self.log_every = log_every
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.records_processed = 0
        self.chunks_processed = 0
        self.checkpoints = []
        self.summary = None
        self._process = psutil.Process(os.getpid())

    def start_monitoring(self) -> None:
        self.start_time = time.perf_counter()
        self.peak_memory_mb = self._get_memory_usage_mb()
        logger.info(f"{self.name} - monitoring started ({self.peak_memory_mb:.2f} MB resident)")

    def update_progress(self, records_in_chunk: int) -> None:
        """
        Record a processed chunk.

        Args:
            records_in_chunk (int): Number of records in the chunk
        """
        self.records_processed += records_in_chunk
        self.chunks_processed += 1
        current_memory = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, current_memory)

        if self.chunks_processed % self.log_every == 0:
            elapsed = self._elapsed()
            throughput = self.records_processed / elapsed if elapsed > 0 else 0
            logger.info(
                f"{self.name} - Progress: {self.chunks_processed} chunks, "
                f"{self.records_processed:,} records, "
                f"{throughput:.0f} records/sec, "
                f"Memory: {current_memory:.2f} MB"
            )

    def add_checkpoint(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Mark the end of a stage.

        Args:
            name (str): Stage name
            metadata (dict): Optional values to keep with the checkpoint
        """
        memory_mb = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)
        checkpoint = {
            'name': name,
            'elapsed_seconds': self._elapsed(),
            'memory_mb': memory_mb,
            'metadata': metadata or {},
        }
        self.checkpoints.append(checkpoint)
        logger.debug(f"Checkpoint '{name}': {checkpoint}")

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.perf_counter()
        total_time = self._elapsed()
        throughput = self.records_processed / total_time if total_time > 0 else 0

        summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'records_processed': self.records_processed,
            'chunks_processed': self.chunks_processed,
            'average_throughput_records_per_second': throughput,
            'peak_memory_usage_mb': self.peak_memory_mb,
            'checkpoints': self.checkpoints,
        }

        logger.info(
            f"{self.name} - finished in {total_time:.2f}s, "
            f"{self.records_processed:,} records ({throughput:.0f}/s), "
            f"peak memory {self.peak_memory_mb:.2f} MB"
        )
        for checkpoint in self.checkpoints:
            logger.info(f"  {checkpoint['name']}: {checkpoint['elapsed_seconds']:.2f}s")
        return summary

    def _elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time

    def _get_memory_usage_mb(self) -> float:
        return self._process.memory_info().rss / (1024 * 1024)


@contextmanager
def monitor_performance(name: str = "Trip analysis"):
    """
    Context manager for easy performance monitoring.

    The summary is available as ``monitor.summary`` after the block exits.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.summary = monitor.stop_monitoring()
