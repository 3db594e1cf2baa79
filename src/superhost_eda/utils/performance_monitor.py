# ========================
# src/superhost_eda/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks elapsed time, memory and per-stage row counts for a pipeline run.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Dict, Any, List, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for the listings pipeline.
    Records one checkpoint per stage with the table size before and after.
    """

    def __init__(self, name: str = "Pipeline"):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
        """
        self.name = name
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.stages: List[Dict[str, Any]] = []

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.info(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def record_stage(self, stage: str,
                     rows_in: Optional[int],
                     rows_out: int,
                     started_at: Optional[float] = None,
                     metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Record a completed stage.

        Args:
            stage (str): Stage name
            rows_in (int): Rows entering the stage, None for the loader
            rows_out (int): Rows leaving the stage
            started_at (float): time.time() when the stage started
            metadata (dict): Optional extra values to keep with the checkpoint

        Returns:
            dict: The stored checkpoint
        """
        now = time.time()
        current_memory = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, current_memory)

        checkpoint = {
            'stage': stage,
            'rows_in': rows_in,
            'rows_out': rows_out,
            'rows_dropped': (rows_in - rows_out) if rows_in is not None else 0,
            'duration_seconds': now - started_at if started_at else 0.0,
            'memory_mb': current_memory,
            'metadata': metadata or {},
        }
        self.stages.append(checkpoint)

        if rows_in is None:
            logger.info(f"{self.name} - {stage}: {rows_out:,} rows")
        else:
            logger.info(
                f"{self.name} - {stage}: {rows_in:,} -> {rows_out:,} rows "
                f"({checkpoint['rows_dropped']:,} dropped)"
            )
        return checkpoint

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.time()
        total_time = self.end_time - self.start_time if self.start_time else 0

        summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'stages_recorded': len(self.stages),
            'peak_memory_usage_mb': self.peak_memory_mb,
            'stages': self.stages,
        }

        self._log_summary(summary)
        return summary

    def _log_summary(self, summary: Dict[str, Any]) -> None:
        logger.info("=" * 60)
        logger.info(f"PERFORMANCE SUMMARY - {summary['name']}")
        logger.info("=" * 60)
        logger.info(f"Total processing time: {summary['total_processing_time_seconds']:.2f} seconds")
        logger.info(f"Stages recorded: {summary['stages_recorded']}")
        logger.info(f"Peak memory usage: {summary['peak_memory_usage_mb']:.2f} MB")
        logger.info("=" * 60)

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory of this process in MB."""
        process = psutil.Process(os.getpid())
        return process.memory_info().rss / (1024 * 1024)


@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

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
        monitor.stop_monitoring()
