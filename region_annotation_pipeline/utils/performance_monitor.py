#!/usr/bin/env python3

"""
Stage monitoring for the region annotation pipeline.

Records wall time, interval counts and resident memory for each annotation
stage and enforces the configured memory limit.
"""

import time
import logging
import psutil
from dataclasses import dataclass
from typing import Optional, Dict, Any
from contextlib import contextmanager

from ..core.exceptions import MemoryLimitError


@dataclass
class StageMetrics:
    """Container for the metrics of one stage."""
    stage_name: str
    start_time: float
    end_time: Optional[float] = None
    peak_memory_mb: float = 0.0
    intervals_in: int = 0
    intervals_out: int = 0
    succeeded: bool = False

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        if self.end_time is None:
            return time.time() - self.start_time
        return self.end_time - self.start_time


class PerformanceMonitor:
    """Per-stage timing and memory monitoring."""

    def __init__(self, memory_limit_mb: int = 4096, enabled: bool = True):
        self.memory_limit_mb = memory_limit_mb
        self.enabled = enabled
        self.start_time = time.time()
        self.stage_metrics: Dict[str, StageMetrics] = {}
        self.process = psutil.Process() if enabled else None

    def get_memory_usage(self) -> float:
        """Get current resident memory in MB (0 when monitoring is disabled)."""
        if not self.process:
            return 0.0

        try:
            return self.process.memory_info().rss / 1024 / 1024
        except psutil.Error as e:
            logging.warning(f"Error getting memory usage: {e}")
            return 0.0

    def check_memory_limit(self, metrics: Optional[StageMetrics] = None) -> float:
        """Sample memory, update the stage peak and enforce the limit."""
        current_memory = self.get_memory_usage()
        if metrics is not None:
            metrics.peak_memory_mb = max(metrics.peak_memory_mb, current_memory)

        if current_memory > self.memory_limit_mb:
            logging.warning(f"Memory usage exceeded limit: {current_memory:.1f}MB > {self.memory_limit_mb}MB")
            raise MemoryLimitError("Memory usage exceeded limit", current_memory, self.memory_limit_mb)

        return current_memory

    @contextmanager
    def stage_context(self, stage_name: str):
        """Context manager for monitoring a stage."""
        metrics = StageMetrics(stage_name=stage_name, start_time=time.time())
        self.stage_metrics[stage_name] = metrics
        logging.info(f"Started stage: {stage_name}")
        self.check_memory_limit(metrics)
        try:
            yield metrics
            self.check_memory_limit(metrics)
            metrics.succeeded = True
        finally:
            metrics.end_time = time.time()
            status = "Completed" if metrics.succeeded else "Aborted"
            logging.info(f"{status} stage {stage_name} in {metrics.elapsed_time:.2f}s "
                         f"(peak memory: {metrics.peak_memory_mb:.1f}MB)")

    def get_peak_memory(self) -> float:
        """Get peak memory usage across all stages."""
        if not self.stage_metrics:
            return self.get_memory_usage()
        return max(metrics.peak_memory_mb for metrics in self.stage_metrics.values())

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get comprehensive performance summary."""
        summary = {
            "total_elapsed_time": time.time() - self.start_time,
            "peak_memory_mb": self.get_peak_memory(),
            "memory_limit_mb": self.memory_limit_mb,
            "stages": {}
        }

        for stage_name, metrics in self.stage_metrics.items():
            summary["stages"][stage_name] = {
                "elapsed_time": metrics.elapsed_time,
                "intervals_in": metrics.intervals_in,
                "intervals_out": metrics.intervals_out,
                "peak_memory_mb": metrics.peak_memory_mb,
                "succeeded": metrics.succeeded,
            }

        return summary

    def log_performance_report(self) -> None:
        """Log performance report."""
        summary = self.get_performance_summary()

        logging.info("=" * 50)
        logging.info("PERFORMANCE REPORT")
        logging.info("=" * 50)
        logging.info(f"Total time: {summary['total_elapsed_time']:.2f} seconds")
        logging.info(f"Peak memory: {summary['peak_memory_mb']:.1f} MB (limit {summary['memory_limit_mb']} MB)")

        for stage_name, stage in summary['stages'].items():
            logging.info(f"  {stage_name}: {stage['elapsed_time']:.2f}s "
                         f"({stage['intervals_in']} -> {stage['intervals_out']} intervals, "
                         f"{stage['peak_memory_mb']:.1f}MB)"
                         + ("" if stage['succeeded'] else " FAILED"))
