"""
Observability for the dominant colour pipeline.

Per-stage timing and memory metrics collected in-process, plus helpers
for logging resource usage. Nothing here feeds back into clustering.
"""

import threading
import time
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import numpy as np
import psutil
from loguru import logger


@dataclass
class PerformanceMetrics:
    """Performance metrics for one pipeline operation."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    pixel_count: int
    cluster_count: int
    timestamp: float
    error: Optional[str] = None


class MetricsCollector:
    """Thread-safe metrics collector for extraction operations."""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()
        self._metrics_history: deque = deque(maxlen=max_history)
        self._operation_counts = defaultdict(int)
        self._error_counts = defaultdict(int)
        self._durations = defaultdict(lambda: deque(maxlen=100))
        self._memory = defaultdict(lambda: deque(maxlen=100))

    def record_performance(self, metrics: PerformanceMetrics) -> None:
        """Record performance metrics for an operation."""
        with self._lock:
            self._metrics_history.append(metrics)
            self._operation_counts[metrics.operation_name] += 1

            if metrics.error:
                self._error_counts[metrics.operation_name] += 1

            self._durations[metrics.operation_name].append(metrics.duration_ms)
            self._memory[metrics.operation_name].append(metrics.memory_usage_mb)

    def _operation_stats(self, operation_name: str) -> Dict[str, Any]:
        durations = list(self._durations.get(operation_name, ()))
        if not durations:
            return {}
        memory_usage = list(self._memory[operation_name])
        calls = self._operation_counts[operation_name]

        return {
            'operation_name': operation_name,
            'total_calls': calls,
            'error_count': self._error_counts[operation_name],
            'error_rate': self._error_counts[operation_name] / max(1, calls),
            'duration_stats': {
                'mean_ms': float(np.mean(durations)),
                'median_ms': float(np.median(durations)),
                'p95_ms': float(np.percentile(durations, 95)),
                'min_ms': float(np.min(durations)),
                'max_ms': float(np.max(durations))
            },
            'memory_stats': {
                'mean_mb': float(np.mean(memory_usage)),
                'peak_mb': float(np.max(memory_usage))
            }
        }

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """Get aggregated statistics for a specific operation."""
        with self._lock:
            return self._operation_stats(operation_name)

    def get_all_stats(self) -> Dict[str, Any]:
        """Get aggregated statistics for all operations."""
        with self._lock:
            total_ops = sum(self._operation_counts.values())
            total_errors = sum(self._error_counts.values())
            return {
                'operations': {name: self._operation_stats(name) for name in self._operation_counts},
                'total_operations': total_ops,
                'total_errors': total_errors,
                'overall_error_rate': total_errors / max(1, total_ops)
            }

    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent performance metrics."""
        with self._lock:
            recent = list(self._metrics_history)[-limit:]
            return [asdict(metric) for metric in recent]

    def reset(self) -> None:
        """Drop all recorded metrics."""
        with self._lock:
            self._metrics_history.clear()
            self._operation_counts.clear()
            self._error_counts.clear()
            self._durations.clear()
            self._memory.clear()


# Global metrics collector instance
_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return _metrics_collector


def _rss_mb() -> float:
    return psutil.Process().memory_info().rss / 1024 / 1024


@contextmanager
def performance_monitor(operation_name: str, pixel_count: int = 0, cluster_count: int = 0):
    """Context manager for monitoring performance of operations."""
    start_time = time.perf_counter()
    start_memory = _rss_mb()
    error_msg = None

    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        metrics = PerformanceMetrics(
            operation_name=operation_name,
            duration_ms=duration_ms,
            memory_usage_mb=max(_rss_mb(), start_memory),
            pixel_count=int(pixel_count),
            cluster_count=int(cluster_count),
            timestamp=time.time(),
            error=error_msg
        )
        _metrics_collector.record_performance(metrics)

        if error_msg:
            logger.error(f"Operation {operation_name} failed after {duration_ms:.1f}ms: {error_msg}")
        else:
            logger.info(f"Operation {operation_name} completed in {duration_ms:.1f}ms "
                        f"(memory: {metrics.memory_usage_mb:.1f}MB)")


def log_memory_usage(stage_name: str) -> Dict[str, Any]:
    """Log current memory usage for a specific stage."""
    memory_mb = _rss_mb()
    logger.debug(f"Memory usage at {stage_name}: {memory_mb:.1f}MB")

    return {
        'stage': stage_name,
        'memory_mb': memory_mb,
        'timestamp': time.time()
    }
