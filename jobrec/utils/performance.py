"""Performance monitoring utilities"""
import asyncio
import threading
import time
from functools import wraps
from dataclasses import dataclass, field
from typing import Dict, List
import numpy as np

@dataclass
class OperationMetrics:
    """Latency and outcome counters for one instrumented operation"""
    calls: int = 0
    failures: int = 0
    latencies: List[float] = field(default_factory=list)

    @property
    def avg_latency(self) -> float:
        return float(np.mean(self.latencies)) if self.latencies else 0.0

    @property
    def p95_latency(self) -> float:
        return float(np.percentile(self.latencies, 95)) if self.latencies else 0.0

    def add_call(self, latency: float, success: bool = True):
        """Record a call"""
        self.calls += 1
        self.latencies.append(latency)
        if not success:
            self.failures += 1

class PerformanceMonitor:
    """Monitor engine performance per operation"""

    def __init__(self):
        self._lock = threading.Lock()
        self.operations: Dict[str, OperationMetrics] = {}

    def record(self, name: str, latency: float, success: bool = True):
        with self._lock:
            self.operations.setdefault(name, OperationMetrics()).add_call(latency, success)

    def measure(self, func):
        """Decorator to measure execution time"""
        name = func.__qualname__

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception:
                self.record(name, time.perf_counter() - start, False)
                raise
            self.record(name, time.perf_counter() - start, True)
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                self.record(name, time.perf_counter() - start, False)
                raise
            self.record(name, time.perf_counter() - start, True)
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    def reset(self):
        with self._lock:
            self.operations.clear()

    def get_report(self) -> dict:
        """Generate performance report"""
        with self._lock:
            return {
                name: {
                    "calls": metrics.calls,
                    "failures": metrics.failures,
                    "avg_latency_sec": round(metrics.avg_latency, 4),
                    "p95_latency_sec": round(metrics.p95_latency, 4),
                }
                for name, metrics in self.operations.items()
            }

# Global monitor instance
monitor = PerformanceMonitor()
