"""
In-process API call metrics.

One collector is built per application and lives as long as the process.
Counters are never persisted.
"""

import threading

from agent_platform.schemas.system import MetricsSnapshot


class MetricsCollector:
    def __init__(self):
        self._lock = threading.Lock()
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._api_calls = 0
        self._success_calls = 0
        self._error_count = 0
        self._total_cost = 0.0
        self._avg_response_time = 0.0

    def record_api_call(self, duration_ms: float, cost: float, success: bool = True) -> None:
        """Count one provider call.

        The average response time is a running mean over successful calls only.
        """
        with self._lock:
            self._api_calls += 1
            self._total_cost += cost
            if success:
                self._success_calls += 1
                n = self._success_calls
                self._avg_response_time = (self._avg_response_time * (n - 1) + duration_ms) / n
            else:
                self._error_count += 1

    def get_metrics(self) -> MetricsSnapshot:
        with self._lock:
            if self._api_calls > 0:
                rate = (self._api_calls - self._error_count) / self._api_calls * 100
                success_rate = f"{rate:.2f}%"
            else:
                success_rate = "0%"
            return MetricsSnapshot(
                api_calls=self._api_calls,
                total_cost=self._total_cost,
                avg_response_time=self._avg_response_time,
                error_count=self._error_count,
                success_rate=success_rate,
            )

    def reset(self) -> None:
        with self._lock:
            self._reset_counters()
