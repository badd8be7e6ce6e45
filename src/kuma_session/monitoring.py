"""
Request metrics for the REST transport.

Tracks per-endpoint latency and failure counts for one session.
"""

import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, Dict, List


@dataclass(frozen=True)
class RequestMetrics:
    """Metrics for a single request."""
    endpoint: str
    method: str
    status_code: int
    duration_ms: float
    timestamp: float

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


@dataclass
class Statistics:
    """Aggregate request statistics."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0

    @property
    def avg_duration_ms(self) -> float:
        if not self.total_requests:
            return 0.0
        return self.total_duration_ms / self.total_requests

    def update(self, metrics: RequestMetrics) -> None:
        self.total_requests += 1
        self.total_duration_ms += metrics.duration_ms
        self.max_duration_ms = max(self.max_duration_ms, metrics.duration_ms)
        if metrics.ok:
            self.successful_requests += 1
        else:
            self.failed_requests += 1


class RequestMonitor:
    """Keeps a bounded history of REST requests."""

    def __init__(self, max_history: int = 500):
        self._statistics = Statistics()
        self._history: Deque[RequestMetrics] = deque(maxlen=max_history)
        self._by_endpoint: Dict[str, Statistics] = defaultdict(Statistics)

    def record_request(self, endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
        """Record metrics for a completed request."""
        metrics = RequestMetrics(
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            duration_ms=duration_ms,
            timestamp=time.time(),
        )
        self._statistics.update(metrics)
        self._by_endpoint[f"{method} {endpoint}"].update(metrics)
        self._history.append(metrics)

    @property
    def statistics(self) -> Statistics:
        return self._statistics

    def endpoint_statistics(self, method: str, endpoint: str) -> Statistics:
        return self._by_endpoint.get(f"{method} {endpoint}", Statistics())

    def get_recent_requests(self, count: int = 10) -> List[RequestMetrics]:
        """Get most recent requests."""
        return list(self._history)[-count:]
