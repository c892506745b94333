"""In-memory sliding-window metrics for sends to the sink."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass

from src.ports.metrics import HttpAttemptDto, MetricsPort

__all__ = ["Metrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one send attempt."""

    latency_ms: float
    failed: bool
    status_code: int | None


class Metrics(MetricsPort):
    """Lock-free metrics for the single send loop.

    Tracks:
    - Average and worst latency of the exchange.
    - Failure rate (transport errors and status >= 400).
    - Last status code, ``---`` when the last send got no response.
    - Total attempts seen.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent attempts to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, attempt: HttpAttemptDto) -> None:
        """Record a finished send attempt."""
        self._window.append(
            _Sample(
                latency_ms=(attempt.finished_at_sec - attempt.started_at_sec) * 1_000.0,
                failed=attempt.is_failed,
                status_code=attempt.status_code,
            )
        )
        self._total_seen += 1

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging."""
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        fail_pct = sum(1 for s in self._window if s.failed) / n_window * 100
        avg_latency = statistics.fmean(s.latency_ms for s in self._window)
        max_latency = max(s.latency_ms for s in self._window)
        last = self._window[-1]
        status = "---" if last.status_code is None else f"{last.status_code:3d}"

        return (
            f"latency={avg_latency:6.1f} ms (max {max_latency:.1f}) | "
            f"status={status} | "
            f"fail={fail_pct:5.1f}% | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
