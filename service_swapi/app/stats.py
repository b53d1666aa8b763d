"""
Process-wide fetch counters.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from shared.metrics import MetricsCollector


@dataclass
class FetchStats:
    """Running counters for fetch cycles.

    The integers are the source of truth for ``/stats``; when a collector is
    attached every update is mirrored into Prometheus as well. All counters
    only ever grow.
    """

    fetch_count: int = 0
    error_count: int = 0
    data_size: int = 0
    metrics: Optional[MetricsCollector] = field(default=None, repr=False, compare=False)

    def record_cycle(self) -> None:
        self.fetch_count += 1
        if self.metrics:
            self.metrics.increment_counter("swapi_fetch_cycles_total")

    def record_error(self, error_type: str) -> None:
        self.error_count += 1
        if self.metrics:
            self.metrics.record_error(error_type)

    def record_data_size(self, size: int) -> None:
        if size < 0:
            raise ValueError("data size must be non-negative")
        self.data_size += size
        if self.metrics:
            self.metrics.increment_counter("swapi_rendered_bytes_total", size)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "fetch_count": self.fetch_count,
            "error_count": self.error_count,
            "data_size": self.data_size,
        }
