"""
Owned state shared by the fetch client and the orchestrator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from shared.config import DEFAULT_MAX_ID, ServiceConfig
from shared.metrics import MetricsCollector

from .cache import ResponseCache
from .stats import FetchStats


@dataclass
class SwapiState:
    """Cache, counters and the rotating resource id for one process.

    A fresh instance per service (or per test) replaces the module-level
    globals a simpler script would use.
    """

    cache: ResponseCache = field(default_factory=ResponseCache)
    stats: FetchStats = field(default_factory=FetchStats)
    max_id: int = DEFAULT_MAX_ID
    rotating_id: int = 1
    last_error: Optional[Dict[str, Any]] = None

    @classmethod
    def create(cls, config: ServiceConfig, metrics: Optional[MetricsCollector] = None) -> "SwapiState":
        return cls(stats=FetchStats(metrics=metrics), max_id=config.max_id)

    @property
    def rotating_id_exhausted(self) -> bool:
        return self.rotating_id > self.max_id

    def advance_rotating_id(self) -> int:
        self.rotating_id += 1
        return self.rotating_id

    def snapshot(self, config: ServiceConfig) -> Dict[str, Any]:
        """Status view used by ``/stats`` and the verbose cycle summary."""
        return {
            **self.stats.as_dict(),
            "cache": len(self.cache),
            "rotating_id": self.rotating_id,
            "last_error": self.last_error,
            "debug": config.debug,
            "timeout_ms": config.timeout_ms,
        }
