"""
SWAPI fetch client with endpoint caching.
"""

import asyncio
import json
from contextlib import nullcontext
from typing import Any, Optional

import httpx

from shared.config import ServiceConfig
from shared.errors import FetchError, FetchTimeoutError, HttpStatusError, NetworkError, ParseError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .state import SwapiState


ERROR_STATUS = 400


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


class SwapiClient:
    """Fetches endpoints relative to the configured base URL.

    Every successful fetch is cached for the life of the process. A miss opens
    a fresh ``httpx.AsyncClient`` for that single request; nothing is pooled
    and nothing is retried.
    """

    def __init__(
        self,
        config: ServiceConfig,
        state: SwapiState,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = config.base_url
        self.timeout_ms = config.timeout_ms
        self.verify_tls = config.verify_tls
        self.cache = state.cache
        self.stats = state.stats
        self.metrics = metrics
        self.transport = transport
        self.logger = get_logger("swapi.client")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def url_for(self, endpoint: str) -> str:
        """Join base URL and endpoint verbatim."""
        return f"{self.base_url}{endpoint}"

    async def fetch(self, endpoint: str) -> Any:
        """Return the parsed body for ``endpoint``, from cache when possible.

        Raises:
            NetworkError: the connection failed before a response arrived.
            FetchTimeoutError: the whole request exceeded ``timeout_ms``.
            HttpStatusError: the response status was 400 or above.
            ParseError: the body was not valid JSON.
        """
        if endpoint in self.cache:
            self.logger.debug("Cache hit", endpoint=endpoint)
            if self.metrics:
                self.metrics.increment_counter("swapi_cache_hits_total")
            return self.cache.lookup(endpoint)

        try:
            with self._timed():
                payload = await asyncio.wait_for(self._request(endpoint), timeout=self.timeout_seconds)
        except FetchError as exc:
            self._record_failure(exc)
            raise
        except (asyncio.TimeoutError, httpx.TimeoutException):
            exc = FetchTimeoutError(endpoint, self.timeout_ms)
            self._record_failure(exc)
            raise exc from None
        except httpx.RequestError as e:
            exc = NetworkError(endpoint, e)
            self._record_failure(exc)
            raise exc from e

        self.cache.store(endpoint, payload)
        if self.metrics:
            self.metrics.increment_counter("swapi_network_fetches_total", outcome="ok")
            self.metrics.set_gauge("swapi_cache_entries", len(self.cache))
        self.logger.debug("Fetched", endpoint=endpoint)
        return payload

    async def _request(self, endpoint: str) -> Any:
        """Issue the GET and parse the fully buffered body."""
        url = self.url_for(endpoint)
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            verify=self.verify_tls,
            transport=self.transport,
        ) as client:
            async with client.stream("GET", url) as response:
                if response.status_code >= ERROR_STATUS:
                    # Body is dropped unread when the stream closes.
                    raise HttpStatusError(endpoint, response.status_code)
                body = await response.aread()

        try:
            return json.loads(body, parse_constant=_reject_constant)
        except ValueError as e:
            raise ParseError(endpoint, e) from e

    def _record_failure(self, exc: FetchError) -> None:
        self.stats.record_error(exc.code)
        if self.metrics:
            self.metrics.increment_counter("swapi_network_fetches_total", outcome=exc.code.lower())
        self.logger.warning("Fetch failed", endpoint=exc.endpoint, code=exc.code, error=exc.message)

    def _timed(self):
        if self.metrics:
            return self.metrics.time_operation("swapi_fetch_duration_seconds")
        return nullcontext()

