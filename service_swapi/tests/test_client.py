"""
Unit tests for the SWAPI fetch client.
"""

import pytest
import httpx

from service_swapi.app.client import SwapiClient
from service_swapi.app.state import SwapiState
from shared.errors import FetchTimeoutError, HttpStatusError, NetworkError, ParseError
from shared.metrics import MetricsCollector
from shared.test_helpers import MockSwapiServer, SwapiDataFactory, TestEnvironment


class TestSwapiClient:
    """Test cases for SwapiClient."""

    @pytest.fixture
    def config(self):
        """Create test configuration."""
        return TestEnvironment.get_mock_config(timeout_ms=100)

    @pytest.fixture
    def state(self, config):
        """Create fresh state."""
        return SwapiState.create(config)

    @pytest.fixture
    def server(self):
        """Create mock SWAPI server."""
        return MockSwapiServer()

    @pytest.fixture
    def client(self, config, state, server):
        """Create SwapiClient instance."""
        return SwapiClient(config, state, transport=server.transport)

    def test_url_is_base_plus_endpoint(self, client):
        """Test URLs are joined without normalization."""
        assert client.url_for("starships/?page=1") == "https://swapi.dev/api/starships/?page=1"
        assert client.url_for("films") == "https://swapi.dev/api/films"

    @pytest.mark.asyncio
    async def test_fetch_success_populates_cache(self, client, state, server):
        """Test a successful fetch is parsed and cached."""
        result = await client.fetch("people/1")

        assert result == SwapiDataFactory.create_character(1)
        assert state.cache.lookup("people/1") is result
        assert state.stats.error_count == 0
        assert server.count("people/1") == 1

    @pytest.mark.asyncio
    async def test_second_fetch_hits_cache(self, client, state, server):
        """Test repeated fetches perform exactly one network operation."""
        first = await client.fetch("films/")
        second = await client.fetch("films/")

        assert second is first
        assert server.count("films/") == 1
        assert state.stats.error_count == 0
        assert len(state.cache) == 1

    @pytest.mark.asyncio
    async def test_endpoints_are_not_normalized(self, client, server):
        """Test distinct strings for the same resource are distinct entries."""
        server.payloads["films"] = SwapiDataFactory.create_films()

        await client.fetch("films/")
        await client.fetch("films")

        assert server.requests == ["films/", "films"]

    @pytest.mark.asyncio
    async def test_timeout(self, client, state, server):
        """Test a slow response fails with FetchTimeoutError."""
        server.delays["films/"] = 1.0

        with pytest.raises(FetchTimeoutError) as exc_info:
            await client.fetch("films/")

        assert exc_info.value.endpoint == "films/"
        assert exc_info.value.timeout_ms == 100
        assert exc_info.value.code == "TIMEOUT_ERROR"
        assert state.stats.error_count == 1
        assert "films/" not in state.cache

    @pytest.mark.asyncio
    async def test_http_status_error_skips_parse(self, client, state, server):
        """Test a 404 fails with HttpStatusError even though the body is not JSON."""
        server.statuses["people/99"] = 404

        with pytest.raises(HttpStatusError) as exc_info:
            await client.fetch("people/99")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["endpoint"] == "people/99"
        assert state.stats.error_count == 1
        assert "people/99" not in state.cache

    @pytest.mark.asyncio
    async def test_server_error_status(self, client, state, server):
        """Test 5xx responses are status errors too."""
        server.statuses["films/"] = 503

        with pytest.raises(HttpStatusError) as exc_info:
            await client.fetch("films/")

        assert exc_info.value.status_code == 503
        assert state.stats.error_count == 1

    @pytest.mark.asyncio
    async def test_parse_error(self, client, state, server):
        """Test an invalid JSON body fails with ParseError."""
        server.raw_bodies["films/"] = b"{not json"

        with pytest.raises(ParseError) as exc_info:
            await client.fetch("films/")

        assert exc_info.value.code == "PARSE_ERROR"
        assert state.stats.error_count == 1
        assert "films/" not in state.cache

    @pytest.mark.asyncio
    @pytest.mark.parametrize("constant", [b"Infinity", b"-Infinity", b"NaN"])
    async def test_non_finite_constants_rejected(self, client, state, server, constant):
        """Test NaN and Infinity literals are parse errors and never cached."""
        server.raw_bodies["planets/?page=1"] = b'{"results":[{"population":' + constant + b"}]}"

        with pytest.raises(ParseError):
            await client.fetch("planets/?page=1")

        assert state.stats.error_count == 1
        assert "planets/?page=1" not in state.cache

    @pytest.mark.asyncio
    async def test_network_error(self, client, state, server):
        """Test a connection failure fails with NetworkError."""
        server.connect_failures["films/"] = "Name or service not known"

        with pytest.raises(NetworkError) as exc_info:
            await client.fetch("films/")

        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert "Name or service not known" in exc_info.value.message
        assert state.stats.error_count == 1

    @pytest.mark.asyncio
    async def test_failed_fetch_is_not_cached(self, client, state, server):
        """Test a failure leaves the next call free to fetch again."""
        server.statuses["films/"] = 500
        with pytest.raises(HttpStatusError):
            await client.fetch("films/")

        del server.statuses["films/"]
        result = await client.fetch("films/")

        assert result["count"] == 3
        assert server.count("films/") == 2
        assert state.stats.error_count == 1

    @pytest.mark.asyncio
    async def test_json_null_body_is_cached(self, client, state, server):
        """Test a falsy parsed body still counts as a cache entry."""
        server.raw_bodies["empty/"] = b"null"

        assert await client.fetch("empty/") is None
        assert await client.fetch("empty/") is None
        assert server.count("empty/") == 1

    @pytest.mark.asyncio
    async def test_metrics_mirroring(self, config, state, server):
        """Test fetch outcomes are mirrored into Prometheus."""
        metrics = MetricsCollector("swapi")
        client = SwapiClient(config, state, metrics=metrics, transport=server.transport)
        server.statuses["people/99"] = 404

        await client.fetch("films/")
        await client.fetch("films/")
        with pytest.raises(HttpStatusError):
            await client.fetch("people/99")

        assert metrics.get_value("swapi_network_fetches_total", outcome="ok") == 1.0
        assert metrics.get_value("swapi_network_fetches_total", outcome="http_status_error") == 1.0
        assert metrics.get_value("swapi_cache_hits_total") == 1.0
        assert metrics.get_value("swapi_cache_entries") == 1.0
