"""
Unit tests for the SWAPI service routes and CLI.
"""

import io

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from service_swapi.app.main import SwapiService, config_from_args, create_app, parse_args
from shared.errors import CycleAborted
from shared.test_helpers import MockSwapiServer, TestEnvironment


class TestSwapiService:
    """Test cases for SwapiService."""

    @pytest.fixture
    def server(self):
        return MockSwapiServer()

    @pytest.fixture
    def service(self, server):
        """Create SwapiService instance against the mock server."""
        return SwapiService(
            TestEnvironment.get_mock_config(),
            transport=server.transport,
            stream=io.StringIO(),
        )

    @pytest.fixture
    def client(self, service):
        """Create test client."""
        with TestClient(service.app) as test_client:
            yield test_client

    def test_index_page(self, client):
        """Test the HTML landing page on both paths."""
        for path in ("/", "/index.html"):
            response = client.get(path)
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/html")
            assert "Star Wars API Demo" in response.text
            assert 'fetch("/api")' in response.text

    def test_trigger_dispatches_cycle(self, client, service):
        """Test /api schedules a cycle and answers immediately."""
        with patch.object(service.orchestrator, "run_cycle", new_callable=AsyncMock) as run_cycle:
            response = client.get("/api")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Check server console for results"
        run_cycle.assert_called_once_with()

    def test_trigger_hides_fetch_failures(self, client, service, server):
        """Test a failing cycle still yields a 200 from the trigger."""
        server.statuses["people/1"] = 500

        response = client.get("/api")

        assert response.status_code == 200
        assert response.text == "Check server console for results"

    def test_stats_initial(self, client):
        """Test the status report before any cycle."""
        response = client.get("/stats")
        assert response.status_code == 200
        data = response.json()
        assert data == {
            "fetch_count": 0,
            "error_count": 0,
            "data_size": 0,
            "cache": 0,
            "rotating_id": 1,
            "last_error": None,
            "debug": True,
            "timeout_ms": 200,
        }

    @pytest.mark.asyncio
    async def test_status_after_cycle(self, service):
        """Test the status accessor reflects a completed cycle."""
        await service.orchestrator.run_cycle()

        status = service.status()
        assert status["fetch_count"] == 1
        assert status["cache"] == 5
        assert status["rotating_id"] == 2
        assert status["data_size"] > 0

    def test_health(self, client):
        """Test health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "swapi"
        assert data["status"] == "ok"
        assert data["dependencies"]["orchestrator"] in ("idle", "running")

    def test_metrics_endpoint(self, client):
        """Test Prometheus exposition includes the service metrics."""
        client.get("/stats")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "swapi_fetch_cycles_total" in response.text
        assert 'endpoint="/stats"' in response.text

    def test_route_error_is_json_500(self, service):
        """Test an exception escaping a route becomes a JSON 500."""
        @service.app.get("/boom")
        async def boom():
            raise CycleAborted("character", KeyError("name"))

        with TestClient(service.app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/boom")

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"

    def test_unknown_path(self, client):
        """Test unknown paths are 404."""
        response = client.get("/nope")
        assert response.status_code == 404

    def test_create_app(self):
        """Test the default application factory."""
        app = create_app()
        routes = {route.path for route in app.routes}
        assert {"/", "/index.html", "/api", "/stats", "/health", "/metrics"} <= routes


class TestCli:
    """Test cases for command line parsing."""

    def test_defaults(self):
        """Test no flags leaves every override unset."""
        args = parse_args([])
        assert args.no_debug is False
        assert args.timeout is None
        assert args.port is None

    def test_flags(self):
        """Test --no-debug, --timeout and --port."""
        config = config_from_args(parse_args(["--no-debug", "--timeout", "1500", "--port", "8080"]))
        assert config.debug is False
        assert config.timeout_ms == 1500
        assert config.port == 8080
        assert config.effective_log_level == "info"

    def test_invalid_timeout(self):
        """Test a non-positive timeout is rejected."""
        with pytest.raises(SystemExit):
            parse_args(["--timeout", "0"])

    def test_config_is_frozen(self):
        """Test configuration cannot change after startup."""
        config = config_from_args(parse_args([]))
        with pytest.raises(Exception):
            config.timeout_ms = 1
