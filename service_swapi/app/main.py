"""
SWAPI console service.

``GET /api`` starts a fetch cycle in the background and returns at once; the
results are printed on the server console. ``GET /stats`` reports counters,
cache size and the active configuration.
"""

import argparse
import asyncio
from typing import Dict, List, Optional, Sequence, Set, TextIO

import httpx
from fastapi.responses import HTMLResponse, PlainTextResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config

from .client import SwapiClient
from .orchestrator import CycleOrchestrator
from .renderers import ConsoleRenderer
from .state import SwapiState


SERVICE_NAME = "swapi"

INDEX_HTML = """<!DOCTYPE html>
<html>
    <head>
        <title>Star Wars API Demo</title>
        <style>
            body { font-family: Arial; max-width: 800px; margin: auto; padding: 20px; }
            h1 { color: #FFE81F; background: #000; padding: 10px; }
            button { background: #FFE81F; border: none; padding: 10px 20px; cursor: pointer; }
        </style>
    </head>
    <body>
        <h1>Star Wars API Demo</h1>
        <p>Check console for results.</p>
        <button onclick="fetchData()">Fetch Data</button>
        <script>
            function fetchData() {
                fetch("/api").then(() => alert("Data fetched. Check console."));
            }
        </script>
    </body>
</html>
"""


class SwapiService(BaseService):
    """SWAPI fetch/cache console service."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(SERVICE_NAME, config=config)

        self.state = SwapiState.create(self.config, self.metrics)
        self.client = SwapiClient(self.config, self.state, metrics=self.metrics, transport=transport)
        self.renderer = ConsoleRenderer(self.state.stats, stream=stream)
        self.orchestrator = CycleOrchestrator(self.config, self.state, self.client, self.renderer)
        self._cycle_tasks: Set[asyncio.Task] = set()

        if not self.config.verify_tls:
            self.logger.warning(
                "TLS certificate verification is disabled for outbound requests",
                base_url=self.config.base_url,
            )

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.drain_cycles()

        self._setup_swapi_routes()

    def _setup_swapi_routes(self):
        """Set up trigger and status routes."""

        @self.app.get("/", response_class=HTMLResponse)
        @self.app.get("/index.html", response_class=HTMLResponse)
        async def index():
            """Landing page with a button that calls /api."""
            return HTMLResponse(INDEX_HTML)

        @self.app.get("/api", response_class=PlainTextResponse)
        async def trigger():
            """Dispatch one fetch cycle; its outcome is never reported here."""
            self.trigger_cycle()
            return PlainTextResponse("Check server console for results")

        @self.app.get("/stats")
        async def stats():
            """Counters, cache size and active configuration."""
            return self.status()

    def trigger_cycle(self) -> asyncio.Task:
        """Schedule a cycle on the running loop and keep a reference to it."""
        task = asyncio.create_task(self.orchestrator.run_cycle())
        self._cycle_tasks.add(task)
        task.add_done_callback(self._cycle_tasks.discard)
        return task

    async def drain_cycles(self) -> None:
        """Wait for every dispatched cycle to finish."""
        while self._cycle_tasks:
            await asyncio.gather(*list(self._cycle_tasks))

    def status(self) -> Dict[str, object]:
        return self.state.snapshot(self.config)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report whether a cycle is running."""
        return {
            "orchestrator": "running" if self.orchestrator.busy else "idle",
        }


def create_app():
    """Create SWAPI service application."""
    service = SwapiService()
    return service.app


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch SWAPI resources on demand and print them to the console.")
    parser.add_argument("--no-debug", action="store_true", help="Disable verbose logging and the per-cycle stats line.")
    parser.add_argument("--timeout", type=_positive_int, default=None, help="Per-fetch timeout in milliseconds.")
    parser.add_argument("--port", type=_positive_int, default=None, help="Listen port (defaults to $PORT or 3000).")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> ServiceConfig:
    """Environment settings overridden by whichever CLI flags were given."""
    return get_config(
        SERVICE_NAME,
        port=args.port,
        debug=False if args.no_debug else None,
        timeout_ms=args.timeout,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the SWAPI console service."""
    config = config_from_args(parse_args(argv))
    service = SwapiService(config)
    service.logger.info(
        "Server starting",
        url=f"http://localhost:{config.port}/",
        debug=config.debug,
        timeout_ms=config.timeout_ms,
    )
    service.run()


if __name__ == "__main__":
    main()
