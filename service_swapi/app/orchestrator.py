"""
Fetch cycle orchestration.
"""

import asyncio

from shared.config import ServiceConfig
from shared.errors import CycleAborted
from shared.logging import cycle_id_var, get_logger, set_cycle_id

from .client import SwapiClient
from .renderers import ConsoleRenderer
from .state import SwapiState


STARSHIPS_ENDPOINT = "starships/?page=1"
PLANETS_ENDPOINT = "planets/?page=1"
FILMS_ENDPOINT = "films/"


def character_endpoint(resource_id: int) -> str:
    return f"people/{resource_id}"


def vehicle_endpoint(resource_id: int) -> str:
    return f"vehicles/{resource_id}"


class CycleOrchestrator:
    """Runs the five fetch steps of one cycle, in order.

    Steps never overlap, inside a cycle or across cycles: a trigger that
    arrives while a cycle is running waits on ``_lock`` until it is done.
    The first failing step ends the cycle; the error is logged and counted,
    never raised to the caller.
    """

    def __init__(
        self,
        config: ServiceConfig,
        state: SwapiState,
        client: SwapiClient,
        renderer: ConsoleRenderer,
    ):
        self.config = config
        self.state = state
        self.client = client
        self.renderer = renderer
        self.logger = get_logger("swapi.orchestrator")
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> None:
        """Run one full cycle. Never raises."""
        async with self._lock:
            set_cycle_id()
            try:
                await self._run_steps()
            finally:
                cycle_id_var.set(None)

    async def _run_steps(self) -> None:
        stats = self.state.stats
        step = "start"
        try:
            stats.record_cycle()
            self.logger.debug("Starting data fetch", rotating_id=self.state.rotating_id)

            step = "character"
            character = await self.client.fetch(character_endpoint(self.state.rotating_id))
            self.renderer.render_character(character)

            step = "starships"
            starships = await self.client.fetch(STARSHIPS_ENDPOINT)
            self.renderer.render_starships(starships)

            step = "planets"
            planets = await self.client.fetch(PLANETS_ENDPOINT)
            self.renderer.render_planets(planets)

            step = "films"
            films = await self.client.fetch(FILMS_ENDPOINT)
            self.renderer.render_films(films)

            step = "vehicle"
            if not self.state.rotating_id_exhausted:
                vehicle = await self.client.fetch(vehicle_endpoint(self.state.rotating_id))
                self.renderer.render_vehicle(vehicle)
                self.state.advance_rotating_id()
            else:
                self.logger.debug(
                    "Skipping vehicle fetch",
                    rotating_id=self.state.rotating_id,
                    max_id=self.state.max_id,
                )

            step = "summary"
            if self.config.debug:
                self.renderer.render_stats(self.state.snapshot(self.config))
        except Exception as exc:
            self._abort(step, exc)

    def _abort(self, step: str, exc: Exception) -> None:
        aborted = CycleAborted(step, exc)
        # Counted once per cycle, on top of any count the client already made.
        self.state.stats.record_error(aborted.code)
        self.state.last_error = aborted.to_response().model_dump()
        self.logger.error(
            "Fetch cycle aborted",
            step=step,
            code=aborted.code,
            error=aborted.message,
            details=aborted.details,
        )
