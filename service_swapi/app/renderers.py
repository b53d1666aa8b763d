"""
Console renderers for SWAPI payloads.

Each renderer adds the compact JSON size of the payload it was given to the
``data_size`` counter and then prints a few fields. Payloads come straight
from the cache, so nothing here mutates them.
"""

import json
import re
import sys
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, TextIO

from .stats import FetchStats


MAX_STARSHIPS = 3
MIN_POPULATION = 1_000_000_000
MIN_DIAMETER = 10_000

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of ``value``; ``None`` when there is none.

    ``"2000000000"`` -> 2000000000, ``"12,000"`` -> 12, ``"unknown"`` -> None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def serialized_size(payload: Any) -> int:
    """Length of the compact JSON text of ``payload`` in UTF-16 code units."""
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def is_large_populated(planet: Dict[str, Any]) -> bool:
    population = parse_int(planet.get("population"))
    diameter = parse_int(planet.get("diameter"))
    if population is None or diameter is None:
        return False
    return population > MIN_POPULATION and diameter > MIN_DIAMETER


def _release_key(film: Dict[str, Any]):
    # Unparseable dates sort after every real one.
    try:
        return (0, date.fromisoformat(str(film.get("release_date"))))
    except ValueError:
        return (1, date.max)


def sort_films(films: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Films ascending by release date, as a new list."""
    return sorted(films, key=_release_key)


class ConsoleRenderer:
    """Prints fetched resources to the operator console."""

    def __init__(self, stats: FetchStats, stream: Optional[TextIO] = None):
        self.stats = stats
        self.stream = stream

    def _out(self, line: str = "") -> None:
        print(line, file=self.stream or sys.stdout)

    def _account(self, payload: Any) -> None:
        self.stats.record_data_size(serialized_size(payload))

    def render_character(self, character: Dict[str, Any]) -> None:
        self._account(character)
        self._out(f"\nCharacter: {character['name']}")
        self._out(f"Height: {character['height']}")
        self._out(f"Mass: {character['mass']}")
        self._out(f"Birth year: {character['birth_year']}")
        self._out(f"Films: {len(character['films'])}")

    def render_starships(self, starships: Dict[str, Any]) -> None:
        self._account(starships)
        self._out(f"\nStarships ({starships.get('count')} total):")
        for idx, ship in enumerate(starships["results"][:MAX_STARSHIPS], start=1):
            self._out(f"\nStarship {idx}:")
            self._out(f"Name: {ship['name']}")
            self._out(f"Model: {ship['model']}")
            self._out(f"Manufacturer: {ship['manufacturer']}")
            self._out(f"Cost: {ship['cost_in_credits']}")

    def render_planets(self, planets: Dict[str, Any]) -> None:
        self._account(planets)
        self._out("\nLarge populated planets:")
        for planet in filter(is_large_populated, planets["results"]):
            self._out(
                f"{planet['name']} - Pop: {planet['population']}, "
                f"Diameter: {planet['diameter']}, Climate: {planet.get('climate')}"
            )

    def render_films(self, films: Dict[str, Any]) -> None:
        self._account(films)
        self._out("\nFilms:")
        for rank, film in enumerate(sort_films(films["results"]), start=1):
            self._out(f"{rank}. {film['title']} ({film['release_date']})")

    def render_vehicle(self, vehicle: Dict[str, Any]) -> None:
        self._account(vehicle)
        self._out(f"\nVehicle: {vehicle['name']}")
        self._out(f"Model: {vehicle['model']}")
        self._out(f"Manufacturer: {vehicle['manufacturer']}")

    def render_stats(self, snapshot: Dict[str, Any]) -> None:
        self._out(
            f"\nStats: Fetches: {snapshot['fetch_count']}, "
            f"Cache: {snapshot['cache']}, "
            f"DataSize: {snapshot['data_size']}, Errors: {snapshot['error_count']}"
        )
