"""
In-memory endpoint cache.
"""

from typing import Any, Dict, Iterator, Optional

from shared.logging import get_logger


class ResponseCache:
    """Parsed response bodies keyed by exact endpoint string.

    Entries live for the whole process: there is no TTL, no eviction and no
    key normalization (``films/`` and ``films`` are two entries).
    """

    def __init__(self):
        self._entries: Dict[str, Any] = {}
        self.logger = get_logger("swapi.cache")

    def lookup(self, endpoint: str) -> Optional[Any]:
        """Return the cached body for ``endpoint`` or ``None``."""
        return self._entries.get(endpoint)

    def store(self, endpoint: str, entry: Any) -> None:
        """Store ``entry``; a second store for the same endpoint replaces it."""
        if endpoint in self._entries:
            self.logger.debug("Replacing cache entry", endpoint=endpoint)
        self._entries[endpoint] = entry

    def keys(self) -> Iterator[str]:
        return iter(self._entries.keys())

    def __contains__(self, endpoint: object) -> bool:
        return endpoint in self._entries

    def __len__(self) -> int:
        return len(self._entries)
