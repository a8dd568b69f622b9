from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Set

from app.core.errors import GenerationInProgressError


class TripGenerationGuard:
    """
    Per-trip "generation in progress" flag. The check and the set happen without
    an await in between, so on a single event loop they are atomic. Process-local.
    """

    def __init__(self):
        self._active: Set[str] = set()

    def is_active(self, trip_id: str) -> bool:
        return trip_id in self._active

    @asynccontextmanager
    async def hold(self, trip_id: str) -> AsyncIterator[None]:
        if trip_id in self._active:
            raise GenerationInProgressError(trip_id)
        self._active.add(trip_id)
        try:
            yield
        finally:
            self._active.discard(trip_id)
