"""Festival-scoped serialization of workflow transactions."""

import asyncio
import logging
from uuid import UUID

logger = logging.getLogger(__name__)


class FestivalLockRegistry:
    """One asyncio lock per festival id.

    Every festival transition and every performance transition of that
    festival runs under the same lock, so a phase change never interleaves
    with a child transition in this process.
    """

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}

    def get(self, festival_id: UUID) -> asyncio.Lock:
        """Return the lock for ``festival_id``, creating it on first use."""
        lock = self._locks.get(festival_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[festival_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


festival_locks = FestivalLockRegistry()
