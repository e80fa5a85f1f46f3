import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from expense_categorizer.logger import get_logger

logger = get_logger(__name__)


class OwnerLeases:
    """Serializes pipeline runs per owner within this process.

    Separate worker processes do not share leases.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, owner_id: str) -> AsyncGenerator[None, None]:
        lock = self._locks.setdefault(owner_id, asyncio.Lock())
        self._waiters[owner_id] = self._waiters.get(owner_id, 0) + 1
        if lock.locked():
            logger.info("[LEASE] Owner %s already has a run in progress; waiting.", owner_id)
        try:
            async with lock:
                yield
        finally:
            self._waiters[owner_id] -= 1
            if self._waiters[owner_id] == 0:
                del self._waiters[owner_id]
                del self._locks[owner_id]

    def is_held(self, owner_id: str) -> bool:
        lock = self._locks.get(owner_id)
        return lock is not None and lock.locked()
