import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ProviderLockRegistry:
    """One asyncio.Lock per provider.

    Placement holds the provider's lock across read, validate and insert so
    two requests for the same provider cannot both pass the conflict check.
    Scope is a single process; share one registry per application. A lock is
    dropped once its last holder or waiter leaves, so only providers with
    work in flight have an entry.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _lock_for(self, provider_id: int) -> asyncio.Lock:
        lock = self._locks.get(provider_id)
        if lock is None:
            lock = self._locks[provider_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, provider_id: int) -> AsyncIterator[None]:
        lock = self._lock_for(provider_id)
        self._users[provider_id] = self._users.get(provider_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[provider_id] -= 1
            if not self._users[provider_id]:
                del self._users[provider_id]
                del self._locks[provider_id]

    def locked(self, provider_id: int) -> bool:
        lock = self._locks.get(provider_id)
        return lock is not None and lock.locked()
