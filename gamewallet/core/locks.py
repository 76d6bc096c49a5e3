"""
Per-user serialization of wallet operations
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class UserLockRegistry:
    """
    One asyncio lock per user id.

    All operations touching one user's wallet, bets or positions run under that
    user's lock, so two concurrent wagers can never both pass the balance
    pre-check. Different users never contend.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    @asynccontextmanager
    async def lock(self, user_id: str) -> AsyncIterator[None]:
        async with self._get(user_id):
            yield

    def is_locked(self, user_id: str) -> bool:
        lock = self._locks.get(user_id)
        return lock is not None and lock.locked()
