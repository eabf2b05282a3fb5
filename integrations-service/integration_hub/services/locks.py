"""Per-integration locks."""

import asyncio
from typing import Dict


class IntegrationLocks:
    """One ``asyncio.Lock`` per integration id.

    Mutating operations on the same integration hold its lock across every
    await, so a disconnect cannot interleave with an in-flight action.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, integration_id: str) -> asyncio.Lock:
        lock = self._locks.get(integration_id)
        if lock is None:
            lock = self._locks[integration_id] = asyncio.Lock()
        return lock
