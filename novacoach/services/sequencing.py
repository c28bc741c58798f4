"""
Stale-result suppression for UI slots.

Each call for a slot gets a monotonically increasing number. A result whose
number is older than the newest call for the same slot is discarded.
"""
from collections import defaultdict
from typing import Awaitable, TypeVar

from novacoach.core.errors import StaleResultError


T = TypeVar("T")


class SlotSequencer:
    def __init__(self):
        self._latest: dict[str, int] = defaultdict(int)

    def begin(self, slot: str) -> int:
        self._latest[slot] += 1
        return self._latest[slot]

    def is_current(self, slot: str, seq: int) -> bool:
        return self._latest[slot] == seq

    async def run(self, slot: str, awaitable: Awaitable[T]) -> T:
        """
        Await a call tagged for a slot.

        Raises:
            StaleResultError: If a newer call for the slot began meanwhile,
                whether this call succeeded or failed
        """
        seq = self.begin(slot)
        try:
            result = await awaitable
        except Exception as e:
            if not self.is_current(slot, seq):
                raise StaleResultError(slot, seq, self._latest[slot]) from e
            raise
        if not self.is_current(slot, seq):
            raise StaleResultError(slot, seq, self._latest[slot])
        return result
