"""
Bounded top-donor ranking.

Keeps the ``capacity`` largest contributors sorted by cumulative amount,
descending. On a tie the donor who reached that amount first ranks higher.
Each update touches at most ``capacity + 1`` entries, so the cost depends
on the number of contributions, never on the number of donors.
"""

import bisect
from typing import Optional

import structlog

logger = structlog.get_logger()


DEFAULT_TOP_DONOR_CAPACITY = 5

# (negated amount, sequence number at which the amount was reached, identity)
_Entry = tuple[int, int, str]


class TopDonors:
    """Fixed-capacity sorted sequence of the largest donors."""

    def __init__(self, capacity: int = DEFAULT_TOP_DONOR_CAPACITY):
        if capacity <= 0:
            raise ValueError("Top donor capacity must be positive")
        self.capacity = capacity
        self._entries: list[_Entry] = []
        self._by_identity: dict[str, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: str) -> bool:
        return identity in self._by_identity

    def update(self, identity: str, total: int, seq: int) -> bool:
        """
        Record that ``identity`` now has cumulative ``total``, reached at
        contribution number ``seq``.

        Returns:
            True if the identity is ranked after the update.
        """
        entry = (-total, seq, identity)

        current = self._by_identity.get(identity)
        if current is not None:
            self._entries.remove(current)
            bisect.insort(self._entries, entry)
            self._by_identity[identity] = entry
            return True

        if len(self._entries) >= self.capacity and entry >= self._entries[-1]:
            return False

        bisect.insort(self._entries, entry)
        self._by_identity[identity] = entry

        if len(self._entries) > self.capacity:
            evicted = self._entries.pop()
            del self._by_identity[evicted[2]]
            logger.debug("ranking.evicted", identity=evicted[2], amount=-evicted[0])

        return True

    def remove(self, identity: str) -> bool:
        """Drop ``identity``; returns False if it was not ranked."""
        entry = self._by_identity.pop(identity, None)
        if entry is None:
            return False
        self._entries.remove(entry)
        return True

    def identities(self) -> list[str]:
        return [identity for _, _, identity in self._entries]

    def amounts(self) -> list[tuple[str, int]]:
        return [(identity, -neg_amount) for neg_amount, _, identity in self._entries]

    def lowest(self) -> Optional[int]:
        """Amount of the last ranked donor, or None when empty."""
        if not self._entries:
            return None
        return -self._entries[-1][0]
