from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class Vote:
    judge: int
    side: str
    zone: str
    timestamp: float  # wall-clock seconds


class VoteBuffer:
    """Rolling buffer of judge votes awaiting agreement.

    A side+zone pair reaches consensus when enough *distinct* judges voted for
    it within the window. Votes for other pairs stay buffered independently.
    """

    def __init__(self) -> None:
        self._votes: List[Vote] = []

    def __len__(self) -> int:
        return len(self._votes)

    def add(self, vote: Vote, window_ms: int) -> int:
        """Buffer ``vote``, prune to the window ending at its timestamp and
        return the number of distinct judges now agreeing with it."""
        self._votes.append(vote)
        self.prune(vote.timestamp, window_ms)
        return self.distinct_judges(vote.side, vote.zone)

    def prune(self, now: float, window_ms: int) -> None:
        window = window_ms / 1000.0
        self._votes = [v for v in self._votes if now - v.timestamp <= window]

    def distinct_judges(self, side: str, zone: str) -> int:
        return len({v.judge for v in self._votes if v.side == side and v.zone == zone})

    def purge(self, side: str, zone: str) -> None:
        self._votes = [v for v in self._votes if not (v.side == side and v.zone == zone)]

    def clear(self) -> None:
        self._votes = []

    def votes(self) -> Tuple[Vote, ...]:
        return tuple(self._votes)
