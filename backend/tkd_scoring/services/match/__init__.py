"""Match domain services: consensus voting, round timer and the match engine.

This package contains pure domain logic that is driven by HTTP routes and
socket handlers, keeping transport concerns separated from the match state
machine. Nothing in here imports Flask.
"""

from .consensus import Vote, VoteBuffer
from .engine import MatchEngine
from .models import (
    DISQUALIFICATION_PENALTIES,
    SEAT_NUMBERS,
    SIDES,
    STATUS_IDLE,
    STATUS_MATCH_END,
    STATUS_PAUSED,
    STATUS_ROUND_END,
    STATUS_RUNNING,
    ZONES,
    MatchConfig,
    MatchState,
    Outcome,
    SeatView,
    Snapshot,
)
from .scheduler import PeriodicTask, Scheduler

__all__ = [
    'DISQUALIFICATION_PENALTIES',
    'SEAT_NUMBERS',
    'SIDES',
    'STATUS_IDLE',
    'STATUS_MATCH_END',
    'STATUS_PAUSED',
    'STATUS_ROUND_END',
    'STATUS_RUNNING',
    'ZONES',
    'MatchConfig',
    'MatchEngine',
    'MatchState',
    'Outcome',
    'PeriodicTask',
    'Scheduler',
    'SeatView',
    'Snapshot',
    'Vote',
    'VoteBuffer',
]
