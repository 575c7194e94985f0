import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Mapping, Optional, Tuple

from .consensus import Vote, VoteBuffer
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
    JudgeSeat,
    MatchConfig,
    MatchState,
    Outcome,
    SeatView,
    Snapshot,
    opponent_of,
    to_int,
)
from .scheduler import PeriodicTask, Scheduler

logger = logging.getLogger(__name__)

Listener = Callable[[Snapshot], None]


class MatchEngine:
    """Match state machine for a single fight.

    Owns the configuration, the match state, the consensus vote buffer, the
    judge seats and the round timer. Callers must serialise access: the engine
    holds no lock of its own. Every mutating operation returns a fresh
    :class:`Snapshot` (or an :class:`Outcome` wrapping one) that is safe to
    hand to other threads.
    """

    def __init__(
        self,
        defaults: Optional[MatchConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.time,
        on_tick: Optional[Listener] = None,
        on_round_end: Optional[Listener] = None,
        tick_interval: float = 0.1,
    ):
        self._defaults = (defaults or MatchConfig()).copy()
        self._scheduler = scheduler or Scheduler()
        self._clock = clock
        self._on_tick = on_tick
        self._on_round_end = on_round_end
        self.tick_interval = tick_interval

        self._task: Optional[PeriodicTask] = None
        self._last_tick: Optional[float] = None
        self._closed = False

        self.config = self._defaults.copy()
        self.state = MatchState.initial(self.config)
        self._votes = VoteBuffer()
        self._seats: 'OrderedDict[str, JudgeSeat]' = OrderedDict()

    # ---- Snapshots ----

    def snapshot(self) -> Snapshot:
        return Snapshot(
            config=self.config.copy(),
            state=self.state.copy(),
            judges=tuple(SeatView(s.seat, s.connected) for s in self._seats.values()),
        )

    def pending_votes(self) -> Tuple[Vote, ...]:
        return self._votes.votes()

    @property
    def timer_active(self) -> bool:
        return self._task is not None

    # ---- Configuration ----

    def configure(self, partial: Mapping[str, Any]) -> Snapshot:
        """Merge a partial configuration.

        An unstarted round (``idle`` or ``roundEnd``) picks up the possibly
        new round duration immediately.
        """
        dropped = self.config.merge(partial or {})
        if dropped:
            logger.warning(f"[config-skip] ignored invalid keys: {', '.join(dropped)}")
        if self.state.status in (STATUS_IDLE, STATUS_ROUND_END):
            self.state.timer = self.config.round_duration
        logger.info(f"[config] {self.config}")
        return self.snapshot()

    # ---- Timer ----

    def timer_start(self) -> Snapshot:
        if self._closed or self.state.status == STATUS_MATCH_END:
            return self.snapshot()
        if self._task is not None:
            return self.snapshot()

        self.state.status = STATUS_RUNNING
        self._last_tick = self._clock()
        self._task = self._scheduler.every(self.tick_interval, self.tick)
        logger.info(
            f"[timer-start] round={self.state.current_round} golden={self.state.is_golden_point} "
            f"remaining={self.state.timer:.1f}s"
        )
        return self.snapshot()

    def timer_pause(self) -> Snapshot:
        if self.state.status != STATUS_RUNNING:
            return self.snapshot()
        self._stop_timer()
        self.state.status = STATUS_PAUSED
        logger.info(f"[timer-pause] round={self.state.current_round} remaining={self.state.timer:.1f}s")
        return self.snapshot()

    def tick(self) -> None:
        """Advance the round clock by the wall-clock time since the last tick.

        A tick without an active timer does nothing.
        """
        if self._task is None:
            return
        now = self._clock()
        elapsed = max(0.0, now - self._last_tick)
        self._last_tick = now
        self.state.timer = max(0.0, self.state.timer - elapsed)

        round_over = self.state.timer <= 0
        if round_over:
            self.state.timer = 0
            self._stop_timer()
            self._resolve_round_end()

        snap = self.snapshot()
        try:
            if round_over and self._on_round_end:
                self._on_round_end(snap)
        finally:
            if self._on_tick:
                self._on_tick(snap)

    def _stop_timer(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._last_tick = None

    def _resolve_round_end(self) -> None:
        state = self.state
        if state.is_golden_point:
            # Golden point ran out without a score
            self._end_match(state.leader())
        elif state.current_round >= self.config.rounds:
            if state.total('red') == state.total('blue') and self.config.golden_point:
                state.status = STATUS_ROUND_END
                state.is_golden_point = True
                state.timer = self.config.round_duration
                logger.info('[round-end] final round tied, golden point next')
            else:
                self._end_match(state.leader())
        else:
            state.status = STATUS_ROUND_END
            state.current_round += 1
            state.timer = self.config.round_duration
            logger.info(f"[round-end] advancing to round {state.current_round}")

    def _end_match(self, winner: str) -> None:
        self._stop_timer()
        self.state.status = STATUS_MATCH_END
        self.state.winner = winner
        logger.info(
            f"[match-end] winner={winner} red={self.state.total('red')} blue={self.state.total('blue')}"
        )

    def advance_from_round_end(self) -> Snapshot:
        """Operator confirms the next round; round and timer stay as resolved."""
        if self.state.status == STATUS_ROUND_END:
            self.state.status = STATUS_IDLE
        return self.snapshot()

    # ---- Scoring ----

    def submit_score(self, judge: int, side: str, zone: str) -> Outcome:
        """Register a judge's vote.

        Accepted only when points were actually awarded. With consensus
        enabled a vote is buffered until enough distinct judges agree on the
        same side and zone within the window; the agreeing votes are then
        purged so one exchange scores once.
        """
        if self.state.status != STATUS_RUNNING:
            return Outcome.reject('not_running')
        if side not in SIDES:
            return Outcome.reject('invalid_side')
        if zone not in ZONES:
            return Outcome.reject('invalid_zone')

        if not self.config.consensus_enabled:
            self._apply_score(side, zone)
            return Outcome.accept(self.snapshot())

        agreeing = self._votes.add(
            Vote(judge=judge, side=side, zone=zone, timestamp=self._clock()),
            self.config.consensus_window,
        )
        if agreeing < self.config.consensus_min_judges:
            return Outcome.reject('awaiting_consensus')

        logger.info(f"[consensus] side={side} zone={zone} judges={agreeing}")
        self._apply_score(side, zone)
        self._votes.purge(side, zone)
        return Outcome.accept(self.snapshot())

    def _apply_score(self, side: str, zone: str) -> None:
        points = self.config.points.get(zone, 0)
        self.state.scores[side] += points
        if self.state.is_golden_point and points > 0:
            self._end_match(side)

    # ---- Penalties ----

    def submit_penalty(self, side: str) -> Snapshot:
        """Record a gam-jeom: one point to the opponent, disqualification at ten."""
        if side not in SIDES:
            return self.snapshot()
        opponent = opponent_of(side)
        self.state.penalties[side] += 1
        self.state.penalty_points[opponent] += 1
        if (
            self.state.penalties[side] >= DISQUALIFICATION_PENALTIES
            and self.state.status != STATUS_MATCH_END
        ):
            logger.info(f"[disqualified] side={side} penalties={self.state.penalties[side]}")
            self._end_match(opponent)
        return self.snapshot()

    # ---- Judge seats ----

    def register_seat(self, connection_id: str, seat: Any) -> Outcome:
        try:
            number = to_int(seat)
        except (TypeError, ValueError):
            return Outcome.reject('invalid_seat')
        if number not in SEAT_NUMBERS:
            return Outcome.reject('invalid_seat')

        for sid, holder in self._seats.items():
            if holder.seat == number and holder.connected and sid != connection_id:
                return Outcome.reject('seat_taken')

        existing = self._seats.get(connection_id)
        if existing is not None:
            existing.seat = number
            existing.connected = True
        else:
            self._seats[connection_id] = JudgeSeat(seat=number)
        logger.info(f"[seat-register] seat={number}")
        return Outcome.accept(self.snapshot())

    def seat_for(self, connection_id: str) -> Optional[int]:
        holder = self._seats.get(connection_id)
        if holder is None or not holder.connected:
            return None
        return holder.seat

    def disconnect_seat(self, connection_id: str) -> None:
        holder = self._seats.get(connection_id)
        if holder is not None:
            holder.connected = False
            logger.info(f"[seat-disconnect] seat={holder.seat}")

    def remove_seat(self, connection_id: str) -> None:
        holder = self._seats.pop(connection_id, None)
        if holder is not None:
            logger.info(f"[seat-remove] seat={holder.seat}")

    # ---- Match lifecycle ----

    def new_match(self) -> Snapshot:
        """Fresh match with the current configuration."""
        self._stop_timer()
        self.state = MatchState.initial(self.config)
        self._votes.clear()
        logger.info('[new-match]')
        return self.snapshot()

    def reset(self) -> Snapshot:
        """Fresh match, default configuration and no judges."""
        self.config = self._defaults.copy()
        self._seats.clear()
        return self.new_match()

    def shutdown(self) -> None:
        self._stop_timer()
        self._closed = True
        logger.info('[shutdown]')
