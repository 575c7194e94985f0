import copy
import math
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

SIDES = ('red', 'blue')
ZONES = ('body', 'head', 'tech')
SEAT_NUMBERS = (1, 2, 3)
DISQUALIFICATION_PENALTIES = 10

STATUS_IDLE = 'idle'
STATUS_RUNNING = 'running'
STATUS_PAUSED = 'paused'
STATUS_ROUND_END = 'roundEnd'
STATUS_MATCH_END = 'matchEnd'

WINNER_DRAW = 'draw'


def opponent_of(side: str) -> str:
    return 'blue' if side == 'red' else 'red'


def _per_side(value: int = 0) -> Dict[str, int]:
    return {side: value for side in SIDES}


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError('booleans are not counts')
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f'{value!r} is not a whole number')
    return int(value)


def _to_number(value: Any):
    if isinstance(value, bool):
        raise TypeError('booleans are not durations')
    if isinstance(value, str):
        value = value.strip()
        try:
            return int(value)
        except ValueError:
            return float(value)
    if isinstance(value, (int, float)):
        return value
    raise TypeError(f'{value!r} is not a number')


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('1', 'true', 'yes', 'on'):
            return True
        if lowered in ('0', 'false', 'no', 'off', ''):
            return False
    raise ValueError(f'{value!r} is not a boolean')


# field name -> (coercer, invariant)
_FIELD_RULES = {
    'rounds': (to_int, lambda v: v >= 1),
    'round_duration': (_to_number, lambda v: math.isfinite(v) and v > 0),
    'golden_point': (_to_bool, None),
    'consensus_enabled': (_to_bool, None),
    'consensus_window': (to_int, lambda v: v > 0),
    'consensus_min_judges': (to_int, lambda v: v >= 1),
}

# Flask setting -> MatchConfig field
_SETTING_FIELDS = {
    'MATCH_ROUNDS': 'rounds',
    'MATCH_ROUND_DURATION_SEC': 'round_duration',
    'MATCH_GOLDEN_POINT': 'golden_point',
    'CONSENSUS_ENABLED': 'consensus_enabled',
    'CONSENSUS_WINDOW_MS': 'consensus_window',
    'CONSENSUS_MIN_JUDGES': 'consensus_min_judges',
}
_SETTING_POINTS = {'POINTS_BODY': 'body', 'POINTS_HEAD': 'head', 'POINTS_TECH': 'tech'}


@dataclass
class MatchConfig:
    rounds: int = 3
    round_duration: float = 120
    golden_point: bool = True
    consensus_enabled: bool = True
    consensus_window: int = 1000
    consensus_min_judges: int = 2
    points: Dict[str, int] = field(default_factory=lambda: {'body': 2, 'head': 3, 'tech': 1})

    @classmethod
    def from_app_config(cls, cfg: Mapping[str, Any]) -> 'MatchConfig':
        """Build the default match configuration from Flask-style settings.

        Settings go through :meth:`merge`, so an out-of-range value falls back
        to the built-in default instead of breaking the invariants.
        """
        partial = {
            field_name: cfg[setting]
            for setting, field_name in _SETTING_FIELDS.items()
            if setting in cfg
        }
        points = {zone: cfg[setting] for setting, zone in _SETTING_POINTS.items() if setting in cfg}
        if points:
            partial['points'] = points

        config = cls()
        dropped = config.merge(partial)
        if dropped:
            logger.warning(f"[config-skip] invalid default settings ignored: {', '.join(dropped)}")
        return config

    def merge(self, partial: Mapping[str, Any]) -> List[str]:
        """Apply a partial update in place.

        ``points`` merges zone by zone, every other field overwrites. Values are
        coerced to the field's type; a value that cannot be coerced, or that
        breaks the non-negative/positive invariants, is skipped. Returns the
        dotted names of the skipped keys.
        """
        dropped = []
        for key, raw in partial.items():
            if key == 'points':
                if not isinstance(raw, Mapping):
                    dropped.append('points')
                    continue
                for zone, zone_raw in raw.items():
                    if zone not in ZONES:
                        dropped.append(f'points.{zone}')
                        continue
                    try:
                        value = to_int(zone_raw)
                    except (TypeError, ValueError):
                        dropped.append(f'points.{zone}')
                        continue
                    if value < 0:
                        dropped.append(f'points.{zone}')
                        continue
                    self.points[zone] = value
                continue

            rule = _FIELD_RULES.get(key)
            if rule is None:
                dropped.append(key)
                continue
            coerce, invariant = rule
            try:
                value = coerce(raw)
            except (TypeError, ValueError):
                dropped.append(key)
                continue
            if invariant is not None and not invariant(value):
                dropped.append(key)
                continue
            setattr(self, key, value)
        return dropped

    def copy(self) -> 'MatchConfig':
        return copy.deepcopy(self)


@dataclass
class MatchState:
    status: str = STATUS_IDLE
    current_round: int = 1
    is_golden_point: bool = False
    timer: float = 0
    scores: Dict[str, int] = field(default_factory=_per_side)
    penalties: Dict[str, int] = field(default_factory=_per_side)
    penalty_points: Dict[str, int] = field(default_factory=_per_side)
    winner: Optional[str] = None

    @classmethod
    def initial(cls, config: MatchConfig) -> 'MatchState':
        return cls(timer=config.round_duration)

    def total(self, side: str) -> int:
        return self.scores[side] + self.penalty_points[side]

    def leader(self) -> str:
        """Side with the higher total, or ``'draw'`` when level."""
        red, blue = self.total('red'), self.total('blue')
        if red > blue:
            return 'red'
        if blue > red:
            return 'blue'
        return WINNER_DRAW

    def copy(self) -> 'MatchState':
        return copy.deepcopy(self)


@dataclass(frozen=True)
class SeatView:
    seat: int
    connected: bool


@dataclass
class JudgeSeat:
    seat: int
    connected: bool = True


@dataclass(frozen=True)
class Snapshot:
    """Independent copy of everything presentation clients render."""

    config: MatchConfig
    state: MatchState
    judges: Tuple[SeatView, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'config': asdict(self.config),
            'state': asdict(self.state),
            'judges': [asdict(j) for j in self.judges],
        }


@dataclass(frozen=True)
class Outcome:
    """Result of a command that may be silently rejected.

    Truthy when accepted; a rejected outcome carries a short machine-readable
    ``reason`` and no snapshot.
    """

    accepted: bool
    snapshot: Optional[Snapshot] = None
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def accept(cls, snapshot: Snapshot) -> 'Outcome':
        return cls(True, snapshot=snapshot)

    @classmethod
    def reject(cls, reason: str) -> 'Outcome':
        return cls(False, reason=reason)
