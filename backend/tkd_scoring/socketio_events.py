from flask import current_app, request
from flask_socketio import emit

from tkd_scoring import socketio
from tkd_scoring.services.match import MatchEngine, Snapshot

NAMESPACE = '/ws'


def _engine() -> MatchEngine:
    return current_app.extensions['match_engine']


def _lock():
    return current_app.extensions['match_lock']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


# ---- Broadcasts (also used as engine listeners from the timer task) ----

def broadcast_state(snapshot: Snapshot) -> None:
    socketio.emit('state:update', snapshot.to_dict(), namespace=NAMESPACE)


def broadcast_round_end(snapshot: Snapshot) -> None:
    """Round or match concluded on the clock; clients sound the buzzer."""
    socketio.emit('state:update', snapshot.to_dict(), namespace=NAMESPACE)
    socketio.emit('round:end', snapshot.to_dict(), namespace=NAMESPACE)


# ---- Connection lifecycle ----

def handle_connect(auth=None):
    with _lock():
        snapshot = _engine().snapshot()
    emit('state:update', snapshot.to_dict())


def handle_disconnect(reason=None):
    with _lock():
        engine = _engine()
        engine.disconnect_seat(_get_sid())
        broadcast_state(engine.snapshot())


# ---- Judge events ----

def handle_judge_register(data=None):
    seat = _payload(data).get('seat')
    with _lock():
        engine = _engine()
        outcome = engine.register_seat(_get_sid(), seat)
        broadcast_state(engine.snapshot())
    if outcome:
        current_app.logger.info(f"[judge-register] seat={seat} sid={_get_sid()}")
    else:
        current_app.logger.info(f"[judge-register-rejected] seat={seat} reason={outcome.reason}")
    return {'success': outcome.accepted, 'seat': seat, 'error': outcome.reason}


def handle_judge_leave(data=None):
    with _lock():
        engine = _engine()
        engine.remove_seat(_get_sid())
        broadcast_state(engine.snapshot())
    return {'success': True}


def handle_judge_score(data=None):
    payload = _payload(data)
    side, zone = payload.get('side'), payload.get('zone')
    with _lock():
        engine = _engine()
        seat = engine.seat_for(_get_sid())
        if seat is None:
            return {'success': False, 'error': 'not_registered'}
        outcome = engine.submit_score(seat, side, zone)
        # Broadcast either way so judges see their vote landed
        broadcast_state(engine.snapshot())
        if outcome:
            points = outcome.snapshot.config.points[zone]
            socketio.emit('score:awarded', {'side': side, 'zone': zone, 'points': points}, namespace=NAMESPACE)
    return {'success': outcome.accepted, 'error': outcome.reason}


# ---- Admin events ----

def handle_admin_timer(data=None):
    action = _payload(data).get('action')
    with _lock():
        engine = _engine()
        if action == 'start':
            snapshot = engine.timer_start()
        elif action == 'pause':
            snapshot = engine.timer_pause()
        else:
            return {'success': False, 'error': 'action must be start or pause'}
        broadcast_state(snapshot)
    return {'success': True}


def handle_admin_config(data=None):
    if not isinstance(data, dict):
        return {'success': False, 'error': 'config must be an object'}
    with _lock():
        broadcast_state(_engine().configure(data))
    return {'success': True}


def handle_admin_penalty(data=None):
    side = _payload(data).get('side')
    with _lock():
        broadcast_state(_engine().submit_penalty(side))
    return {'success': True}


def handle_admin_new_match(data=None):
    with _lock():
        broadcast_state(_engine().new_match())
    return {'success': True}


def handle_admin_next_round(data=None):
    with _lock():
        broadcast_state(_engine().advance_from_round_end())
    return {'success': True}


def handle_admin_reset(data=None):
    with _lock():
        broadcast_state(_engine().reset())
    return {'success': True}


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'judge:register': handle_judge_register,
    'judge:leave': handle_judge_leave,
    'judge:score': handle_judge_score,
    'admin:timer': handle_admin_timer,
    'admin:config': handle_admin_config,
    'admin:penalty': handle_admin_penalty,
    'admin:newMatch': handle_admin_new_match,
    'admin:nextRound': handle_admin_next_round,
    'admin:reset': handle_admin_reset,
}


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    for event, handler in _HANDLERS.items():
        socketio.on_event(event, handler, namespace=NAMESPACE)
