from flask import Blueprint, current_app, jsonify, request

from tkd_scoring.services.match import SIDES
from tkd_scoring.socketio_events import broadcast_state

match = Blueprint('match', __name__)


def _engine():
    return current_app.extensions['match_engine']


def _lock():
    return current_app.extensions['match_lock']


def _json_object():
    """Request body as a dict; a missing body counts as empty, anything else as None."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _publish(snapshot):
    broadcast_state(snapshot)
    return jsonify(snapshot.to_dict())


@match.route('/state', methods=['GET'])
def get_state():
    """Returns the current match snapshot."""
    with _lock():
        snapshot = _engine().snapshot()
    return jsonify(snapshot.to_dict())


@match.route('/config', methods=['POST'])
def update_config():
    """
    Merges a partial match configuration. Zone points merge per zone.
    """
    data = _json_object()
    if data is None:
        return jsonify({'error': 'A JSON object is required'}), 400
    with _lock():
        return _publish(_engine().configure(data))


@match.route('/timer', methods=['POST'])
def control_timer():
    data = _json_object()
    if data is None:
        return jsonify({'error': 'A JSON object is required'}), 400
    action = data.get('action')
    if action not in ('start', 'pause'):
        return jsonify({'error': 'action must be start or pause'}), 400
    with _lock():
        engine = _engine()
        snapshot = engine.timer_start() if action == 'start' else engine.timer_pause()
        return _publish(snapshot)


@match.route('/penalty', methods=['POST'])
def add_penalty():
    """
    Records a gam-jeom against a side; the opponent gains a point.
    """
    data = _json_object()
    if data is None:
        return jsonify({'error': 'A JSON object is required'}), 400
    side = data.get('side')
    if side not in SIDES:
        return jsonify({'error': 'side must be red or blue'}), 400
    with _lock():
        return _publish(_engine().submit_penalty(side))


@match.route('/new', methods=['POST'])
def new_match():
    with _lock():
        return _publish(_engine().new_match())


@match.route('/next-round', methods=['POST'])
def next_round():
    """Confirms the next round after a round end; the clock stays stopped."""
    with _lock():
        return _publish(_engine().advance_from_round_end())


@match.route('/reset', methods=['POST'])
def reset():
    with _lock():
        return _publish(_engine().reset())
