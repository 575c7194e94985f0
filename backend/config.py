import os


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Comma separated; '*' allows any origin (judges connect from phones on the LAN)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '4444'))
    # Optional: advertised LAN address override for judge devices
    SERVER_IP = os.environ.get('SERVER_IP')
    # Default match configuration (restored by a full reset)
    MATCH_ROUNDS = int(os.environ.get('MATCH_ROUNDS', '3'))
    MATCH_ROUND_DURATION_SEC = int(os.environ.get('MATCH_ROUND_DURATION_SEC', '120'))
    MATCH_GOLDEN_POINT = _env_bool('MATCH_GOLDEN_POINT', True)
    CONSENSUS_ENABLED = _env_bool('CONSENSUS_ENABLED', True)
    CONSENSUS_WINDOW_MS = int(os.environ.get('CONSENSUS_WINDOW_MS', '1000'))
    CONSENSUS_MIN_JUDGES = int(os.environ.get('CONSENSUS_MIN_JUDGES', '2'))
    POINTS_BODY = int(os.environ.get('POINTS_BODY', '2'))
    POINTS_HEAD = int(os.environ.get('POINTS_HEAD', '3'))
    POINTS_TECH = int(os.environ.get('POINTS_TECH', '1'))
    # Round timer tick interval (ms)
    TIMER_TICK_MS = int(os.environ.get('TIMER_TICK_MS', '100'))
