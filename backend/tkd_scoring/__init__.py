import logging
import threading

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)


def _cors_origins(config):
    raw = config.get('CORS_ORIGINS') or '*'
    if raw.strip() == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    logging.basicConfig(
        level=flask_app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    allowed_origins = _cors_origins(flask_app.config)
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One engine per app; every engine call (ticks included) holds this lock
    from tkd_scoring.services.match import MatchConfig, MatchEngine, Scheduler
    from tkd_scoring.socketio_events import broadcast_round_end, broadcast_state

    lock = threading.RLock()
    engine = MatchEngine(
        defaults=MatchConfig.from_app_config(flask_app.config),
        scheduler=Scheduler(spawn=socketio.start_background_task, sleep=socketio.sleep, lock=lock),
        on_tick=broadcast_state,
        on_round_end=broadcast_round_end,
        tick_interval=flask_app.config.get('TIMER_TICK_MS', 100) / 1000.0,
    )
    flask_app.extensions['match_engine'] = engine
    flask_app.extensions['match_lock'] = lock

    from tkd_scoring.main import main
    flask_app.register_blueprint(main)

    from tkd_scoring.api.match import match
    flask_app.register_blueprint(match, url_prefix='/api/match')

    from tkd_scoring.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('show-urls')
    def show_urls_command():
        """Prints the scoreboard, admin and judge URLs for this machine."""
        from tkd_scoring.main import server_info
        info = server_info(flask_app.config)
        for page in ('scoreboard', 'admin', 'judge'):
            click.echo(f"{page.capitalize():<11} {info['url']}/{page}")

    flask_app.cli.add_command(show_urls_command)

    flask_app.logger.info(f"[startup] match defaults: {engine.config}")
    return flask_app
