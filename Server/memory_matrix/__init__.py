"""
Memory Matrix Game Server Application Package

Serves the challenge engine and leaderboard of the Memory Matrix pattern
game to a browser front-end over HTTP and WebSocket.
"""

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from .config import Config


def build_leaderboard(config_class=Config):
    """Creates and loads the leaderboard store described by the config."""
    from .services.leaderboard_store import LeaderboardStore
    from .services.storage import FileStorage, MemoryStorage

    if config_class.LEADERBOARD_FILE:
        storage = FileStorage(config_class.LEADERBOARD_FILE)
    else:
        storage = MemoryStorage()

    leaderboard = LeaderboardStore(storage, max_entries=config_class.LEADERBOARD_MAX_ENTRIES)
    leaderboard.load()
    return leaderboard


def create_app(config_class=Config, leaderboard=None, scheduler=None, rng=None):
    """
    Application factory pattern for creating Flask app instances.

    Services are built per app and stored in ``app.extensions`` rather than
    as module globals, so tests can inject their own leaderboard, scheduler
    and random source.

    Args:
        config_class: Configuration class to use
        leaderboard: LeaderboardStore to serve; built from the config if omitted
        scheduler: Timer scheduler; Flask-SocketIO background tasks if omitted
        rng: random.Random used for sequence generation

    Returns:
        (Flask app, SocketIO) with all extensions initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)
    socketio = SocketIO(app, cors_allowed_origins="*", logger=False, engineio_logger=False)

    from .services.game_service import GameService
    from .services.scheduler import SocketIOScheduler
    from .websocket.handlers import make_room_emitter, register_websocket_handlers

    if leaderboard is None:
        leaderboard = build_leaderboard(config_class)
    if scheduler is None:
        scheduler = SocketIOScheduler(socketio)

    game_service = GameService(
        leaderboard,
        scheduler,
        emit=make_room_emitter(socketio),
        rng=rng,
        pattern_start_delay_ms=config_class.PATTERN_START_DELAY_MS,
        next_level_delay_ms=config_class.NEXT_LEVEL_DELAY_MS,
        finished_games_retained=config_class.FINISHED_GAMES_RETAINED
    )

    app.extensions['memory_matrix'] = {
        'game_service': game_service,
        'leaderboard': leaderboard
    }

    # Register blueprints
    from .controllers.game_controller import game_bp
    from .controllers.leaderboard_controller import leaderboard_bp

    app.register_blueprint(game_bp, url_prefix='/api')
    app.register_blueprint(leaderboard_bp, url_prefix='/api')

    # Register WebSocket handlers
    register_websocket_handlers(socketio)

    # Store socketio instance for use in other modules
    app.socketio = socketio

    return app, socketio
