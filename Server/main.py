"""
Memory Matrix Game Server - Main Entry Point

This is the main entry point for the Memory Matrix game server.
It loads the leaderboard, builds the Flask-SocketIO application and starts it.
"""

import os
from memory_matrix import build_leaderboard, create_app
from memory_matrix.config import config, validate_difficulty_curve
from memory_matrix.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    config_class = config.get(os.getenv('APP_ENV', 'default'), config['default'])

    try:
        print("Initializing services...")

        validate_difficulty_curve()
        print("✓ Difficulty curve validated")

        leaderboard = build_leaderboard(config_class)
        storage_label = config_class.LEADERBOARD_FILE or 'memory'
        print(f"✓ Leaderboard loaded from {storage_label} ({len(leaderboard)} entries)")

        print("Creating Flask application...")
        app, socketio = create_app(config_class, leaderboard=leaderboard)
        print("✓ Flask application created successfully")

        game_logger.logger.info("Memory Matrix Server Starting")

        print(f"\nStarting Memory Matrix Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print("=" * 50)

        socketio.run(app, host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Memory Matrix Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
