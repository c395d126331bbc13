"""
Request Decorators

Contains decorators shared by the HTTP controllers and WebSocket handlers.
"""

from functools import wraps
from flask import jsonify
from flask_socketio import emit


def require_service(getter, label: str, kwarg: str):
    """
    Decorator that looks up an app service and passes it to the view.

    Responds with a 500 JSON error when the service is not registered.

    Args:
        getter: Zero-argument function returning the service or None
        label: Human-readable service name for the error message
        kwarg: Keyword argument the service is passed as
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            service = getter()
            if not service:
                return jsonify({
                    'success': False,
                    'error': f'{label} unavailable'
                }), 500
            kwargs[kwarg] = service
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def websocket_game_required(f):
    """Decorator for WebSocket events that act on an existing game."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from ..services.game_service import get_game_service

        game_service = get_game_service()
        if not game_service:
            emit('error', {'error': 'Game service unavailable'})
            return

        if not args or not isinstance(args[0], dict) or 'game_id' not in args[0]:
            emit('error', {'error': 'game_id is required'})
            return

        game_id = args[0]['game_id']
        if game_service.get_game_state(game_id) is None:
            emit('error', {'error': 'Game not found', 'game_id': game_id})
            return

        kwargs['game_service'] = game_service
        kwargs['game_id'] = game_id
        return f(*args, **kwargs)

    return decorated_function
