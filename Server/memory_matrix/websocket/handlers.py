"""
WebSocket Event Handlers

Handles the real-time side of a game: the browser joins its game room to
receive reveal steps, countdown ticks and results, and may send cell
clicks over the socket instead of HTTP.
"""

from dataclasses import asdict
from flask import request
from flask_socketio import emit, join_room, leave_room
from ..utils.decorators import websocket_game_required
from ..utils.game_logger import game_logger


def make_room_emitter(socketio):
    """Builds the emit callback the game service uses to push events to a game room."""
    def emit_to_room(event, data, room):
        socketio.emit(event, data, to=room)
    return emit_to_room


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect():
        """Handle WebSocket connection."""
        game_logger.logger.debug(f"Socket connected: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect(*args):
        """Handle WebSocket disconnection."""
        game_logger.logger.debug(f"Socket disconnected: {request.sid}")

    @socketio.on('join_game')
    @websocket_game_required
    def handle_join_game(data, game_service=None, game_id=None):
        """Subscribe this socket to a game's events."""
        join_room(game_id)
        state = game_service.get_game_state(game_id)
        emit('joined_game', {'game_id': game_id, 'state': asdict(state)})
        game_logger.log_game_event(game_id, 'socket_joined', state.player_name, sid=request.sid)

    @socketio.on('leave_game')
    @websocket_game_required
    def handle_leave_game(data, game_service=None, game_id=None):
        """Unsubscribe this socket from a game's events."""
        leave_room(game_id)
        emit('left_game', {'game_id': game_id})

    @socketio.on('select_cell')
    @websocket_game_required
    def handle_select_cell(data, game_service=None, game_id=None):
        """Submit one cell click over the socket."""
        index = data.get('index')
        if not isinstance(index, int) or isinstance(index, bool):
            emit('error', {'error': 'Cell index must be an integer', 'game_id': game_id})
            return

        try:
            outcome = game_service.select_cell(game_id, index)
            if outcome is None:
                emit('error', {'error': 'Game not found', 'game_id': game_id})
                return

            result, state = outcome
            emit('cell_result', {
                'game_id': game_id,
                'index': index,
                'result': result.value,
                'state': asdict(state)
            })
        except Exception as e:
            game_logger.log_error(request, e, 'select_cell', game_id)
            emit('error', {'error': str(e), 'game_id': game_id})
