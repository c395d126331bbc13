"""
Game Controller

Handles all game-related HTTP endpoints.
"""

from flask import Blueprint, request, jsonify
from dataclasses import asdict
from ..services.game_service import get_game_service
from ..services.leaderboard_store import get_leaderboard_store
from ..utils.decorators import require_service
from ..utils.game_logger import game_logger

game_bp = Blueprint('game', __name__)

requires_game_service = require_service(get_game_service, 'Game service', 'game_service')


@game_bp.route('/new_game', methods=['POST'])
@requires_game_service
def new_game(game_service):
    """Create a new game session and start level 1."""
    try:
        data = request.get_json(silent=True) or {}
        player_name = data.get('player_name', '')

        if not isinstance(player_name, str) or not player_name.strip():
            error_response = {
                'success': False,
                'error': 'Player name is required'
            }
            game_logger.log_server_response(request, 'new_game', False, error_response)
            return jsonify(error_response), 400

        # Log user action
        game_logger.log_user_action(request, 'new_game', player_name=player_name)

        game_id = game_service.create_new_game(player_name)
        state = game_service.get_game_state(game_id)

        response_data = {
            'success': True,
            'game_id': game_id,
            'state': asdict(state)
        }

        game_logger.log_server_response(
            request, 'new_game', True, response_data, game_id,
            grid_size=state.grid_size, sequence_length=state.sequence_length
        )

        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'new_game')

        error_response = {
            'success': False,
            'error': str(e)
        }

        game_logger.log_server_response(request, 'new_game', False, error_response)
        return jsonify(error_response), 500


@game_bp.route('/game/<game_id>/state', methods=['GET'])
@requires_game_service
def get_state(game_id, game_service):
    """Get current game state."""
    try:
        game_logger.log_user_action(request, 'get_state', game_id)

        state = game_service.get_game_state(game_id)
        if state is None:
            error_response = {
                'success': False,
                'error': 'Game not found'
            }
            game_logger.log_server_response(request, 'get_state', False, error_response, game_id)
            return jsonify(error_response), 404

        response_data = {
            'success': True,
            'state': asdict(state)
        }

        game_logger.log_server_response(
            request, 'get_state', True, response_data, game_id,
            current_level=state.current_level, game_over=state.game_over
        )

        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_state', game_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_state', False, error_response, game_id)
        return jsonify(error_response), 500


@game_bp.route('/game/<game_id>/select', methods=['POST'])
@requires_game_service
def select_cell(game_id, game_service):
    """Submit one cell click for the current level."""
    try:
        data = request.get_json(silent=True)
        index = data.get('index') if isinstance(data, dict) else None
        if not isinstance(index, int) or isinstance(index, bool):
            error_response = {
                'success': False,
                'error': 'Cell index must be an integer'
            }
            game_logger.log_server_response(request, 'select_cell', False, error_response, game_id)
            return jsonify(error_response), 400

        game_logger.log_user_action(request, 'select_cell', game_id, index=index)

        outcome = game_service.select_cell(game_id, index)
        if outcome is None:
            error_response = {
                'success': False,
                'error': 'Game not found'
            }
            game_logger.log_server_response(request, 'select_cell', False, error_response, game_id)
            return jsonify(error_response), 404

        result, state = outcome
        response_data = {
            'success': True,
            'result': result.value,
            'state': asdict(state)
        }
        if state.game_over:
            response_data['summary'] = game_service.get_game_summary(game_id)

        game_logger.log_server_response(
            request, 'select_cell', True, response_data, game_id,
            index=index, result=result.value, level=state.current_level
        )

        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'select_cell', game_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'select_cell', False, error_response, game_id)
        return jsonify(error_response), 500


@game_bp.route('/game/<game_id>/summary', methods=['GET'])
@requires_game_service
def get_summary(game_id, game_service):
    """Get the end-of-game report for a session."""
    try:
        game_logger.log_user_action(request, 'get_summary', game_id)

        summary = game_service.get_game_summary(game_id)
        if summary is None:
            error_response = {
                'success': False,
                'error': 'Game not found'
            }
            game_logger.log_server_response(request, 'get_summary', False, error_response, game_id)
            return jsonify(error_response), 404

        response_data = {
            'success': True,
            'summary': summary
        }
        game_logger.log_server_response(request, 'get_summary', True, response_data, game_id)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_summary', game_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'get_summary', False, error_response, game_id)
        return jsonify(error_response), 500


@game_bp.route('/game/<game_id>', methods=['DELETE'])
@requires_game_service
def delete_game(game_id, game_service):
    """Abandon a game: stop its timers and remove the session."""
    try:
        game_logger.log_user_action(request, 'delete_game', game_id)

        success = game_service.delete_game(game_id)

        response_data = {
            'success': success
        }

        game_logger.log_server_response(request, 'delete_game', success, response_data, game_id)

        if success:
            game_logger.log_game_event(game_id, 'game_deleted')

        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'delete_game', game_id)
        error_response = {
            'success': False,
            'error': str(e)
        }
        game_logger.log_server_response(request, 'delete_game', False, error_response, game_id)
        return jsonify(error_response), 500


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        game_service = get_game_service()
        leaderboard = get_leaderboard_store()

        game_logger.log_user_action(request, 'health_check')

        response_data = {
            'status': 'healthy',
            'active_games': len(game_service.games) if game_service else 0,
            'session_stats': game_service.get_session_stats() if game_service else None,
            'leaderboard_entries': len(leaderboard) if leaderboard else 0,
            'log_stats': game_logger.get_log_stats()
        }

        game_logger.log_server_response(request, 'health_check', True, response_data)

        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        game_logger.log_server_response(request, 'health_check', False, error_response)
        return jsonify(error_response), 500
