"""
Leaderboard Controller

Handles leaderboard queries, export and import over HTTP.
"""

from dataclasses import asdict
from flask import Blueprint, Response, request, jsonify
from ..services.leaderboard_store import get_leaderboard_store
from ..utils.decorators import require_service
from ..utils.game_logger import game_logger
from ..utils.helpers import parse_int

leaderboard_bp = Blueprint('leaderboard', __name__)

requires_leaderboard = require_service(get_leaderboard_store, 'Leaderboard', 'leaderboard')

EXPORT_FILENAME = 'memory_matrix_leaderboard.csv'


def _ranked(entries, start: int = 1):
    return [{'rank': position, **asdict(entry)} for position, entry in enumerate(entries, start=start)]


@leaderboard_bp.route('/leaderboard', methods=['GET'])
@requires_leaderboard
def get_leaderboard(leaderboard):
    """Top entries in rank order (``limit`` defaults to 10)."""
    try:
        limit = parse_int(request.args.get('limit'), 10)
        game_logger.log_user_action(request, 'get_leaderboard', limit=limit)

        response_data = {
            'success': True,
            'entries': _ranked(leaderboard.get_top_scores(limit)),
            'total': len(leaderboard)
        }
        game_logger.log_server_response(request, 'get_leaderboard', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_leaderboard')
        error_response = {'success': False, 'error': str(e)}
        game_logger.log_server_response(request, 'get_leaderboard', False, error_response)
        return jsonify(error_response), 500


@leaderboard_bp.route('/leaderboard/stats', methods=['GET'])
@requires_leaderboard
def get_leaderboard_stats(leaderboard):
    """Aggregate statistics across the whole board."""
    try:
        game_logger.log_user_action(request, 'get_leaderboard_stats')
        response_data = {
            'success': True,
            'stats': asdict(leaderboard.get_stats())
        }
        game_logger.log_server_response(request, 'get_leaderboard_stats', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_leaderboard_stats')
        error_response = {'success': False, 'error': str(e)}
        game_logger.log_server_response(request, 'get_leaderboard_stats', False, error_response)
        return jsonify(error_response), 500


@leaderboard_bp.route('/leaderboard/qualifies', methods=['GET'])
@requires_leaderboard
def check_qualifies(leaderboard):
    """Would a (level, score) result make it onto the board, and at which rank."""
    try:
        level = parse_int(request.args.get('level'), 0)
        score = parse_int(request.args.get('score'), -1)
        if level < 1 or score < 0:
            error_response = {
                'success': False,
                'error': 'level (>= 1) and score (>= 0) are required'
            }
            game_logger.log_server_response(request, 'check_qualifies', False, error_response)
            return jsonify(error_response), 400

        game_logger.log_user_action(request, 'check_qualifies', level=level, score=score)
        response_data = {
            'success': True,
            'qualifies': leaderboard.qualifies_for_leaderboard(level, score),
            'estimated_rank': leaderboard.estimate_rank(level, score)
        }
        game_logger.log_server_response(request, 'check_qualifies', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'check_qualifies')
        error_response = {'success': False, 'error': str(e)}
        game_logger.log_server_response(request, 'check_qualifies', False, error_response)
        return jsonify(error_response), 500


@leaderboard_bp.route('/leaderboard/player/<name>', methods=['GET'])
@requires_leaderboard
def get_player_best(name, leaderboard):
    """A player's best entry and its rank."""
    try:
        game_logger.log_user_action(request, 'get_player_best', player_name=name)

        best = leaderboard.get_player_best(name)
        if best is None:
            error_response = {'success': False, 'error': 'Player not found'}
            game_logger.log_server_response(request, 'get_player_best', False, error_response)
            return jsonify(error_response), 404

        response_data = {
            'success': True,
            'entry': asdict(best),
            'rank': leaderboard.get_player_rank(best.name, best.level, best.score)
        }
        game_logger.log_server_response(request, 'get_player_best', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_player_best')
        error_response = {'success': False, 'error': str(e)}
        game_logger.log_server_response(request, 'get_player_best', False, error_response)
        return jsonify(error_response), 500


@leaderboard_bp.route('/leaderboard/recent', methods=['GET'])
@requires_leaderboard
def get_recent(leaderboard):
    """Entries recorded in the last 24 hours."""
    try:
        hours = parse_int(request.args.get('hours'), 24)
        game_logger.log_user_action(request, 'get_recent_scores', hours=hours)

        response_data = {
            'success': True,
            'entries': [asdict(entry) for entry in leaderboard.get_recent_scores(hours=hours)]
        }
        game_logger.log_server_response(request, 'get_recent_scores', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'get_recent_scores')
        error_response = {'success': False, 'error': str(e)}
        game_logger.log_server_response(request, 'get_recent_scores', False, error_response)
        return jsonify(error_response), 500


@leaderboard_bp.route('/leaderboard/export', methods=['GET'])
@requires_leaderboard
def export_leaderboard(leaderboard):
    """Download the board in the CSV record format."""
    try:
        game_logger.log_user_action(request, 'export_leaderboard')
        snapshot = leaderboard.export_snapshot()
        game_logger.log_server_response(
            request, 'export_leaderboard', True, {'success': True}, entries=len(leaderboard)
        )
        return Response(
            snapshot,
            mimetype='text/csv',
            headers={'Content-Disposition': f'attachment; filename={EXPORT_FILENAME}'}
        )

    except Exception as e:
        game_logger.log_error(request, e, 'export_leaderboard')
        error_response = {'success': False, 'error': str(e)}
        game_logger.log_server_response(request, 'export_leaderboard', False, error_response)
        return jsonify(error_response), 500


@leaderboard_bp.route('/leaderboard/import', methods=['POST'])
@requires_leaderboard
def import_leaderboard(leaderboard):
    """Replace the board with an uploaded CSV snapshot (raw request body)."""
    try:
        text = request.get_data(as_text=True)
        game_logger.log_user_action(request, 'import_leaderboard', size=len(text))

        if not text.strip():
            error_response = {'success': False, 'error': 'Snapshot body is empty'}
            game_logger.log_server_response(request, 'import_leaderboard', False, error_response)
            return jsonify(error_response), 400

        if not leaderboard.import_snapshot(text):
            error_response = {'success': False, 'error': 'Snapshot could not be parsed'}
            game_logger.log_server_response(request, 'import_leaderboard', False, error_response)
            return jsonify(error_response), 400

        response_data = {'success': True, 'total': len(leaderboard)}
        game_logger.log_server_response(request, 'import_leaderboard', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'import_leaderboard')
        error_response = {'success': False, 'error': str(e)}
        game_logger.log_server_response(request, 'import_leaderboard', False, error_response)
        return jsonify(error_response), 500
