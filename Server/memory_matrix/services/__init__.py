"""
Services Package

Contains all business logic and service classes.
"""

from .challenge_engine import ChallengeEngine
from .game_service import GameService, get_game_service
from .leaderboard_store import LeaderboardStore, get_leaderboard_store
from .scheduler import Scheduler, SocketIOScheduler, VirtualScheduler
from .storage import FileStorage, MemoryStorage, StorageError, StoragePort

__all__ = [
    'ChallengeEngine', 'GameService', 'get_game_service',
    'LeaderboardStore', 'get_leaderboard_store',
    'Scheduler', 'SocketIOScheduler', 'VirtualScheduler',
    'FileStorage', 'MemoryStorage', 'StorageError', 'StoragePort'
]
