"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import Challenge, GameState, SessionStats, SessionView, StepResult
from .leaderboard import LeaderboardEntry, LeaderboardStats

__all__ = [
    'Challenge', 'GameState', 'SessionStats', 'SessionView', 'StepResult',
    'LeaderboardEntry', 'LeaderboardStats'
]
