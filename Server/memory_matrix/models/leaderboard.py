"""
Leaderboard Data Models

Contains leaderboard entry and statistics data structures.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LeaderboardEntry:
    """One finished game on the leaderboard. Never mutated after creation."""
    name: str
    level: int
    score: int
    timestamp: str

    def sort_key(self):
        # Ascending key means best first: higher level, then higher score
        return (-self.level, -self.score)

    def outranks(self, level: int, score: int) -> bool:
        """True if this entry sorts strictly before a (level, score) pair."""
        return self.level > level or (self.level == level and self.score > score)


@dataclass
class LeaderboardStats:
    """Aggregate leaderboard statistics."""
    total_players: int = 0
    average_level: int = 0
    highest_level: int = 0
    total_games: int = 0
