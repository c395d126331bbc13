"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class StepResult(Enum):
    """Outcome of a single cell selection, reported back to the caller."""
    STEP_CORRECT = "STEP_CORRECT"
    LEVEL_COMPLETE = "LEVEL_COMPLETE"
    LEVEL_FAILED = "LEVEL_FAILED"
    INVALID_STATE = "INVALID_STATE"


@dataclass
class Challenge:
    """One level's target sequence plus the player's progress against it."""
    level: int
    grid_size: int
    sequence: List[int]
    show_speed: int
    user_sequence: List[int] = field(default_factory=list)

    @property
    def cell_count(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def sequence_length(self) -> int:
        return len(self.sequence)

    @property
    def is_complete(self) -> bool:
        return len(self.user_sequence) == len(self.sequence)


@dataclass
class GameState:
    """Mutable per-session game state shared with the challenge engine."""
    player_name: str = ""
    current_level: int = 1
    score: int = 0
    streak: int = 0
    max_streak: int = 0
    time_left: int = 0
    max_time: int = 0
    game_active: bool = False
    showing_pattern: bool = False
    game_over: bool = False
    final_rank: Optional[int] = None

    @property
    def awaiting_input(self) -> bool:
        return self.game_active and not self.showing_pattern


@dataclass
class SessionView:
    """Client-facing session snapshot (never exposes the target sequence)."""
    game_id: str
    player_name: str
    current_level: int
    score: int
    streak: int
    max_streak: int
    time_left: int
    max_time: int
    game_active: bool
    showing_pattern: bool
    game_over: bool
    grid_size: int
    sequence_length: int
    show_speed: int
    progress: int
    badge: str
    estimated_rank: Optional[int] = None
    final_rank: Optional[int] = None


@dataclass
class SessionStats:
    """Aggregates across every finished game since the server started."""
    games_played: int = 0
    best_level: int = 0
    total_score: int = 0
