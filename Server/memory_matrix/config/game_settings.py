"""
Game Configuration Constants Module

This module defines the game rules for Memory Matrix: the difficulty curve
that turns a level number into grid size, sequence length, reveal speed and
time budget, plus the scoring weights and the memory badge table shown to
players. All game parameters are centralized here to enable easy modification.
"""

from typing import Dict, Final, List, Tuple

# Difficulty curve bounds
BASE_GRID_SIZE: Final[int] = 3
MAX_GRID_SIZE: Final[int] = 6
BASE_SEQUENCE_LENGTH: Final[int] = 3
MAX_SEQUENCE_LENGTH: Final[int] = 12
BASE_SHOW_SPEED_MS: Final[int] = 800
MIN_SHOW_SPEED_MS: Final[int] = 400
SHOW_SPEED_STEP_MS: Final[int] = 15
BASE_TIME_SECONDS: Final[int] = 35
MIN_TIME_SECONDS: Final[int] = 15

MAX_REDRAW_ATTEMPTS: Final[int] = 50
"""
Upper bound on redraws when avoiding two equal adjacent cells.
Once exhausted the duplicate is accepted instead of looping forever.
"""

# Scoring weights
LEVEL_POINTS: Final[int] = 100
TIME_POINTS: Final[int] = 10
STREAK_POINTS: Final[int] = 50
EFFICIENCY_POINTS_PER_LEVEL: Final[int] = 150

COUNTDOWN_INTERVAL_MS: Final[int] = 1000


def grid_size(level: int) -> int:
    """Side length of the N x N grid for a level."""
    return min(MAX_GRID_SIZE, BASE_GRID_SIZE + level // 4)


def sequence_length(level: int) -> int:
    """Number of cells revealed for a level."""
    return min(MAX_SEQUENCE_LENGTH, BASE_SEQUENCE_LENGTH + level // 2)


def show_speed(level: int) -> int:
    """Milliseconds each reveal step stays on screen."""
    return max(MIN_SHOW_SPEED_MS, BASE_SHOW_SPEED_MS - level * SHOW_SPEED_STEP_MS)


def max_time(level: int) -> int:
    """Seconds the player has to reproduce the pattern."""
    return max(MIN_TIME_SECONDS, BASE_TIME_SECONDS - level // 2)


# (min_level, max_level, badge, description)
MEMORY_LEVELS: Final[List[Tuple[int, int, str, str]]] = [
    (1, 2, "NEURAL ROOKIE", "Your memory journey begins!"),
    (3, 4, "SYNAPSE STARTER", "Building neural pathways..."),
    (5, 7, "COGNITIVE CADET", "Connections are strengthening!"),
    (8, 10, "PATTERN TRACKER", "Your focus is impressive!"),
    (11, 15, "MEMORY MAVEN", "Outstanding recall abilities!"),
    (16, 20, "NEURAL NINJA", "Elite pattern recognition!"),
    (21, 25, "COGNITIVE CHAMPION", "Exceptional mental prowess!"),
    (26, 30, "MEMORY MASTER", "Legendary cognitive skills!"),
    (31, 999, "NEURAL LEGEND", "Transcendent mental abilities!"),
]

# Checked from the highest threshold down
MEMORY_ASSESSMENTS: Final[List[Tuple[int, str]]] = [
    (25, "Extraordinary! Your memory is operating at an elite level."),
    (20, "Outstanding! Your memory skills are truly impressive."),
    (15, "Excellent work! Your pattern recognition is well above average."),
    (10, "Great job! Your focus and pattern recognition are steadily improving."),
    (7, "Well done! You're making solid progress with your memory training."),
    (5, "Good effort! Your memory is warming up beautifully."),
    (3, "Nice start! Every level completed strengthens your recall."),
    (1, "Great beginning! You've taken the first steps in memory training."),
]


def get_memory_badge(level: int) -> Dict[str, str]:
    """
    Looks up the memory badge for a level.

    Returns:
        dict: ``badge`` and ``description``; levels past the table fall back
        to a trainee badge.
    """
    for low, high, badge, description in MEMORY_LEVELS:
        if low <= level <= high:
            return {"badge": badge, "description": description}
    return {"badge": "NEURAL TRAINEE", "description": "Keep practicing!"}


def get_memory_assessment(level: int) -> str:
    for threshold, text in MEMORY_ASSESSMENTS:
        if level >= threshold:
            return text
    return MEMORY_ASSESSMENTS[-1][1]


def calculate_efficiency(level: int, score: int) -> int:
    """Rough percentage of the score a player could have earned by this level."""
    if level <= 1:
        return 0
    max_possible_score = level * EFFICIENCY_POINTS_PER_LEVEL
    return int(min(100, (score / max_possible_score) * 100) + 0.5)


def rank_title(rank: int) -> str:
    """Headline shown on the game-over screen for a leaderboard rank."""
    if rank < 1:
        return "NOT RANKED"
    if rank <= 3:
        medals = ["GOLD", "SILVER", "BRONZE"]
        return f"{medals[rank - 1]} - NEURAL ELITE RANK #{rank}!"
    if rank <= 10:
        return f"TOP 10 SPECIALIST - RANK #{rank}"
    return f"RANKED #{rank} IN NEURAL NETWORK"


def validate_difficulty_curve(max_level: int = 40) -> bool:
    """
    Validates that the difficulty curve stays inside its bounds.

    This function checks, for every level up to ``max_level``:
    1. Grid size never shrinks and stays within [3, 6]
    2. Sequence length never shrinks and stays within [3, 12]
    3. Reveal speed never slows down and never drops below the floor
    4. Time budget never grows and never drops below the floor

    Returns:
        bool: True if the curve passes all checks

    Raises:
        ValueError: If any check fails with detailed error message
    """
    previous = None
    for level in range(1, max_level + 1):
        current = (grid_size(level), sequence_length(level), show_speed(level), max_time(level))
        size, length, speed, seconds = current

        if not BASE_GRID_SIZE <= size <= MAX_GRID_SIZE:
            raise ValueError(f"Level {level} grid size {size} out of range")
        if not BASE_SEQUENCE_LENGTH <= length <= MAX_SEQUENCE_LENGTH:
            raise ValueError(f"Level {level} sequence length {length} out of range")
        if speed < MIN_SHOW_SPEED_MS:
            raise ValueError(f"Level {level} show speed {speed}ms below floor")
        if seconds < MIN_TIME_SECONDS:
            raise ValueError(f"Level {level} time budget {seconds}s below floor")

        if previous is not None:
            if size < previous[0] or length < previous[1]:
                raise ValueError(f"Level {level} is easier than level {level - 1}")
            if speed > previous[2] or seconds > previous[3]:
                raise ValueError(f"Level {level} is slower than level {level - 1}")
        previous = current

    return True


# Module initialization: Validate configuration on import
if __name__ == "__main__":

    try:
        validate_difficulty_curve()
        print(" Difficulty curve validation passed")

        for sample_level in (1, 5, 10, 20):
            print(f" Level {sample_level}: grid={grid_size(sample_level)} "
                  f"length={sequence_length(sample_level)} "
                  f"speed={show_speed(sample_level)}ms time={max_time(sample_level)}s")

        print(" All configuration validation checks passed")
    except ValueError as config_error:
        print(f" Configuration validation failed: {config_error}")
        exit(1)
