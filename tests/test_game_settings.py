import pytest

from memory_matrix.config.game_settings import (
    calculate_efficiency, get_memory_assessment, get_memory_badge, grid_size, max_time,
    rank_title, sequence_length, show_speed, validate_difficulty_curve
)


def test_level_five_example() -> None:
    assert grid_size(5) == 4
    assert sequence_length(5) == 5
    assert show_speed(5) == 725
    assert max_time(5) == 33


@pytest.mark.parametrize("level", range(1, 61))
def test_difficulty_formulas(level: int) -> None:
    assert grid_size(level) == min(6, 3 + level // 4)
    assert sequence_length(level) == min(12, 3 + level // 2)
    assert show_speed(level) == max(400, 800 - 15 * level)
    assert max_time(level) == max(15, 35 - level // 2)


def test_curve_caps_at_high_levels() -> None:
    assert grid_size(100) == 6
    assert sequence_length(100) == 12
    assert show_speed(100) == 400
    assert max_time(100) == 15


def test_validate_difficulty_curve() -> None:
    assert validate_difficulty_curve(80) is True


def test_memory_badges() -> None:
    assert get_memory_badge(1)["badge"] == "NEURAL ROOKIE"
    assert get_memory_badge(6)["badge"] == "COGNITIVE CADET"
    assert get_memory_badge(40)["badge"] == "NEURAL LEGEND"
    assert get_memory_badge(0)["badge"] == "NEURAL TRAINEE"


def test_memory_assessment_thresholds() -> None:
    assert get_memory_assessment(25).startswith("Extraordinary")
    assert get_memory_assessment(9).startswith("Well done")
    assert get_memory_assessment(1).startswith("Great beginning")


def test_efficiency() -> None:
    assert calculate_efficiency(1, 500) == 0
    assert calculate_efficiency(2, 150) == 50
    assert calculate_efficiency(2, 10_000) == 100


def test_rank_title_tiers() -> None:
    assert "GOLD" in rank_title(1)
    assert "BRONZE" in rank_title(3)
    assert rank_title(7) == "TOP 10 SPECIALIST - RANK #7"
    assert rank_title(42) == "RANKED #42 IN NEURAL NETWORK"
    assert rank_title(-1) == "NOT RANKED"
