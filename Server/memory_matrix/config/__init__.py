"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Difficulty curve, scoring and badges (business logic)
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    grid_size, sequence_length, show_speed, max_time,
    get_memory_badge, calculate_efficiency, validate_difficulty_curve
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'grid_size', 'sequence_length', 'show_speed', 'max_time',
    'get_memory_badge', 'calculate_efficiency', 'validate_difficulty_curve'
]
