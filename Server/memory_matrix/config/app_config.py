"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env
load_dotenv('memory_matrix/config/config.env')


class Config:
    """Base configuration class with all settings."""

    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))

    # Leaderboard Settings
    # Empty LEADERBOARD_FILE keeps the board in memory only
    LEADERBOARD_FILE = os.getenv('LEADERBOARD_FILE', 'memory_matrix_leaderboard.csv')
    LEADERBOARD_MAX_ENTRIES = int(os.getenv('LEADERBOARD_MAX_ENTRIES', 100))

    # Pacing Settings (milliseconds)
    PATTERN_START_DELAY_MS = int(os.getenv('PATTERN_START_DELAY_MS', 1000))
    NEXT_LEVEL_DELAY_MS = int(os.getenv('NEXT_LEVEL_DELAY_MS', 2000))

    # Finished sessions kept for summary/state lookups before the oldest is dropped
    FINISHED_GAMES_RETAINED = int(os.getenv('FINISHED_GAMES_RETAINED', 100))

    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    LEADERBOARD_FILE = ''


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
