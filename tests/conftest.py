import random

import pytest

from memory_matrix import create_app
from memory_matrix.config import TestingConfig
from memory_matrix.models.game import GameState
from memory_matrix.services.challenge_engine import ChallengeEngine
from memory_matrix.services.leaderboard_store import LeaderboardStore
from memory_matrix.services.scheduler import VirtualScheduler
from memory_matrix.services.storage import MemoryStorage


class FixedClock:
    """Hands out increasing ISO timestamps so entries are distinguishable."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return f"2026-01-01T00:{self.calls // 60 % 60:02d}:{self.calls % 60:02d}.000Z"


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def game_state():
    return GameState(player_name="Ada", game_active=True)


@pytest.fixture
def engine(game_state, scheduler, rng):
    return ChallengeEngine(game_state, scheduler, rng=rng)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def leaderboard(storage):
    return LeaderboardStore(storage, clock=FixedClock())


@pytest.fixture
def app_bundle(leaderboard, scheduler, rng):
    app, socketio = create_app(TestingConfig, leaderboard=leaderboard, scheduler=scheduler, rng=rng)
    return app, socketio


@pytest.fixture
def app(app_bundle):
    return app_bundle[0]


@pytest.fixture
def socketio(app_bundle):
    return app_bundle[1]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def game_service(app):
    return app.extensions['memory_matrix']['game_service']
