"""
Game Service

Runs Memory Matrix sessions: wires a challenge engine to each game,
applies scoring and streak rules, advances levels, and hands finished
games to the leaderboard.
"""

import random
import threading
import uuid
from collections import deque
from dataclasses import asdict
from typing import Callable, Dict, Optional, Tuple

from flask import current_app

from ..config.game_settings import (
    calculate_efficiency, get_memory_assessment, get_memory_badge, rank_title
)
from ..models.game import GameState, SessionStats, SessionView, StepResult
from ..utils.game_logger import game_logger
from ..utils.helpers import sanitize_name
from .challenge_engine import ChallengeEngine
from .leaderboard_store import LeaderboardStore
from .scheduler import Scheduler, SerializedScheduler, TimerHandle

EmitFn = Callable[[str, Dict, str], None]


def _no_emit(event: str, data: Dict, room: str) -> None:
    pass


class GameSession:
    """One player's game: its state, its engine and the pending level timer."""

    def __init__(self, game_id: str, state: GameState, engine: ChallengeEngine):
        self.game_id = game_id
        self.state = state
        self.engine = engine
        self.pending: Optional[TimerHandle] = None


class GameService:
    """
    Core game service managing multiple game sessions.

    This class handles:
    - Session management with unique game IDs
    - Level progression with delays between levels and before each reveal
    - Scoring, streak and max-streak bookkeeping
    - Submitting the final result to the leaderboard on game over

    Timer callbacks and requests both mutate sessions, so everything runs
    under one re-entrant lock; the scheduler handed to each engine takes
    the same lock before firing.
    """

    def __init__(self,
                 leaderboard: LeaderboardStore,
                 scheduler: Scheduler,
                 emit: Optional[EmitFn] = None,
                 rng: Optional[random.Random] = None,
                 pattern_start_delay_ms: int = 1000,
                 next_level_delay_ms: int = 2000,
                 finished_games_retained: int = 100):
        self.leaderboard = leaderboard
        self.lock = threading.RLock()
        self.scheduler = SerializedScheduler(scheduler, self.lock)
        self.emit = emit or _no_emit
        self.rng = rng or random.Random()
        self.pattern_start_delay_ms = pattern_start_delay_ms
        self.next_level_delay_ms = next_level_delay_ms
        self.games: Dict[str, GameSession] = {}
        self.session_stats = SessionStats()
        self.finished_games_retained = finished_games_retained
        self._finished: deque = deque()

    def create_new_game(self, player_name: str) -> str:
        """
        Creates a new game session and starts level 1.

        Args:
            player_name: Name shown on the leaderboard, sanitized like leaderboard names; must not be blank

        Returns:
            str: Unique game ID for this session
        """
        if not player_name or not player_name.strip():
            raise ValueError("Player name is required")

        game_id = str(uuid.uuid4())
        state = GameState(player_name=sanitize_name(player_name), game_active=True)

        with self.lock:
            session = GameSession(game_id, state, None)
            session.engine = ChallengeEngine(
                state,
                self.scheduler,
                rng=self.rng,
                on_tick=lambda time_left: self._on_tick(session, time_left),
                on_timeout=lambda result: self._on_timeout(session, result)
            )
            self.games[game_id] = session
            game_logger.log_game_event(game_id, 'game_started', state.player_name)
            self._start_level(session)

        return game_id

    def _start_level(self, session: GameSession) -> None:
        state = session.state
        if not state.game_active or state.game_over:
            return

        challenge = session.engine.generate(state.current_level)
        self.emit('challenge_started', {
            'level': challenge.level,
            'grid_size': challenge.grid_size,
            'sequence_length': challenge.sequence_length,
            'show_speed': challenge.show_speed,
            'max_time': state.max_time
        }, session.game_id)

        session.pending = self.scheduler.call_later(
            self.pattern_start_delay_ms, lambda: self._reveal(session, challenge)
        )

    def _reveal(self, session: GameSession, challenge) -> None:
        session.pending = None
        if session.engine.challenge is not challenge or not session.state.game_active:
            return

        game_id = session.game_id
        session.engine.reveal(
            on_step=lambda step, cell: self.emit('reveal_step', {'step': step, 'cell': cell}, game_id),
            on_complete=lambda: self.emit('input_phase', {'time_left': session.state.time_left}, game_id)
        )

    def select_cell(self, game_id: str, index: int) -> Optional[Tuple[StepResult, SessionView]]:
        """
        Processes one cell click for a game.

        Returns:
            (StepResult, SessionView) or None if the game does not exist
        """
        with self.lock:
            session = self.games.get(game_id)
            if session is None:
                return None

            result = session.engine.submit(index)

            if result == StepResult.INVALID_STATE:
                game_logger.log_game_event(
                    game_id, 'invalid_input', session.state.player_name,
                    index=index, showing_pattern=session.state.showing_pattern,
                    game_active=session.state.game_active
                )
            elif result == StepResult.STEP_CORRECT:
                self.emit('step_result', {'result': result.value, 'index': index}, game_id)
            elif result == StepResult.LEVEL_COMPLETE:
                self._complete_level(session)
            else:
                self._fail_level(session, 'wrong_cell', index=index)

            return result, self._build_view(session)

    def _complete_level(self, session: GameSession) -> None:
        state = session.state
        level_score = ChallengeEngine.score_level(state)
        state.score += level_score
        state.streak += 1
        state.max_streak = max(state.max_streak, state.streak)

        game_logger.log_game_event(
            session.game_id, 'level_complete', state.player_name,
            level=state.current_level, level_score=level_score,
            time_left=state.time_left, streak=state.streak
        )
        self.emit('level_complete', {
            'level': state.current_level,
            'level_score': level_score,
            'score': state.score,
            'streak': state.streak
        }, session.game_id)

        session.pending = self.scheduler.call_later(
            self.next_level_delay_ms, lambda: self._advance_level(session)
        )

    def _advance_level(self, session: GameSession) -> None:
        session.pending = None
        if session.game_id not in self.games or session.state.game_over:
            return
        session.state.current_level += 1
        session.state.game_active = True
        self._start_level(session)

    def _fail_level(self, session: GameSession, reason: str, **details) -> None:
        state = session.state
        state.streak = 0

        game_logger.log_game_event(
            session.game_id, 'level_failed', state.player_name,
            level=state.current_level, reason=reason, **details
        )
        self.emit('level_failed', {'level': state.current_level, 'reason': reason}, session.game_id)
        self._finish_game(session)

    def _finish_game(self, session: GameSession) -> None:
        state = session.state
        session.engine.stop()
        self.scheduler.cancel(session.pending)
        session.pending = None

        state.game_active = False
        state.showing_pattern = False
        state.game_over = True

        self.session_stats.games_played += 1
        self.session_stats.best_level = max(self.session_stats.best_level, state.current_level)
        self.session_stats.total_score += state.score

        state.final_rank = self.leaderboard.add_score(state.player_name, state.current_level, state.score)

        game_logger.log_game_event(
            session.game_id, 'game_over', state.player_name,
            level=state.current_level, score=state.score,
            max_streak=state.max_streak, rank=state.final_rank
        )
        self.emit('game_over', self.get_game_summary(session.game_id), session.game_id)
        self._retain_finished(session.game_id)

    def _retain_finished(self, game_id: str) -> None:
        """Keeps the most recent finished sessions and forgets older ones."""
        self._finished.append(game_id)
        while len(self._finished) > max(1, self.finished_games_retained):
            expired = self._finished.popleft()
            if self.games.pop(expired, None) is not None:
                game_logger.log_game_event(expired, 'game_expired')

    def _on_tick(self, session: GameSession, time_left: int) -> None:
        self.emit('tick', {'time_left': time_left}, session.game_id)

    def _on_timeout(self, session: GameSession, result: StepResult) -> None:
        if session.game_id not in self.games:
            return
        self._fail_level(session, 'timeout')

    def get_game_state(self, game_id: str) -> Optional[SessionView]:
        """
        Returns the current session view (never includes the target sequence).

        Args:
            game_id: Unique game identifier

        Returns:
            SessionView or None if game not found
        """
        with self.lock:
            session = self.games.get(game_id)
            if session is None:
                return None
            return self._build_view(session)

    def _build_view(self, session: GameSession) -> SessionView:
        state = session.state
        challenge = session.engine.challenge
        estimated_rank = None
        if not state.game_over:
            estimated_rank = self.leaderboard.estimate_rank(state.current_level, state.score)

        return SessionView(
            game_id=session.game_id,
            player_name=state.player_name,
            current_level=state.current_level,
            score=state.score,
            streak=state.streak,
            max_streak=state.max_streak,
            time_left=state.time_left,
            max_time=state.max_time,
            game_active=state.game_active,
            showing_pattern=state.showing_pattern,
            game_over=state.game_over,
            grid_size=challenge.grid_size if challenge else 0,
            sequence_length=challenge.sequence_length if challenge else 0,
            show_speed=challenge.show_speed if challenge else 0,
            progress=len(challenge.user_sequence) if challenge else 0,
            badge=get_memory_badge(state.current_level)['badge'],
            estimated_rank=estimated_rank,
            final_rank=state.final_rank
        )

    def get_game_summary(self, game_id: str) -> Optional[Dict]:
        """End-of-game report: level, score, streak, efficiency, badge and rank."""
        with self.lock:
            session = self.games.get(game_id)
            if session is None:
                return None

            state = session.state
            badge = get_memory_badge(state.current_level)
            return {
                'game_id': game_id,
                'player_name': state.player_name,
                'level': state.current_level,
                'score': state.score,
                'max_streak': state.max_streak,
                'efficiency': calculate_efficiency(state.current_level, state.score),
                'badge': badge['badge'],
                'badge_description': badge['description'],
                'assessment': get_memory_assessment(state.current_level),
                'rank': state.final_rank,
                'rank_title': rank_title(state.final_rank) if state.final_rank is not None else None,
                'leaderboard_size': len(self.leaderboard),
                'game_over': state.game_over
            }

    def get_session_stats(self) -> Dict:
        with self.lock:
            return asdict(self.session_stats)

    def delete_game(self, game_id: str) -> bool:
        """
        Stops every timer of a session and removes it from memory.

        Args:
            game_id: Unique game identifier

        Returns:
            bool: True if game was deleted, False if not found
        """
        with self.lock:
            session = self.games.pop(game_id, None)
            if session is None:
                return False
            session.engine.stop()
            self.scheduler.cancel(session.pending)
            session.pending = None
            session.state.game_active = False
            return True


def get_game_service() -> Optional[GameService]:
    """Get the game service registered on the current Flask app."""
    return current_app.extensions.get('memory_matrix', {}).get('game_service')
