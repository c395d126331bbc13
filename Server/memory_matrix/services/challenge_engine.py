"""
Challenge Engine

Generates the cell sequence for a level, replays it through the scheduler,
runs the input countdown and checks each selection against the sequence.
"""

import random
from typing import Callable, Optional

from ..config.game_settings import (
    COUNTDOWN_INTERVAL_MS, LEVEL_POINTS, MAX_REDRAW_ATTEMPTS, STREAK_POINTS, TIME_POINTS,
    grid_size, max_time, sequence_length, show_speed
)
from ..models.game import Challenge, GameState, StepResult
from ..utils.game_logger import game_logger
from .scheduler import Scheduler, TimerHandle


class ChallengeEngine:
    """
    State machine for one player's level attempts.

    Phases, tracked on the shared GameState:
    - showing pattern: ``showing_pattern`` is set, input is rejected
    - awaiting input: active and not showing, the countdown is running
    - resolved: ``game_active`` cleared after LEVEL_COMPLETE or LEVEL_FAILED

    Every timer callback carries the epoch it was scheduled in; ``stop``
    and ``generate`` bump the epoch so stale callbacks become no-ops.
    """

    def __init__(self,
                 game_state: GameState,
                 scheduler: Scheduler,
                 rng: Optional[random.Random] = None,
                 on_tick: Optional[Callable[[int], None]] = None,
                 on_timeout: Optional[Callable[[StepResult], None]] = None):
        self.game_state = game_state
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.on_tick = on_tick
        self.on_timeout = on_timeout
        self.challenge: Optional[Challenge] = None
        self._epoch = 0
        self._reveal_timer: Optional[TimerHandle] = None
        self._countdown_timer: Optional[TimerHandle] = None

    def generate(self, level: int) -> Challenge:
        """
        Creates a fresh challenge for a level.

        Args:
            level: Difficulty level, 1 or higher

        Returns:
            Challenge with an empty user sequence; the game state is put in
            the showing-pattern phase with a full time budget.
        """
        if level < 1:
            raise ValueError(f"Level must be at least 1, got {level}")

        self.stop()

        size = grid_size(level)
        self.challenge = Challenge(
            level=level,
            grid_size=size,
            sequence=self._generate_sequence(size * size, sequence_length(level)),
            show_speed=show_speed(level)
        )

        self.game_state.max_time = max_time(level)
        self.game_state.time_left = self.game_state.max_time
        self.game_state.showing_pattern = True

        game_logger.logger.info(
            f"Level {level}: Grid {size}x{size}, Sequence {self.challenge.sequence_length}, "
            f"Speed {self.challenge.show_speed}ms, Time {self.game_state.max_time}s"
        )
        return self.challenge

    def _generate_sequence(self, cell_count: int, length: int):
        sequence = []
        for _ in range(length):
            candidate = self.rng.randrange(cell_count)
            if sequence and cell_count > 1:
                attempts = 0
                while candidate == sequence[-1] and attempts < MAX_REDRAW_ATTEMPTS:
                    candidate = self.rng.randrange(cell_count)
                    attempts += 1
                if candidate == sequence[-1]:
                    game_logger.logger.debug(
                        f"Redraw limit reached, accepting repeated cell {candidate}"
                    )
            sequence.append(candidate)
        return sequence

    def reveal(self,
               on_step: Optional[Callable[[int, int], None]] = None,
               on_complete: Optional[Callable[[], None]] = None) -> None:
        """
        Plays the sequence back one cell at a time.

        Step 0 is reported immediately and each later step ``show_speed``
        milliseconds after the previous one. One interval after the last
        step the engine switches to the input phase, starts the countdown
        and calls ``on_complete``.
        """
        if self.challenge is None:
            raise RuntimeError("No challenge generated")

        epoch = self._epoch
        challenge = self.challenge
        self.game_state.showing_pattern = True

        def show_step(step: int) -> None:
            self._reveal_timer = None
            if not self._is_current(epoch):
                return
            if step < challenge.sequence_length:
                if on_step:
                    on_step(step, challenge.sequence[step])
                self._reveal_timer = self.scheduler.call_later(
                    challenge.show_speed, lambda: show_step(step + 1)
                )
            else:
                self.begin_input()
                if on_complete:
                    on_complete()

        show_step(0)

    def begin_input(self) -> None:
        """Ends the reveal phase and starts the per-second countdown."""
        self.game_state.showing_pattern = False
        self._cancel_countdown()
        self._schedule_tick(self._epoch)

    def _schedule_tick(self, epoch: int) -> None:
        self._countdown_timer = self.scheduler.call_later(
            COUNTDOWN_INTERVAL_MS, lambda: self._tick(epoch)
        )

    def _tick(self, epoch: int) -> None:
        self._countdown_timer = None
        if not self._is_current(epoch) or not self.game_state.awaiting_input:
            return

        self.game_state.time_left = max(0, self.game_state.time_left - 1)
        if self.on_tick:
            self.on_tick(self.game_state.time_left)

        if self.game_state.time_left <= 0:
            game_logger.logger.info(f"Level {self.challenge.level}: time ran out")
            result = self._resolve(StepResult.LEVEL_FAILED)
            if self.on_timeout:
                self.on_timeout(result)
        else:
            self._schedule_tick(epoch)

    def submit(self, index: int) -> StepResult:
        """
        Checks one cell selection against the expected sequence.

        Returns:
            StepResult.INVALID_STATE without mutating anything when the
            engine is not awaiting input or the index is off the grid;
            otherwise STEP_CORRECT, LEVEL_COMPLETE or LEVEL_FAILED.
        """
        challenge = self.challenge
        if challenge is None or not self.game_state.awaiting_input:
            return StepResult.INVALID_STATE
        if challenge.is_complete:
            return StepResult.INVALID_STATE
        if not isinstance(index, int) or not 0 <= index < challenge.cell_count:
            return StepResult.INVALID_STATE

        challenge.user_sequence.append(index)
        expected = challenge.sequence[len(challenge.user_sequence) - 1]

        if index != expected:
            return self._resolve(StepResult.LEVEL_FAILED)
        if challenge.is_complete:
            return self._resolve(StepResult.LEVEL_COMPLETE)
        return StepResult.STEP_CORRECT

    def _resolve(self, result: StepResult) -> StepResult:
        # Countdown must be gone before the caller sees the transition
        self._cancel_countdown()
        self.game_state.game_active = False
        return result

    @staticmethod
    def score_level(game_state: GameState) -> int:
        """Points for clearing the current level with the time left and streak so far."""
        return (game_state.current_level * LEVEL_POINTS
                + game_state.time_left * TIME_POINTS
                + game_state.streak * STREAK_POINTS)

    def stop(self) -> None:
        """Cancels the pending reveal step and the countdown, invalidating every outstanding callback."""
        self._epoch += 1
        self.scheduler.cancel(self._reveal_timer)
        self._reveal_timer = None
        self._cancel_countdown()

    def _cancel_countdown(self) -> None:
        self.scheduler.cancel(self._countdown_timer)
        self._countdown_timer = None

    def _is_current(self, epoch: int) -> bool:
        return epoch == self._epoch and self.game_state.game_active
