"""
Leaderboard Store

Keeps the ranked list of finished games, computes ranks and statistics,
and writes the full snapshot through a storage port on every change.
"""

import csv
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from flask import current_app

from ..models.leaderboard import LeaderboardEntry, LeaderboardStats
from ..utils.game_logger import game_logger
from ..utils.helpers import round_half_up, sanitize_name
from ..utils.record_format import parse_entries, parse_timestamp, serialize_entries, utc_now_iso
from .storage import MemoryStorage, StorageError, StoragePort

DEFAULT_MAX_ENTRIES = 100


class LeaderboardStore:
    """
    Sorted, capped collection of leaderboard entries.

    The list is always ordered by level descending then score descending.
    Sorting is stable, so among equal (level, score) pairs the entry that
    was recorded first keeps the better rank.

    Mutations hold a lock: with several clients submitting at once, rank
    assignment and truncation must see one consistent list.
    """

    def __init__(self,
                 storage: Optional[StoragePort] = None,
                 max_entries: int = DEFAULT_MAX_ENTRIES,
                 clock: Optional[Callable[[], str]] = None):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.storage = storage if storage is not None else MemoryStorage()
        self.max_entries = max_entries
        self.clock = clock or utc_now_iso
        self.scores: List[LeaderboardEntry] = []
        self._lock = threading.RLock()

    def load(self) -> None:
        """
        Replaces the in-memory board with the stored snapshot.

        A missing snapshot starts an empty board. A storage failure is
        logged and also leaves the board empty.
        """
        with self._lock:
            try:
                text = self.storage.load()
            except StorageError as e:
                game_logger.logger.error(f"Error loading leaderboard: {e}")
                text = None

            if text is None:
                self.scores = []
                game_logger.logger.info("No existing leaderboard found, starting fresh")
                return

            self.scores = self._sorted(parse_entries(text))[:self.max_entries]
            game_logger.logger.info(f"Loaded {len(self.scores)} scores from storage")

    def add_score(self, name: str, level: int, score: int) -> int:
        """
        Records a finished game.

        Args:
            name: Raw player name, sanitized before storing
            level: Level reached (1 or higher)
            score: Points earned (0 or higher)

        Returns:
            int: 1-based rank of the new entry, or -1 if the cap evicted it
        """
        if level < 1:
            raise ValueError(f"Level must be at least 1, got {level}")
        if score < 0:
            raise ValueError(f"Score must not be negative, got {score}")

        entry = LeaderboardEntry(
            name=sanitize_name(name),
            level=level,
            score=score,
            timestamp=self.clock()
        )

        with self._lock:
            self.scores = self._sorted(self.scores + [entry])[:self.max_entries]
            self._persist()
            rank = self._rank_of(entry)

        game_logger.log_game_event(
            None, 'score_recorded', entry.name,
            level=level, score=score, rank=rank, board_size=len(self.scores)
        )
        return rank

    def _rank_of(self, entry: LeaderboardEntry) -> int:
        # Identity, not equality: an identical older entry must not steal the rank
        for position, existing in enumerate(self.scores, start=1):
            if existing is entry:
                return position
        return -1

    def get_player_rank(self, name: str, level: int, score: int) -> int:
        """1-based rank of the first entry matching name, level and score, or -1."""
        with self._lock:
            for position, entry in enumerate(self.scores, start=1):
                if entry.name == name and entry.level == level and entry.score == score:
                    return position
        return -1

    def get_top_scores(self, limit: int = 10) -> List[LeaderboardEntry]:
        with self._lock:
            return list(self.scores[:max(0, limit)])

    def get_stats(self) -> LeaderboardStats:
        """Distinct players, rounded mean level, highest level and total games."""
        with self._lock:
            if not self.scores:
                return LeaderboardStats()

            levels = [entry.level for entry in self.scores]
            return LeaderboardStats(
                total_players=len({entry.name for entry in self.scores}),
                average_level=round_half_up(sum(levels) / len(levels)),
                highest_level=max(levels),
                total_games=len(self.scores)
            )

    def qualifies_for_leaderboard(self, level: int, score: int) -> bool:
        """True if the board has room or (level, score) beats the lowest entry."""
        with self._lock:
            if len(self.scores) < self.max_entries:
                return True
            worst = self.scores[-1]
            return level > worst.level or (level == worst.level and score > worst.score)

    def estimate_rank(self, level: int, score: int) -> int:
        """Rank a (level, score) pair would hold right now, for live progress display."""
        with self._lock:
            return sum(1 for entry in self.scores if entry.outranks(level, score)) + 1

    def get_player_best(self, name: str) -> Optional[LeaderboardEntry]:
        with self._lock:
            for entry in self.scores:
                if entry.name == name:
                    return entry
        return None

    def get_recent_scores(self, hours: int = 24, limit: int = 10) -> List[LeaderboardEntry]:
        """Entries recorded within the last ``hours``, in rank order."""
        cutoff = datetime.now(timezone.utc) - timedelta(hours=hours)
        with self._lock:
            recent = []
            for entry in self.scores:
                recorded = parse_timestamp(entry.timestamp)
                if recorded is not None and recorded > cutoff:
                    recent.append(entry)
            return recent[:limit]

    def export_snapshot(self) -> str:
        """Serialized board in the record format, for download or backup."""
        with self._lock:
            return serialize_entries(self.scores)

    def import_snapshot(self, text: str) -> bool:
        """
        Replaces the board with a snapshot and persists it.

        Returns:
            bool: False if the text could not be parsed, True otherwise
        """
        try:
            entries = parse_entries(text)
        except (csv.Error, ValueError) as e:
            game_logger.logger.error(f"Error importing leaderboard data: {e}")
            return False

        with self._lock:
            self.scores = self._sorted(entries)[:self.max_entries]
            self._persist()
        game_logger.logger.info(f"Imported {len(self.scores)} leaderboard entries")
        return True

    def clear(self) -> None:
        with self._lock:
            self.scores = []
            try:
                self.storage.clear()
            except StorageError as e:
                game_logger.logger.error(f"Error clearing leaderboard storage: {e}")
        game_logger.logger.info("All leaderboard data cleared")

    def _persist(self) -> None:
        # In-memory board stays authoritative when storage fails
        try:
            self.storage.save(serialize_entries(self.scores))
        except StorageError as e:
            game_logger.logger.error(f"Error saving leaderboard: {e}")

    @staticmethod
    def _sorted(entries: List[LeaderboardEntry]) -> List[LeaderboardEntry]:
        return sorted(entries, key=LeaderboardEntry.sort_key)

    def __len__(self) -> int:
        return len(self.scores)


def get_leaderboard_store() -> Optional[LeaderboardStore]:
    """Get the leaderboard store registered on the current Flask app."""
    return current_app.extensions.get('memory_matrix', {}).get('leaderboard')
