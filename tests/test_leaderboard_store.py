import random
from datetime import datetime, timedelta, timezone

import pytest

from memory_matrix.models.leaderboard import LeaderboardStats
from memory_matrix.services.leaderboard_store import LeaderboardStore
from memory_matrix.services.storage import FileStorage, MemoryStorage, StorageError, StoragePort


class BrokenStorage(StoragePort):
    def load(self):
        raise StorageError("disk on fire")

    def save(self, text):
        raise StorageError("disk full")

    def clear(self):
        raise StorageError("read-only")


def assert_sorted(entries) -> None:
    for a, b in zip(entries, entries[1:]):
        assert a.level > b.level or (a.level == b.level and a.score >= b.score)


def test_add_score_sanitizes_and_ranks_first(leaderboard) -> None:
    rank = leaderboard.add_score("Al,ice", 7, 1200)

    assert rank == 1
    assert leaderboard.scores[0].name == "Alice"
    assert leaderboard.scores[0].level == 7
    assert leaderboard.scores[0].score == 1200


@pytest.mark.parametrize("raw, expected", [
    ('  "Bob"  ', "Bob"),
    ("a\r\nb", "ab"),
    ("", "Anonymous"),
    (' ,"", ', "Anonymous"),
    ("x" * 30, "x" * 20),
])
def test_name_sanitization(leaderboard, raw, expected) -> None:
    leaderboard.add_score(raw, 1, 0)
    assert leaderboard.scores[0].name == expected


def test_ordering_level_then_score(leaderboard) -> None:
    leaderboard.add_score("a", 3, 100)
    leaderboard.add_score("b", 5, 10)
    leaderboard.add_score("c", 3, 900)
    rank = leaderboard.add_score("d", 4, 0)

    assert [e.name for e in leaderboard.scores] == ["b", "d", "c", "a"]
    assert rank == 2


def test_random_inserts_stay_sorted(leaderboard) -> None:
    rng = random.Random(7)
    for i in range(150):
        leaderboard.add_score(f"p{i}", rng.randint(1, 20), rng.randint(0, 5000))

    assert len(leaderboard) == 100
    assert_sorted(leaderboard.scores)


def test_ties_keep_earlier_entry_ahead(leaderboard) -> None:
    leaderboard.add_score("first", 4, 400)
    rank = leaderboard.add_score("second", 4, 400)

    assert rank == 2
    assert [e.name for e in leaderboard.scores] == ["first", "second"]


def test_identical_resubmission_gets_its_own_rank(leaderboard) -> None:
    assert leaderboard.add_score("same", 2, 200) == 1
    assert leaderboard.add_score("same", 2, 200) == 2


def test_cap_drops_lowest_ranked(storage) -> None:
    board = LeaderboardStore(storage, max_entries=3)
    board.add_score("a", 5, 0)
    board.add_score("b", 4, 0)
    board.add_score("c", 3, 0)

    rank = board.add_score("d", 6, 0)

    assert rank == 1
    assert [e.name for e in board.scores] == ["d", "a", "b"]


def test_entry_below_full_board_is_evicted(storage) -> None:
    board = LeaderboardStore(storage, max_entries=2)
    board.add_score("a", 5, 0)
    board.add_score("b", 4, 0)

    assert board.add_score("c", 1, 0) == -1
    assert len(board) == 2


def test_every_insert_persists_snapshot(leaderboard, storage) -> None:
    leaderboard.add_score("a", 1, 10)
    leaderboard.add_score("b", 2, 20)

    assert storage.save_count == 2
    assert storage.text == leaderboard.export_snapshot()
    assert storage.text.splitlines()[0] == "name,level,score,timestamp"


def test_get_top_scores_is_prefix(leaderboard) -> None:
    for i in range(5):
        leaderboard.add_score(f"p{i}", i + 1, 0)

    top = leaderboard.get_top_scores(3)
    assert top == leaderboard.scores[:3]
    assert leaderboard.get_top_scores(50) == leaderboard.scores
    assert leaderboard.get_top_scores(0) == []


def test_stats(leaderboard) -> None:
    assert leaderboard.get_stats() == LeaderboardStats(0, 0, 0, 0)

    leaderboard.add_score("a", 2, 0)
    leaderboard.add_score("a", 3, 0)
    leaderboard.add_score("b", 6, 0)

    stats = leaderboard.get_stats()
    assert stats.total_players == 2
    assert stats.average_level == 4  # 11 / 3 = 3.67
    assert stats.highest_level == 6
    assert stats.total_games == 3


def test_stats_average_rounds_half_up(leaderboard) -> None:
    leaderboard.add_score("a", 2, 0)
    leaderboard.add_score("b", 3, 0)
    assert leaderboard.get_stats().average_level == 3


def test_qualifies_for_leaderboard(storage) -> None:
    board = LeaderboardStore(storage, max_entries=2)
    assert board.qualifies_for_leaderboard(1, 0)

    board.add_score("a", 5, 500)
    board.add_score("b", 3, 300)

    assert board.qualifies_for_leaderboard(4, 0)
    assert board.qualifies_for_leaderboard(3, 301)
    assert not board.qualifies_for_leaderboard(3, 300)
    assert not board.qualifies_for_leaderboard(2, 9999)


def test_estimate_rank(leaderboard) -> None:
    leaderboard.add_score("a", 5, 500)
    leaderboard.add_score("b", 3, 300)

    assert leaderboard.estimate_rank(6, 0) == 1
    assert leaderboard.estimate_rank(3, 300) == 2
    assert leaderboard.estimate_rank(1, 0) == 3


def test_player_best_and_rank(leaderboard) -> None:
    leaderboard.add_score("ada", 2, 100)
    leaderboard.add_score("bob", 9, 100)
    leaderboard.add_score("ada", 4, 100)

    best = leaderboard.get_player_best("ada")
    assert best.level == 4
    assert leaderboard.get_player_rank("ada", 4, 100) == 2
    assert leaderboard.get_player_best("nobody") is None
    assert leaderboard.get_player_rank("nobody", 1, 1) == -1


def test_recent_scores(storage) -> None:
    old = (datetime.now(timezone.utc) - timedelta(days=3)).isoformat()
    storage.save(f"name,level,score,timestamp\nold,9,900,{old}\n")
    board = LeaderboardStore(storage)
    board.load()
    board.add_score("new", 1, 10)

    assert [e.name for e in board.get_recent_scores()] == ["new"]


def test_round_trip_preserves_order(leaderboard) -> None:
    rng = random.Random(3)
    for i in range(20):
        leaderboard.add_score(f"player {i}", rng.randint(1, 8), rng.randint(0, 3000))

    restored = LeaderboardStore(MemoryStorage(leaderboard.export_snapshot()))
    restored.load()

    assert restored.scores == leaderboard.scores


def test_load_missing_source_starts_empty() -> None:
    board = LeaderboardStore(MemoryStorage())
    board.load()
    assert len(board) == 0


def test_load_recovers_malformed_rows() -> None:
    snapshot = (
        "name,level,score,timestamp\n"
        '"Smith, J",abc,xyz,2026-01-01T00:00:00.000Z\n'
        "zed,0,-5,\n"
        "short,row\n"
        "top,9,100,2026-01-02T00:00:00.000Z\n"
    )
    board = LeaderboardStore(MemoryStorage(snapshot))
    board.load()

    assert [e.name for e in board.scores] == ["top", "Smith, J", "zed"]
    smith = board.scores[1]
    assert (smith.level, smith.score) == (1, 0)
    zed = board.scores[2]
    assert (zed.level, zed.score) == (1, 0)
    assert zed.timestamp


def test_load_resorts_unsorted_snapshot() -> None:
    snapshot = "a,1,5,t1\nb,3,5,t2\nc,2,5,t3\n"
    board = LeaderboardStore(MemoryStorage(snapshot))
    board.load()
    assert [e.name for e in board.scores] == ["b", "c", "a"]


def test_file_storage_survives_restart(tmp_path) -> None:
    path = tmp_path / "board" / "leaderboard.csv"
    board = LeaderboardStore(FileStorage(path))
    board.load()
    board.add_score("ada", 3, 300)
    board.add_score("bob", 5, 100)

    reopened = LeaderboardStore(FileStorage(path))
    reopened.load()

    assert reopened.scores == board.scores
    assert not [p for p in path.parent.iterdir() if p.name.endswith('.tmp')]


def test_storage_failure_keeps_memory_authoritative() -> None:
    board = LeaderboardStore(BrokenStorage())
    board.load()

    assert board.add_score("ada", 2, 50) == 1
    assert len(board) == 1
    board.clear()
    assert len(board) == 0


def test_import_and_clear(leaderboard, storage) -> None:
    assert leaderboard.import_snapshot("x,2,20,t\ny,4,40,t\n")
    assert [e.name for e in leaderboard.scores] == ["y", "x"]
    assert storage.text == leaderboard.export_snapshot()

    leaderboard.clear()
    assert len(leaderboard) == 0
    assert storage.text is None


def test_add_score_rejects_out_of_range(leaderboard) -> None:
    with pytest.raises(ValueError):
        leaderboard.add_score("a", 0, 10)
    with pytest.raises(ValueError):
        leaderboard.add_score("a", 1, -1)


def test_file_storage_load_replaces_invalid_utf8(tmp_path) -> None:
    path = tmp_path / "leaderboard.csv"
    path.write_bytes(
        b"name,level,score,timestamp\n"
        b"Al\xffice,4,400,2026-01-01T00:00:00.000Z\n"
        b"bob,2,20,2026-01-01T00:00:01.000Z\n"
    )
    board = LeaderboardStore(FileStorage(path))
    board.load()

    assert [e.name for e in board.scores] == ["Al\ufffdice", "bob"]
    assert board.scores[0].level == 4


def test_unencodable_name_is_stored_and_persisted(tmp_path) -> None:
    path = tmp_path / "leaderboard.csv"
    board = LeaderboardStore(FileStorage(path))
    board.load()

    assert board.add_score("Eve\ud800", 3, 500) == 1
    assert board.add_score("Bob", 9, 900) == 1

    reopened = LeaderboardStore(FileStorage(path))
    reopened.load()
    assert [e.name for e in reopened.scores] == ["Bob", "Eve"]


def test_file_storage_wraps_encode_errors(tmp_path) -> None:
    storage = FileStorage(tmp_path / "leaderboard.csv")

    with pytest.raises(StorageError):
        storage.save("x\ud800,1,0,t\n")
    assert list(tmp_path.iterdir()) == []


def test_unsaveable_import_keeps_memory_board(tmp_path) -> None:
    board = LeaderboardStore(FileStorage(tmp_path / "leaderboard.csv"))

    assert board.import_snapshot("x\ud800,2,20,t\n")
    assert len(board) == 1
    assert board.add_score("ada", 5, 0) == 1
    assert len(board) == 2


def test_storage_port_is_abstract() -> None:
    with pytest.raises(TypeError):
        StoragePort()
