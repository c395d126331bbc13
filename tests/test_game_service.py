import pytest

from memory_matrix.models.game import StepResult
from memory_matrix.services.game_service import GameService
from memory_matrix.services.leaderboard_store import LeaderboardStore
from memory_matrix.services.storage import FileStorage

PATTERN_DELAY = 1000
NEXT_LEVEL_DELAY = 2000


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event, data, room):
        self.events.append((event, data, room))

    def names(self):
        return [event for event, _, _ in self.events]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def service(leaderboard, scheduler, rng, recorder):
    return GameService(leaderboard, scheduler, emit=recorder, rng=rng,
                       pattern_start_delay_ms=PATTERN_DELAY,
                       next_level_delay_ms=NEXT_LEVEL_DELAY)


def sequence_of(service, game_id):
    return list(service.games[game_id].engine.challenge.sequence)


def play_until_input(service, scheduler, game_id):
    view = service.get_game_state(game_id)
    scheduler.advance(PATTERN_DELAY + view.sequence_length * view.show_speed)
    assert service.get_game_state(game_id).showing_pattern is False


def test_new_game_starts_level_one(service, recorder) -> None:
    game_id = service.create_new_game("  Ada  ")
    view = service.get_game_state(game_id)

    assert view.player_name == "Ada"
    assert view.current_level == 1
    assert view.grid_size == 3
    assert view.sequence_length == 3
    assert view.showing_pattern is True
    assert view.game_active is True
    assert view.estimated_rank == 1
    assert recorder.names() == ["challenge_started"]


def test_new_game_requires_name(service) -> None:
    with pytest.raises(ValueError):
        service.create_new_game("   ")


def test_reveal_events_reach_room(service, scheduler, recorder) -> None:
    game_id = service.create_new_game("Ada")
    sequence = sequence_of(service, game_id)

    play_until_input(service, scheduler, game_id)

    steps = [data for event, data, _ in recorder.events if event == "reveal_step"]
    assert [s["cell"] for s in steps] == sequence
    assert recorder.names()[-1] == "input_phase"
    assert all(room == game_id for _, _, room in recorder.events)


def test_clicks_during_reveal_are_invalid(service) -> None:
    game_id = service.create_new_game("Ada")
    result, view = service.select_cell(game_id, sequence_of(service, game_id)[0])

    assert result == StepResult.INVALID_STATE
    assert view.progress == 0


def test_level_complete_scores_and_advances(service, scheduler, recorder) -> None:
    game_id = service.create_new_game("Ada")
    play_until_input(service, scheduler, game_id)

    results = [service.select_cell(game_id, cell)[0] for cell in sequence_of(service, game_id)]

    assert results[-1] == StepResult.LEVEL_COMPLETE
    view = service.get_game_state(game_id)
    assert view.score == 100 + 35 * 10
    assert view.streak == 1
    assert view.max_streak == 1
    assert view.game_active is False

    scheduler.advance(NEXT_LEVEL_DELAY)
    view = service.get_game_state(game_id)
    assert view.current_level == 2
    assert view.sequence_length == 4
    assert view.showing_pattern is True

    play_until_input(service, scheduler, game_id)
    for cell in sequence_of(service, game_id):
        service.select_cell(game_id, cell)

    view = service.get_game_state(game_id)
    assert view.score == 450 + (200 + 34 * 10 + 50)
    assert view.streak == 2


def test_wrong_cell_ends_game_and_records_rank(service, scheduler, leaderboard, recorder) -> None:
    leaderboard.add_score("champion", 9, 9000)
    game_id = service.create_new_game("Ada")
    play_until_input(service, scheduler, game_id)

    sequence = sequence_of(service, game_id)
    wrong = (sequence[0] + 1) % 9
    result, view = service.select_cell(game_id, wrong)

    assert result == StepResult.LEVEL_FAILED
    assert view.game_over is True
    assert view.game_active is False
    assert view.streak == 0
    assert view.final_rank == 2
    assert leaderboard.scores[1].name == "Ada"
    assert "level_failed" in recorder.names()
    assert recorder.names()[-1] == "game_over"

    summary = service.get_game_summary(game_id)
    assert summary["rank"] == 2
    assert summary["rank_title"] == "SILVER - NEURAL ELITE RANK #2!"
    assert summary["leaderboard_size"] == 2
    assert summary["badge"] == "NEURAL ROOKIE"

    assert service.select_cell(game_id, sequence[0])[0] == StepResult.INVALID_STATE


def test_timeout_is_a_failed_level(service, scheduler, leaderboard, recorder) -> None:
    game_id = service.create_new_game("Ada")
    play_until_input(service, scheduler, game_id)

    scheduler.advance(35_000)

    view = service.get_game_state(game_id)
    assert view.game_over is True
    assert view.time_left == 0
    assert view.final_rank == 1
    failed = [data for event, data, _ in recorder.events if event == "level_failed"]
    assert failed == [{"level": 1, "reason": "timeout"}]
    assert recorder.names().count("tick") == 35
    assert len(leaderboard) == 1
    assert scheduler.pending() == 0


def test_delete_game_stops_all_timers(service, scheduler, recorder) -> None:
    game_id = service.create_new_game("Ada")
    scheduler.advance(PATTERN_DELAY)

    assert service.delete_game(game_id) is True
    before = len(recorder.events)
    scheduler.advance(120_000)

    assert len(recorder.events) == before
    assert scheduler.pending() == 0
    assert service.get_game_state(game_id) is None
    assert service.delete_game(game_id) is False


def test_delete_between_levels_cancels_next_level(service, scheduler, leaderboard) -> None:
    game_id = service.create_new_game("Ada")
    play_until_input(service, scheduler, game_id)
    for cell in sequence_of(service, game_id):
        service.select_cell(game_id, cell)

    service.delete_game(game_id)
    scheduler.advance(60_000)

    assert scheduler.pending() == 0
    assert len(leaderboard) == 0


def test_session_stats_accumulate(service, scheduler) -> None:
    for name in ("Ada", "Bob"):
        game_id = service.create_new_game(name)
        play_until_input(service, scheduler, game_id)
        scheduler.advance(35_000)

    stats = service.get_session_stats()
    assert stats == {"games_played": 2, "best_level": 1, "total_score": 0}


def test_unknown_game(service) -> None:
    assert service.select_cell("missing", 0) is None
    assert service.get_game_state("missing") is None
    assert service.get_game_summary("missing") is None


def test_idle_game_times_out_and_persists_unencodable_name(tmp_path, scheduler, rng, recorder) -> None:
    path = tmp_path / "leaderboard.csv"
    board = LeaderboardStore(FileStorage(path))
    service = GameService(board, scheduler, emit=recorder, rng=rng)
    game_id = service.create_new_game("Eve\ud800")

    scheduler.run_until_idle()

    view = service.get_game_state(game_id)
    assert view.player_name == "Eve"
    assert view.game_over is True
    assert view.final_rank == 1
    assert recorder.names()[-1] == "game_over"
    assert scheduler.pending() == 0
    assert path.read_text(encoding='utf-8').splitlines()[1].startswith("Eve,1,0,")


def test_only_recent_finished_games_are_kept(leaderboard, scheduler, rng) -> None:
    service = GameService(leaderboard, scheduler, rng=rng, finished_games_retained=2)
    finished = []
    for name in ("Ada", "Bob", "Cy"):
        game_id = service.create_new_game(name)
        scheduler.run_until_idle()
        finished.append(game_id)

    live = service.create_new_game("Dee")

    assert service.get_game_summary(finished[0]) is None
    assert service.get_game_summary(finished[1])["player_name"] == "Bob"
    assert service.get_game_summary(finished[2])["player_name"] == "Cy"
    assert service.get_game_state(live).game_active is True
    assert len(leaderboard) == 3
