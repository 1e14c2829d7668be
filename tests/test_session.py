import random

from gemgarden.components.game_state import GameMode, LevelStatus
from gemgarden.session import GemGardenSession
from gemgarden.systems.board_ops import find_all_matches, has_valid_move
from gemgarden.systems.progress_system import JsonProgressStore, MemoryProgressStore


def make_session(**kwargs) -> GemGardenSession:
    kwargs.setdefault("store", MemoryProgressStore())
    kwargs.setdefault("rng", random.Random(99))
    return GemGardenSession(**kwargs)


def test_new_session_starts_in_free_play_on_playable_board():
    session = make_session()
    assert session.game_state.mode == GameMode.FREE_PLAY
    assert (session.board.rows, session.board.cols, session.board.kind_count) == (8, 8, 6)
    assert not find_all_matches(session.board)
    assert has_valid_move(session.board)


def test_hint_move_is_accepted():
    session = make_session()
    move = session.hint()
    assert move is not None
    outcome = session.swap(*move)
    assert outcome is not None and outcome.accepted
    assert session.run_state.score == outcome.score_delta > 0
    assert not session.busy


def test_locked_level_cannot_be_started():
    session = make_session()
    assert session.start_level(2, require_unlocked=True) is None
    assert session.game_state.mode == GameMode.FREE_PLAY
    level = session.start_level(1, require_unlocked=True)
    assert level is not None and level.id == 1
    assert session.game_state.mode == GameMode.LEVEL
    assert session.game_state.status == LevelStatus.IN_PROGRESS
    assert session.run_state.moves_remaining == 20


def test_level_play_spends_moves():
    levels = [{"id": 1, "name": "Marathon", "moves": 10, "goals": {"score": 100000},
               "starThresholds": [100000, 200000, 300000]}]
    session = make_session(levels=levels)
    session.start_level(1)
    for expected in (9, 8, 7):
        move = session.hint()
        session.swap(*move)
        assert session.run_state.moves_remaining == expected


def test_paced_session_resolves_on_advance():
    session = make_session(paced=True)
    move = session.hint()
    outcome = session.swap(*move)
    assert session.busy
    assert session.hint() is None
    for _ in range(200):
        if not session.busy:
            break
        session.advance()
    assert not session.busy
    assert outcome.cascade_depth >= 1
    assert session.run_state.score == outcome.score_delta


def test_save_path_uses_json_store(tmp_path):
    session = GemGardenSession(save_path=tmp_path / "progress.json", rng=random.Random(1))
    assert isinstance(session.progress_system.store, JsonProgressStore)
    assert session.progress_system.records == {}


def test_start_free_play_after_level():
    session = make_session()
    session.start_level(1)
    session.start_free_play()
    assert session.game_state.mode == GameMode.FREE_PLAY
    assert session.run_state.moves_remaining is None


def test_level_start_refused_while_paced_cycle_runs():
    session = make_session(paced=True)
    session.start_level(1)
    outcome = session.swap(*session.hint())
    assert session.busy

    assert session.start_level(1) is None
    assert not session.start_free_play()

    while session.busy:
        session.advance()
    assert session.run_state.score == outcome.score_delta
    assert session.run_state.moves_remaining == 19

    assert session.start_level(1) is not None
    assert session.run_state.score == 0
    assert session.run_state.total_collected == 0
    assert session.run_state.moves_remaining == 20
