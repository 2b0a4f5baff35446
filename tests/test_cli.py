import io
import os
import subprocess
import sys
from pathlib import Path

import pytest

from ttt_engine.board import BoardState, cell_index
from ttt_engine.cli import main, run_interactive
from ttt_engine.config import SessionConfig
from ttt_engine.search import choose_move
from ttt_engine.session import GameSession

SRC = Path(__file__).resolve().parents[1] / "src"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("TTT_AI_ENABLED", "TTT_AI_PLAYER", "TTT_PRUNE"):
        monkeypatch.delenv(var, raising=False)


def test_show_board(capsys):
    assert main(["show", "--board", "111220000"]) == 0
    out = capsys.readouterr().out
    assert "O O O" in out
    assert "winner=0" in out


def test_best_move_for_side_to_move(capsys):
    assert main(["best", "--board", "110020000"]) == 0
    out = capsys.readouterr().out
    assert "player=1 move=0,2 index=2" in out


def test_best_with_explicit_player_and_scores(capsys):
    assert main(["best", "--board", "110020000", "--player", "0", "--scores"]) == 0
    out = capsys.readouterr().out
    assert "player=0 move=0,2" in out
    assert "0,2 score=9" in out


def test_best_exhaustive_matches_pruned(capsys):
    assert main(["best", "--board", "100000000"]) == 0
    pruned = capsys.readouterr().out
    assert main(["best", "--board", "100000000", "--exhaustive"]) == 0
    assert capsys.readouterr().out == pruned


@pytest.mark.parametrize("bad", ["abc", "012345678", "0123456789", "12345678x"])
def test_invalid_board_strings(bad):
    assert main(["show", "--board", bad]) == 2
    assert main(["best", "--board", bad]) == 2


def test_unreachable_board_rejected():
    assert main(["best", "--board", "111222000"]) == 2


def test_terminal_board_rejected_by_best():
    assert main(["best", "--board", "111220000"]) == 2


def test_best_requires_input():
    assert main(["best"]) == 2


def test_best_stdin_streams_csv(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("110020000\n\nbogus\n111220000\n100000000\n"))
    assert main(["best", "--stdin"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "board,player,move,score"
    assert lines[1] == "110020000,1,2,0"
    assert lines[2].startswith("100000000,1,4,")
    assert len(lines) == 3


def test_best_stdin_moves_match_single_board_search(monkeypatch, capsys):
    boards = ["000000000", "100000000", "120000000", "102000000", "110020000"]
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n".join(boards) + "\n"))
    assert main(["best", "--stdin"]) == 0
    rows = capsys.readouterr().out.strip().splitlines()[1:]
    assert len(rows) == len(boards)
    for raw, row in zip(boards, rows):
        board = BoardState.from_string(raw)
        expected = cell_index(choose_move(board, board.current_player))
        assert row.split(",")[:3] == [raw, str(board.current_player), str(expected)]


def test_play_help_names_env_default(capsys):
    with pytest.raises(SystemExit):
        main(["play", "--help"])
    assert "TTT_AI_PLAYER" in capsys.readouterr().out


def test_selfplay_draws(capsys):
    assert main(["selfplay"]) == 0
    out = capsys.readouterr().out
    assert "draw" in out
    assert "state=" in out


def test_invalid_env_is_reported(monkeypatch):
    monkeypatch.setenv("TTT_AI_PLAYER", "7")
    assert main(["selfplay"]) == 2


def test_interactive_game_against_engine():
    session = GameSession(SessionConfig(ai_enabled=True, ai_player=1))
    out = io.StringIO()
    # the engine answers the corner with the centre, then the human misplays
    moves = "0 0\n0 0\nnot a move\n2 2\n0 1\n1 0\n2 1\nq\n"
    assert run_interactive(session, io.StringIO(moves), out) == 0
    assert session.game_over
    assert session.winner != 0
    assert "result=" in out.getvalue()


def test_play_command_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("1 1\nr\nq\n"))
    assert main(["play", "--no-ai"]) == 0
    out = capsys.readouterr().out
    assert ". O ." in out


def test_version_and_info(capsys):
    assert main(["--version"]) == 0
    assert main(["--info"]) == 0
    out = capsys.readouterr().out
    assert "python=" in out


def test_module_entry_point(tmp_path: Path):
    env = dict(os.environ)
    env["PYTHONPATH"] = str(SRC) + os.pathsep + env.get("PYTHONPATH", "")
    r = subprocess.run(
        [sys.executable, "-m", "ttt_engine.cli", "best", "--board", "110020000"],
        cwd=tmp_path,
        capture_output=True,
        text=True,
        env=env,
    )
    assert r.returncode == 0
    assert "move=0,2" in r.stdout
