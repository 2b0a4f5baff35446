from __future__ import annotations

import argparse
import csv
import logging
import sys
from typing import Optional, TextIO

from .board import NUM_CELLS, BoardState, Cell, cell_index
from .config import SessionConfig
from .errors import GameError
from .search import SearchStats, choose_move, play_best_move, score_moves
from .session import GameSession, player_label


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt", description="Tic-tac-toe engine CLI")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment info and exit",
    )

    p_show = sub.add_parser("show", help="Show a board (9 digits, 0=empty,1=player 1 (O),2=player 2 (X))")
    p_show.add_argument("--board", required=True, help="Board string, e.g., 100020000")

    p_best = sub.add_parser("best", help="Ask the engine for the best move on a board")
    p_best.add_argument("--board", help="Board string, e.g., 100020000 (omit with --stdin)")
    p_best.add_argument(
        "--stdin", action="store_true", help="Read many boards from stdin and stream CSV output"
    )
    p_best.add_argument(
        "--player",
        type=int,
        choices=[0, 1],
        default=None,
        help="Player to search for (default: side to move)",
    )
    p_best.add_argument(
        "--exhaustive", action="store_true", help="Disable alpha-beta pruning"
    )
    p_best.add_argument("--scores", action="store_true", help="Print the score of every legal move")

    p_play = sub.add_parser("play", help="Play a game against the engine on stdin/stdout")
    first = p_play.add_mutually_exclusive_group()
    first.add_argument(
        "--human-first",
        dest="ai_player",
        action="store_const",
        const=1,
        help="Human plays player 1 (O) and moves first (default: TTT_AI_PLAYER, else human first)",
    )
    first.add_argument(
        "--ai-first",
        dest="ai_player",
        action="store_const",
        const=0,
        help="Engine plays player 1 (O) and moves first",
    )
    p_play.add_argument("--no-ai", action="store_true", help="Two humans, no engine")

    p_self = sub.add_parser("selfplay", help="Let the engine play both sides from the empty board")
    p_self.add_argument(
        "--exhaustive", action="store_true", help="Disable alpha-beta pruning"
    )

    return p


def _parse_board(raw: Optional[str]) -> Optional[BoardState]:
    raw = (raw or "").strip()
    if len(raw) != NUM_CELLS or any(c not in "012" for c in raw):
        logging.error("Invalid board string. Must be 9 chars of 0/1/2.")
        return None
    board = BoardState.from_string(raw)
    if not board.is_consistent():
        logging.error("Board is not a valid reachable state.")
        return None
    return board


def _fmt_cell(cell: Cell) -> str:
    return f"{cell[0]},{cell[1]}"


def _verdict(board: BoardState) -> str:
    w = board.winner()
    if w is not None:
        return f"winner={w}"
    if board.is_draw():
        return "draw"
    return "ongoing"


def _print_info() -> None:
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    print(f"ttt-engine={_version()}")


def _version() -> str:
    try:
        from importlib.metadata import version as _ver

        return _ver("ttt-engine")
    except Exception:
        return "unknown"


def _cmd_show(ns: argparse.Namespace) -> int:
    board = _parse_board(ns.board)
    if board is None:
        return 2
    print(board.render())
    print(f"to_move={board.current_player} winner={board.winner()} draw={board.is_draw()}")
    return 0


def _cmd_best(ns: argparse.Namespace, prune: bool) -> int:
    if ns.stdin:
        w = csv.writer(sys.stdout)
        w.writerow(["board", "player", "move", "score"])
        for line in sys.stdin:
            raw = line.strip()
            if not raw:
                continue
            if len(raw) != NUM_CELLS or any(c not in "012" for c in raw):
                continue
            board = BoardState.from_string(raw)
            if not board.is_consistent() or board.is_terminal():
                continue
            player = board.current_player if ns.player is None else ns.player
            scores = score_moves(board, player, prune=prune)
            # first cell in row-major order with the best score, as choose_move picks
            cell = max(scores, key=scores.__getitem__)
            w.writerow([raw, player, cell_index(cell), scores[cell]])
        return 0

    board = _parse_board(ns.board)
    if board is None:
        return 2
    player = board.current_player if ns.player is None else ns.player
    stats = SearchStats()
    try:
        cell = choose_move(board, player, prune=prune, stats=stats)
        scores = score_moves(board, player, prune=prune) if ns.scores else None
    except GameError as e:
        logging.error("%s", e)
        return 2
    logging.debug("nodes=%d cutoffs=%d", stats.nodes, stats.cutoffs)
    print(f"player={player} move={_fmt_cell(cell)} index={cell_index(cell)}")
    if scores is not None:
        for c, s in scores.items():
            print(f"  {_fmt_cell(c)} score={s}")
    return 0


def _cmd_selfplay(prune: bool) -> int:
    board = BoardState()
    while not board.is_terminal():
        player = board.current_player
        cell = play_best_move(board, player, prune=prune)
        print(f"{player_label(player)} -> {_fmt_cell(cell)}")
    print(board.render())
    print(f"state={board.serialize()} {_verdict(board)}")
    return 0


def _parse_move(line: str) -> Cell:
    parts = line.replace(",", " ").split()
    if len(parts) != 2:
        raise ValueError(f"Expected 'row col', got {line!r}")
    return int(parts[0]), int(parts[1])


def run_interactive(session: GameSession, stream: TextIO, out: TextIO) -> int:
    """Drive a session from text input: 'row col' per move, 'r' resets, 'q' quits."""
    print(session.board.render(), file=out)
    for line in stream:
        cmd = line.strip().lower()
        if not cmd:
            continue
        if cmd in ("q", "quit"):
            break
        if cmd in ("r", "reset"):
            session.reset()
        else:
            try:
                session.play(_parse_move(cmd))
            except (GameError, ValueError) as e:
                logging.warning("Move rejected: %s", e)
                continue
        print(session.board.render(), file=out)
        if session.game_over:
            if session.winner is None:
                print("result=draw", file=out)
            else:
                print(f"result=winner {player_label(session.winner)}", file=out)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    # Early exits
    if getattr(ns, "version", False):
        print(_version())
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    try:
        cfg = SessionConfig.from_env()
    except ValueError as e:
        logging.error("%s", e)
        return 2

    if ns.cmd == "show":
        return _cmd_show(ns)

    if ns.cmd == "best":
        if not ns.stdin and ns.board is None:
            logging.error("Provide --board or --stdin")
            return 2
        return _cmd_best(ns, prune=cfg.prune and not ns.exhaustive)

    if ns.cmd == "selfplay":
        return _cmd_selfplay(prune=cfg.prune and not ns.exhaustive)

    if ns.cmd == "play":
        cfg = cfg.with_overrides(ai_player=ns.ai_player, ai_enabled=False if ns.no_ai else None)
        session = GameSession(cfg)
        return run_interactive(session, sys.stdin, sys.stdout)

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
