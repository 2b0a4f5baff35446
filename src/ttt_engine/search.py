"""
Negamax search with alpha-beta pruning, from the side-to-move perspective.
Scoring:
- A node's score is always from the point of view of the player to move there;
  a child's score is negated when folded into its parent.
- A win found at depth d scores WIN_SCORE - d, a loss -WIN_SCORE + d, a draw 0.
  Faster wins and slower losses are therefore preferred.
- Ties between root moves go to the first move in row-major order.

The search mutates the board it is given: every speculative placement is made
inside speculative_move(), which clears the cell again on any exit.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from .board import BoardState, Cell, check_player, opponent
from .errors import InvalidSearchState

log = logging.getLogger(__name__)

WIN_SCORE = 10
SCORE_BOUND = 1000
# an immediate win at the root is the best any move can score
BEST_ROOT_SCORE = WIN_SCORE - 1


@dataclass
class SearchStats:
    nodes: int = 0
    cutoffs: int = 0


@dataclass(frozen=True)
class SearchResult:
    score: int
    cell: Optional[Cell] = None


@contextmanager
def speculative_move(board: BoardState, cell: Cell, player: int) -> Iterator[None]:
    board.place(cell, player)
    try:
        yield
    finally:
        board.clear(cell)


def negamax(
    board: BoardState,
    player: int,
    depth: int = 0,
    alpha: int = -SCORE_BOUND,
    beta: int = SCORE_BOUND,
    *,
    pick_move: bool = False,
    prune: bool = True,
    stats: Optional[SearchStats] = None,
    root_scores: Optional[Dict[Cell, int]] = None,
) -> SearchResult:
    """Score the position for `player`, who is to move at `depth`.

    With pick_move=True this is the root call: each move is scored exactly
    (full window), the best cell is returned alongside its score, and the loop
    stops at the first immediate win unless root_scores asks for every move.
    Interior calls return only a score.
    """
    if stats is not None:
        stats.nodes += 1

    w = board.winner()
    if w is not None:
        return SearchResult(WIN_SCORE - depth if w == player else -WIN_SCORE + depth)
    if board.is_full():
        # no winner and no empty cell: draw
        return SearchResult(0)

    best_score = -SCORE_BOUND
    best_cell: Optional[Cell] = None
    nxt = opponent(player)
    for cell in board.empty_cells():
        with speculative_move(board, cell, player):
            if pick_move:
                child = negamax(board, nxt, depth + 1, -SCORE_BOUND, SCORE_BOUND,
                                prune=prune, stats=stats)
            else:
                child = negamax(board, nxt, depth + 1, -beta, -alpha,
                                prune=prune, stats=stats)
        score = -child.score

        if pick_move:
            if root_scores is not None:
                root_scores[cell] = score
            if score > best_score:
                best_score, best_cell = score, cell
                if best_score >= BEST_ROOT_SCORE and root_scores is None:
                    break
            continue

        best_score = max(best_score, score)
        alpha = max(alpha, score)
        if prune and alpha >= beta:
            if stats is not None:
                stats.cutoffs += 1
            break

    return SearchResult(best_score, best_cell)


def _check_searchable(board: BoardState) -> None:
    if board.is_terminal():
        raise InvalidSearchState(f"Cannot search a finished game (board {board.serialize()})")


def choose_move(
    board: BoardState,
    player: int,
    *,
    prune: bool = True,
    stats: Optional[SearchStats] = None,
) -> Cell:
    """Return the best cell for `player` on a non-terminal board."""
    check_player(player)
    _check_searchable(board)
    if stats is None:
        stats = SearchStats()
    with board.search_guard():
        result = negamax(board, player, pick_move=True, prune=prune, stats=stats)
    log.debug("search player=%d board=%s move=%s score=%d nodes=%d cutoffs=%d",
              player, board.serialize(), result.cell, result.score, stats.nodes, stats.cutoffs)
    if result.cell is None:
        raise InvalidSearchState(f"No legal move for player {player} (board {board.serialize()})")
    return result.cell


def score_moves(board: BoardState, player: int, *, prune: bool = True) -> Dict[Cell, int]:
    """Exact score of every legal move for `player`, keyed by cell in row-major order."""
    check_player(player)
    _check_searchable(board)
    scores: Dict[Cell, int] = {}
    with board.search_guard():
        negamax(board, player, pick_move=True, prune=prune, root_scores=scores)
    return scores


def play_best_move(board: BoardState, player: int, *, prune: bool = True) -> Cell:
    """Choose the best move for the player to move and commit it.

    The move goes through place() and advance_turn(), exactly like a human move.
    """
    if player != board.current_player:
        raise InvalidSearchState(
            f"Player {player} is not to move (current player is {board.current_player})")
    cell = choose_move(board, player, prune=prune)
    board.place(cell, player)
    board.advance_turn()
    return cell
