"""ttt_engine package.

Board state machine, negamax search engine, and a game session that lets the
engine stand in for one of the players.

Convenience imports are exposed for common workflows.
"""

from .board import BoardState, Cell, Mark
from .config import SessionConfig
from .errors import GameAlreadyOver, GameError, InvalidSearchState, NotYourTurn, OccupiedCell
from .search import SearchStats, choose_move, play_best_move, score_moves
from .session import GameSession

__all__ = [
    "BoardState",
    "Cell",
    "Mark",
    "choose_move",
    "play_best_move",
    "score_moves",
    "SearchStats",
    "GameSession",
    "SessionConfig",
    "GameError",
    "OccupiedCell",
    "GameAlreadyOver",
    "NotYourTurn",
    "InvalidSearchState",
]
