"""
Game session: the turn dispatcher between a front end and the game core.

One GameSession owns one BoardState together with the AI flag and the
game-over verdict. Front ends call play() for human moves and read the
verdict and state string for display; the session lets the engine reply
whenever it is the automated player's turn.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .board import PLAYER_NAMES, BoardState, Cell
from .config import SessionConfig
from .errors import GameAlreadyOver, NotYourTurn
from .search import play_best_move

log = logging.getLogger(__name__)


def player_label(player: int) -> str:
    return f"Player {player + 1} ({PLAYER_NAMES[player]})"


class GameSession:
    def __init__(self, config: Optional[SessionConfig] = None) -> None:
        self.config = config if config is not None else SessionConfig.from_env()
        self.board = BoardState()
        self.ai_enabled = self.config.ai_enabled
        self.game_over = False
        self.winner: Optional[int] = None
        self.moves: List[Cell] = []
        self.start()

    @property
    def ai_player(self) -> int:
        return self.config.ai_player

    @property
    def current_player(self) -> int:
        return self.board.current_player

    @property
    def state_string(self) -> str:
        return self.board.serialize()

    @property
    def is_draw(self) -> bool:
        return self.game_over and self.winner is None

    def is_ai_turn(self) -> bool:
        return self.ai_enabled and not self.game_over and self.current_player == self.ai_player

    def start(self) -> None:
        self.board.reset()
        self.game_over = False
        self.winner = None
        self.moves = []
        log.info("%s vs %s", player_label(0), player_label(1))
        log.info("%s's turn", player_label(self.current_player))
        self.update_ai()

    def reset(self) -> None:
        log.info("Game reset")
        self.start()

    def load(self, state: str) -> None:
        """Replace the board with a serialized state and recompute the verdict.

        Boards that legal play cannot reach raise ValueError and leave the
        session unchanged. The engine does not move on its own after a load;
        call update_ai().
        """
        if not BoardState.from_string(state).is_consistent():
            raise ValueError(f"Board is not a valid reachable state: {state!r}")
        self.board.deserialize(state)
        self.moves = []
        self._evaluate()

    def set_ai_enabled(self, enabled: bool) -> None:
        self.ai_enabled = enabled
        if enabled:
            log.info("AI enabled for %s", player_label(self.ai_player))
            self.update_ai()
        else:
            log.info("AI disabled")

    def play(self, cell: Cell) -> None:
        """Commit a human move for the player to move.

        Rejected moves raise (GameAlreadyOver, NotYourTurn, OccupiedCell,
        ValueError) and leave the session unchanged.
        """
        if self.game_over:
            raise GameAlreadyOver(self.state_string)
        player = self.current_player
        if self.is_ai_turn():
            raise NotYourTurn(player)
        self.board.place(cell, player)
        self.board.advance_turn()
        self.moves.append(cell)
        self.end_of_turn()
        self.update_ai()

    def update_ai(self) -> Optional[Cell]:
        if not self.is_ai_turn():
            return None
        cell = play_best_move(self.board, self.ai_player, prune=self.config.prune)
        self.moves.append(cell)
        log.info("%s plays %s", player_label(self.ai_player), cell)
        self.end_of_turn()
        return cell

    def end_of_turn(self) -> None:
        self._evaluate()
        if self.game_over:
            log.warning("=== GAME OVER ===")
            if self.winner is None:
                log.info("It's a Draw! No winner.")
            else:
                log.info("Winner: %s", player_label(self.winner))
                log.info("Winning line: %s", self.board.winning_line())
                log.info("Congratulations!")
            return
        log.info("%s's turn", player_label(self.current_player))

    def _evaluate(self) -> None:
        self.winner = self.board.winner()
        self.game_over = self.winner is not None or self.board.is_draw()
