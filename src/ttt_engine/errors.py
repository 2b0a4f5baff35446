"""
Error taxonomy for the game core.

- OccupiedCell and GameAlreadyOver reject a single placement; the board is left untouched.
- InvalidSearchState means the caller invoked the search on a board it must not search.
"""
from typing import Tuple


class GameError(Exception):
    """Base class for every error raised by the game core."""


class OccupiedCell(GameError):
    def __init__(self, cell: Tuple[int, int]):
        self.cell = cell
        super().__init__(f"Cell {cell} is already occupied")


class GameAlreadyOver(GameError):
    def __init__(self, state: str):
        self.state = state
        super().__init__(f"Game is already over (board {state})")


class NotYourTurn(GameError):
    def __init__(self, player: int):
        self.player = player
        super().__init__(f"It is not player {player}'s turn")


class InvalidSearchState(GameError):
    pass
