"""
Board state: cell occupancy, turn pointer, terminal checks and serialization.
Notes:
- Cells are stored as a flat row-major list of 9 marks: 0=empty, 1=player 0, 2=player 1.
- A position is addressed as (row, col); index = row * 3 + col.
- Player 0 always moves first. The turn only changes through advance_turn(),
  so the search can place speculative marks for either side.
- The terminal verdict is derived from the cells, never cached.
"""
from __future__ import annotations

from contextlib import contextmanager
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple

from .errors import GameAlreadyOver, InvalidSearchState, OccupiedCell

SIZE = 3
NUM_CELLS = SIZE * SIZE
EMPTY_STATE = "0" * NUM_CELLS

# rows, then columns, then diagonals
WIN_PATTERNS = [
    [0, 1, 2], [3, 4, 5], [6, 7, 8],
    [0, 3, 6], [1, 4, 7], [2, 5, 8],
    [0, 4, 8], [2, 4, 6]
]

Cell = Tuple[int, int]

PLAYER_NAMES = {0: "O", 1: "X"}


class Mark(IntEnum):
    EMPTY = 0
    PLAYER0 = 1
    PLAYER1 = 2

    @classmethod
    def for_player(cls, player: int) -> "Mark":
        return cls(check_player(player) + 1)

    @property
    def player(self) -> Optional[int]:
        return None if self is Mark.EMPTY else int(self) - 1


def check_player(player: int) -> int:
    if player not in (0, 1):
        raise ValueError(f"Unknown player: {player!r}")
    return player


def opponent(player: int) -> int:
    return 1 - check_player(player)


def cell_index(cell: Cell) -> int:
    row, col = cell
    if not (0 <= row < SIZE and 0 <= col < SIZE):
        raise ValueError(f"Cell out of range: {cell!r}")
    return row * SIZE + col


def index_cell(idx: int) -> Cell:
    if not 0 <= idx < NUM_CELLS:
        raise ValueError(f"Cell index out of range: {idx!r}")
    return divmod(idx, SIZE)


class BoardState:
    """A 3x3 board plus the player to move.

    The only mutators are place/clear (occupancy), advance_turn (turn pointer),
    reset and deserialize. Callers never touch the cell list directly.
    """

    def __init__(self) -> None:
        self._cells: List[Mark] = [Mark.EMPTY] * NUM_CELLS
        self._current_player = 0
        self._searching = False

    @classmethod
    def from_string(cls, state: str) -> "BoardState":
        board = cls()
        board.deserialize(state)
        return board

    # --- occupancy -------------------------------------------------------

    def mark_at(self, cell: Cell) -> Mark:
        return self._cells[cell_index(cell)]

    def is_empty(self, cell: Cell) -> bool:
        return self._cells[cell_index(cell)] is Mark.EMPTY

    def place(self, cell: Cell, player: int) -> None:
        """Mark `cell` for `player` without advancing the turn.

        Raises GameAlreadyOver on a terminal board and OccupiedCell on a taken
        cell; in both cases nothing changes.
        """
        idx = cell_index(cell)
        mark = Mark.for_player(player)
        if self.is_terminal():
            raise GameAlreadyOver(self.serialize())
        if self._cells[idx] is not Mark.EMPTY:
            raise OccupiedCell(cell)
        self._cells[idx] = mark

    def clear(self, cell: Cell) -> None:
        self._cells[cell_index(cell)] = Mark.EMPTY

    def empty_cells(self) -> List[Cell]:
        return [index_cell(i) for i, m in enumerate(self._cells) if m is Mark.EMPTY]

    def piece_counts(self) -> Tuple[int, int]:
        return self._cells.count(Mark.PLAYER0), self._cells.count(Mark.PLAYER1)

    # --- verdicts --------------------------------------------------------

    def winning_line(self) -> Optional[List[Cell]]:
        b = self._cells
        for a, c, d in WIN_PATTERNS:
            if b[a] is not Mark.EMPTY and b[a] == b[c] == b[d]:
                return [index_cell(a), index_cell(c), index_cell(d)]
        return None

    def winner(self) -> Optional[int]:
        b = self._cells
        for a, c, d in WIN_PATTERNS:
            v = b[a]
            if v is not Mark.EMPTY and v == b[c] and v == b[d]:
                return v.player
        return None

    def is_full(self) -> bool:
        return Mark.EMPTY not in self._cells

    def is_draw(self) -> bool:
        return self.is_full() and self.winner() is None

    def is_terminal(self) -> bool:
        return self.winner() is not None or self.is_full()

    def is_consistent(self) -> bool:
        """True if the occupancy could arise from legal play.

        winner() trusts the rules and reports the first full line; this is
        the explicit check that at most one side owns a line and that the
        piece counts match the winner's move order.
        """
        p0, p1 = self.piece_counts()
        if not (p0 == p1 or p0 == p1 + 1):
            return False
        owners = {self._cells[pat[0]] for pat in WIN_PATTERNS
                  if self._cells[pat[0]] is not Mark.EMPTY
                  and all(self._cells[i] == self._cells[pat[0]] for i in pat)}
        if len(owners) > 1:
            return False
        w = self.winner()
        if w == 0 and p0 != p1 + 1:
            return False
        if w == 1 and p0 != p1:
            return False
        return True

    # --- turn ------------------------------------------------------------

    @property
    def current_player(self) -> int:
        return self._current_player

    def advance_turn(self) -> None:
        if self._searching:
            raise InvalidSearchState("Cannot advance the turn while a search is in progress")
        self._current_player = opponent(self._current_player)

    @contextmanager
    def search_guard(self) -> Iterator["BoardState"]:
        """Borrow the board exclusively for one top-level search."""
        if self._searching:
            raise InvalidSearchState("A search is already running on this board")
        self._searching = True
        try:
            yield self
        finally:
            self._searching = False

    @property
    def searching(self) -> bool:
        return self._searching

    # --- lifecycle and serialization -------------------------------------

    def reset(self) -> None:
        self._cells = [Mark.EMPTY] * NUM_CELLS
        self._current_player = 0

    def serialize(self) -> str:
        return ''.join(str(int(m)) for m in self._cells)

    def deserialize(self, state: str) -> None:
        """Rebuild occupancy from a state string.

        Parsing is lenient: any character other than '0', '1' or '2' reads as
        empty, missing trailing positions are empty and extra characters are
        ignored. The player to move is derived from the piece counts.
        """
        cells = [Mark.EMPTY] * NUM_CELLS
        for i, ch in enumerate(state[:NUM_CELLS]):
            if ch in ("1", "2"):
                cells[i] = Mark(int(ch))
        self._cells = cells
        p0, p1 = self.piece_counts()
        self._current_player = 0 if p0 <= p1 else 1

    def render(self) -> str:
        symbols = {Mark.EMPTY: ".", Mark.PLAYER0: PLAYER_NAMES[0], Mark.PLAYER1: PLAYER_NAMES[1]}
        rows = []
        for r in range(SIZE):
            rows.append(" ".join(symbols[m] for m in self._cells[r * SIZE:(r + 1) * SIZE]))
        return "\n".join(rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoardState):
            return NotImplemented
        return self._cells == other._cells and self._current_player == other._current_player

    def __repr__(self) -> str:
        return f"BoardState({self.serialize()!r}, current_player={self._current_player})"
