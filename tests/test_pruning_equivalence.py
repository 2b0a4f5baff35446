from typing import List

import pytest
try:
    from hypothesis import given, settings, strategies as st  # type: ignore
except ModuleNotFoundError:  # pragma: no cover - test infra
    import pytest as _pytest  # type: ignore
    _pytest.skip("Hypothesis not installed", allow_module_level=True)

from ttt_engine.board import BoardState, index_cell
from ttt_engine.search import SearchStats, choose_move, score_moves


def reachable_nonterminal(order: List[int], n: int) -> BoardState:
    b = BoardState()
    for idx in order[:n]:
        b.place(index_cell(idx), b.current_player)
        b.advance_turn()
        if b.is_terminal():
            b.clear(index_cell(idx))
            b.advance_turn()
            break
    return b


@pytest.mark.parametrize("first", range(9))
def test_first_ply_boards_same_move_with_and_without_pruning(first: int):
    b = BoardState()
    b.place(index_cell(first), 0)
    b.advance_turn()
    pruned, full = SearchStats(), SearchStats()
    assert choose_move(b, 1, stats=pruned) == choose_move(b, 1, prune=False, stats=full)
    assert pruned.cutoffs > 0
    assert pruned.nodes < full.nodes


@settings(max_examples=150, deadline=None)
@given(st.permutations(list(range(9))), st.integers(min_value=2, max_value=8))
def test_sampled_boards_same_move_and_scores(order: List[int], n: int):
    b = reachable_nonterminal(order, n)
    player = b.current_player
    assert choose_move(b, player) == choose_move(b, player, prune=False)
    assert score_moves(b, player) == score_moves(b, player, prune=False)
