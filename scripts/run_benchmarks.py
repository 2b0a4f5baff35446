#!/usr/bin/env python3
from __future__ import annotations

import math
import statistics as stats
import time
from dataclasses import dataclass
from typing import List, Tuple

from ttt_engine.board import BoardState
from ttt_engine.search import SearchStats, choose_move


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    z = 1.96
    half = z * (s / math.sqrt(len(values)))
    return m, half


@dataclass
class Config:
    repeats: int = 5
    board: str = "000000000"


def time_search(board: str, prune: bool, repeats: int) -> Tuple[List[float], SearchStats]:
    times: List[float] = []
    last = SearchStats()
    for _ in range(repeats):
        b = BoardState.from_string(board)
        st = SearchStats()
        t0 = time.perf_counter()
        choose_move(b, b.current_player, prune=prune, stats=st)
        times.append(time.perf_counter() - t0)
        last = st
    return times, last


def main() -> int:
    cfg = Config()
    print(f"# Search benchmark (board={cfg.board}, N={cfg.repeats})")
    for label, prune in (("alpha-beta", True), ("exhaustive", False)):
        times, st = time_search(cfg.board, prune, cfg.repeats)
        m, h = ci95(times)
        print(f"- {label}: mean={m:.4f}s ± {h:.4f}s (95% CI) nodes={st.nodes} cutoffs={st.cutoffs}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
