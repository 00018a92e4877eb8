#!/usr/bin/env python3
"""
Plays many games with a random-picking player on a manual clock and checks
the bookkeeping after every resolution:
  - matched cells == 2 * matches
  - remaining pairs == unmatched cells / 2
  - game over fires exactly once, with the final score and moves
  - a save/restore at a random point reproduces grid and score

Usage: python tools/simulate.py [--games N] [--seed S] [--level L]
"""
from __future__ import annotations

import argparse
import os
import random
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from game import (  # noqa: E402
    LEVELS,
    Deck,
    EngineState,
    GameConfig,
    GameListener,
    GameSession,
    ManualClock,
)


class _Tally(GameListener):
    def __init__(self) -> None:
        self.game_overs = []

    def on_game_over(self, final_score: int, final_moves: int) -> None:
        self.game_overs.append((final_score, final_moves))


def play_one(rng: random.Random, rows: int, cols: int, cfg: GameConfig) -> int:
    clock = ManualClock()
    session = GameSession(config=cfg, deck=Deck(rng=rng), clock=clock)
    tally = _Tally()
    session.events.subscribe(tally)
    session.new_game(rows, cols)
    save_at = rng.randint(1, (rows * cols) // 2)
    resolutions = 0

    while session.active:
        hidden = [i for i, c in enumerate(session.grid) if not c.revealed]
        a, b = rng.sample(hidden, 2)
        session.handle_reveal(a)
        session.handle_reveal(b)
        clock.advance(cfg.reveal_delay + rng.random() * cfg.combo_window)
        session.tick()
        clock.advance(cfg.mismatch_delay)
        session.tick()
        assert session.state is EngineState.IDLE, session.state
        resolutions += 1

        grid = session.grid
        assert grid.matched_count() == 2 * session.score.matches
        unmatched = sum(1 for c in grid if not c.matched)
        assert session.remaining_pairs == unmatched // 2

        if resolutions == save_at and session.active:
            snap = session.save()
            other = GameSession(config=cfg)
            other.restore(snap)
            assert other.grid.card_ids() == grid.card_ids()
            assert other.grid.matched_flags() == grid.matched_flags()
            assert other.score.data() == session.score.data()
            assert other.score.combo == 0

    assert tally.game_overs == [(session.score.score, session.score.moves)], tally.game_overs
    return session.score.moves


def main() -> None:
    parser = argparse.ArgumentParser(description='Random-play consistency check')
    parser.add_argument('--games', type=int, default=200)
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--level', type=int, choices=range(len(LEVELS)), default=None)
    args = parser.parse_args()

    rng = random.Random(args.seed)
    cfg = GameConfig()
    total_moves = 0
    for g in range(args.games):
        rows, cols = LEVELS[args.level] if args.level is not None else rng.choice(LEVELS)
        total_moves += play_one(rng, rows, cols, cfg)
    print(f"{args.games} games ok; average moves {total_moves / max(1, args.games):.1f}")


if __name__ == '__main__':
    main()
