#!/usr/bin/env python3
"""
Quick inspector for a Runebreak save slot.
Prints the board (ids visible, matched cards bracketed), the score fields and
whether the snapshot would be accepted by GameSession.restore().

Usage: python tools/inspect_save.py [path] [--sqlite]
"""
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from game import (  # noqa: E402
    CorruptSave,
    GameSession,
    Grid,
    JsonFileGateway,
    PersistenceError,
    SaveNotFound,
    SqliteGateway,
)


def main() -> int:
    args = [a for a in sys.argv[1:] if not a.startswith('--')]
    path = args[0] if args else os.getenv('RUNEBREAK_SAVE', os.path.join('data', 'gamesave.json'))
    gw = SqliteGateway(path) if '--sqlite' in sys.argv or path.endswith('.db') else JsonFileGateway(path)

    print(f"Save: {path} ({type(gw).__name__})")
    try:
        snap = gw.load()
    except SaveNotFound:
        print("  no saved game")
        return 1
    except (CorruptSave, PersistenceError) as e:
        print(f"  unreadable: {e}")
        return 2

    try:
        snap.validate()
    except CorruptSave as e:
        print(f"  invalid snapshot: {e}")
        return 2
    grid = Grid(snap.rows, snap.cols, snap.ids, snap.matched)
    for i in range(len(grid)):
        if not grid.cell(i).revealed:
            grid.reveal(i)
    print(grid.pretty())
    matched = sum(1 for m in snap.matched if m)
    print(f"  size={snap.rows}x{snap.cols} matched_cards={matched} pairs_left={(len(snap.ids) - matched) // 2}")
    print(f"  score={snap.score.score} moves={snap.score.moves} matches={snap.score.matches}")
    print(f"  elapsed={snap.elapsed_seconds:.1f}s")
    try:
        GameSession().restore(snap)
        print("  restore: ok")
    except CorruptSave as e:
        print(f"  restore: rejected ({e})")
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
