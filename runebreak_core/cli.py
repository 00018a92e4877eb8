from __future__ import annotations

import argparse
import logging
import os
import time
from dataclasses import replace
from typing import Optional

from .config import LEVELS, GameConfig
from .deck import Deck
from .errors import InvalidConfiguration, RejectedReveal
from .events import GameListener
from .session import GameSession
from .storage import gateway_from_config


class _ConsoleListener(GameListener):
    def on_combo_changed(self, combo: int) -> None:
        if combo > 1:
            print(f"Combo x{combo}!")

    def on_game_over(self, final_score: int, final_moves: int) -> None:
        print(f"\nAll pairs found! Final score: {final_score}  Moves: {final_moves}")


def _parse_pick(text: str, session: GameSession) -> Optional[int]:
    """Accepts 'r,c', 'r c' or a plain cell index."""
    assert session.grid is not None
    parts = [t for t in text.replace(",", " ").split() if t != ""]
    try:
        if len(parts) == 1:
            return int(parts[0])
        if len(parts) == 2:
            return session.grid.index(int(parts[0]), int(parts[1]))
    except (ValueError, RejectedReveal):
        return None
    return None


def _status(session: GameSession) -> str:
    return (
        f"Score: {session.score.score}  Moves: {session.score.moves}  "
        f"Pairs Left: {session.remaining_pairs}  Time: {session.elapsed_seconds:.0f}s"
    )


def _settle(session: GameSession) -> None:
    """Sleeps through pending delays so resolutions apply before the next prompt."""
    while True:
        deadline = session.scheduler.next_deadline()
        if deadline is None:
            return
        wait = deadline - session.scheduler.now()
        if wait > 0:
            time.sleep(wait)
        session.tick()
        if session.engine is not None and session.engine.awaiting_conceal:
            print("No match.")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description='Runebreak memory card game')
    parser.add_argument('--rows', type=int, default=None, help='Grid rows')
    parser.add_argument('--cols', type=int, default=None, help='Grid columns')
    parser.add_argument('--level', type=int, choices=range(len(LEVELS)), default=None,
                        help='Preset size: ' + ', '.join(f'{i}={r}x{c}' for i, (r, c) in enumerate(LEVELS)))
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the deal')
    parser.add_argument('--save', default=None, help='Save file path')
    parser.add_argument('--fresh', action='store_true', help='Ignore any saved game')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.getenv('RUNEBREAK_LOG_LEVEL', 'WARNING').upper(),
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        config = GameConfig.from_env()
    except InvalidConfiguration as e:
        parser.error(str(e))
    if args.save:
        config = replace(config, save_path=args.save)
    gateway = gateway_from_config(config)
    session = GameSession(config=config, gateway=gateway, deck=Deck(seed=args.seed))
    session.events.subscribe(_ConsoleListener())

    try:
        if args.level is not None:
            session.select_level(args.level)
        elif args.rows is not None or args.cols is not None:
            session.new_game(args.rows or config.default_rows, args.cols or config.default_cols)
        elif args.fresh:
            session.new_game(config.default_rows, config.default_cols)
        elif session.boot():
            print('Resumed saved game.')
    except InvalidConfiguration as e:
        parser.error(str(e))

    print("Pick cards as r,c or by index. 's' saves, 'n' starts over, 'q' quits.")
    while True:
        assert session.grid is not None
        print()
        print(session.grid.pretty(session.engine.selection if session.engine else ()))
        print(_status(session))
        if not session.active:
            try:
                text = input('Play again? [y/N] ').strip().lower()
            except EOFError:
                return
            if text != 'y':
                return
            session.restart_game()
            continue
        try:
            text = input('> ').strip().lower()
        except EOFError:
            text = 'q'
        if text == 'q':
            if session.save_now():
                print('Game saved.')
            return
        if text == 's':
            print('Game saved.' if session.save_now() else 'Save failed.')
            continue
        if text == 'n':
            session.restart_game()
            continue
        index = _parse_pick(text, session)
        if index is None:
            print('Could not parse. Try again.')
            continue
        try:
            result = session.handle_reveal(index)
        except RejectedReveal as e:
            print(f'Cannot pick that card: {e}')
            continue
        if result.pair_complete:
            print(session.grid.pretty(session.engine.selection if session.engine else ()))
            _settle(session)
