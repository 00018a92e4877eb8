"""
Runebreak core Python package.

Pure game logic for the card-matching game, free of any rendering code so
it can be driven from the terminal, the Flask API or tests alike.
Modules:
- deck.py: Deck, Fisher-Yates shuffle of paired ids
- board.py: CardCell, Grid
- engine.py: MatchEngine turn state machine
- score.py: ScoreTracker and the combo rules
- session.py: GameSession orchestration, save/restore
- scheduler.py, events.py, storage.py, state.py, config.py, errors.py
"""
