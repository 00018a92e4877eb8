import unittest

from game import (
    AlreadyMatched,
    AlreadyRevealed,
    Busy,
    EngineState,
    EventChannel,
    Grid,
    InvalidCell,
    InvalidTransition,
    MatchEngine,
    ScoreTracker,
)


class TestMatchEngine(unittest.TestCase):
    def setUp(self):
        # ids: 0 at 0/3, 1 at 1/4, 2 at 2/5
        self.grid = Grid(2, 3, [0, 1, 2, 0, 1, 2])
        self.events = EventChannel()
        self.score = ScoreTracker(events=self.events)
        self.engine = MatchEngine(self.grid, self.score, self.events)

    def test_given_two_picks_when_revealing_then_idle_one_selected_resolving(self):
        self.assertIs(self.engine.state, EngineState.IDLE)
        r1 = self.engine.request_reveal(0)
        self.assertFalse(r1.pair_complete)
        self.assertIs(self.engine.state, EngineState.ONE_SELECTED)
        self.assertEqual(self.score.moves, 0)
        r2 = self.engine.request_reveal(3)
        self.assertTrue(r2.pair_complete)
        self.assertIs(self.engine.state, EngineState.RESOLVING)
        self.assertEqual(self.engine.selection, (0, 3))
        self.assertEqual(self.score.moves, 1)

    def test_given_resolving_when_third_reveal_then_busy_and_selection_unchanged(self):
        self.engine.request_reveal(0)
        self.engine.request_reveal(1)
        with self.assertRaises(Busy):
            self.engine.request_reveal(2)
        self.assertEqual(self.engine.selection, (0, 1))
        self.assertFalse(self.grid.cell(2).revealed)

    def test_given_matching_pair_when_resolve_then_matched_and_idle(self):
        self.engine.request_reveal(4)
        self.engine.request_reveal(1)
        res = self.engine.resolve(now=0.0)
        self.assertTrue(res.matched)
        self.assertEqual(res.points, 100)
        self.assertEqual(res.remaining_pairs, 2)
        self.assertFalse(res.game_over)
        self.assertTrue(self.grid.cell(1).matched and self.grid.cell(4).matched)
        self.assertIs(self.engine.state, EngineState.IDLE)
        self.assertEqual(self.grid.matched_count(), 2 * self.score.matches)

    def test_given_mismatch_when_resolve_then_stays_resolving_until_concealed(self):
        self.score.record_match(0.0)
        self.engine.request_reveal(0)
        self.engine.request_reveal(1)
        res = self.engine.resolve(now=1.0)
        self.assertFalse(res.matched)
        self.assertEqual(self.score.combo, 0)
        self.assertIs(self.engine.state, EngineState.RESOLVING)
        self.assertTrue(self.engine.awaiting_conceal)
        with self.assertRaises(Busy):
            self.engine.request_reveal(2)
        with self.assertRaises(InvalidTransition):
            self.engine.resolve(now=1.0)

        self.assertEqual(self.engine.conceal_mismatch(), (0, 1))
        self.assertIs(self.engine.state, EngineState.IDLE)
        self.assertFalse(self.grid.cell(0).revealed)
        self.assertFalse(self.grid.cell(1).revealed)
        with self.assertRaises(InvalidTransition):
            self.engine.conceal_mismatch()

    def test_given_invalid_cells_when_revealing_then_rejected_without_state_change(self):
        self.engine.request_reveal(2)
        self.engine.request_reveal(5)
        self.engine.resolve(now=0.0)
        self.engine.request_reveal(0)
        moves = self.score.moves
        with self.assertRaises(AlreadyMatched):
            self.engine.request_reveal(2)
        with self.assertRaises(AlreadyRevealed):
            self.engine.request_reveal(0)
        with self.assertRaises(InvalidCell):
            self.engine.request_reveal(6)
        self.assertEqual(self.engine.selection, (0,))
        self.assertIs(self.engine.state, EngineState.ONE_SELECTED)
        self.assertEqual(self.score.moves, moves)

    def test_given_pick_order_when_resolving_then_outcome_symmetric(self):
        self.engine.request_reveal(3)
        self.engine.request_reveal(0)
        self.assertTrue(self.engine.resolve(now=0.0).matched)

    def test_given_all_pairs_when_resolved_then_game_over_and_events(self):
        for a, b in ((0, 3), (1, 4), (2, 5)):
            self.engine.request_reveal(a)
            self.engine.request_reveal(b)
            res = self.engine.resolve(now=0.0)
        self.assertTrue(res.game_over)
        self.assertEqual(self.engine.remaining_pairs, 0)
        names = [e.name for e in self.events.drain()]
        self.assertEqual(names.count('cell_matched'), 6)
        self.assertEqual(names.count('cell_revealed'), 6)
        self.assertEqual(names.count('pairs_remaining_changed'), 3)

    def test_given_no_pair_selected_when_resolve_then_invalid_transition(self):
        with self.assertRaises(InvalidTransition):
            self.engine.resolve(now=0.0)
        self.engine.request_reveal(0)
        with self.assertRaises(InvalidTransition):
            self.engine.resolve(now=0.0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
