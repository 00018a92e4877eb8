import unittest

from game import (
    AlreadyMatched,
    AlreadyRevealed,
    CardCell,
    Grid,
    InvalidCell,
    InvalidConfiguration,
    InvalidTransition,
    OutOfRange,
)


class TestGrid(unittest.TestCase):
    def _mk_grid(self):
        # 2x2: ids 0 at cells 0 and 3, ids 1 at cells 1 and 2
        return Grid(2, 2, [0, 1, 1, 0])

    def test_given_ids_when_initialized_then_all_cells_face_down(self):
        g = self._mk_grid()
        self.assertEqual(len(g), 4)
        self.assertEqual(g.cell(0), CardCell(card_id=0, revealed=False, matched=False))
        self.assertEqual(g.remaining_pairs(), 2)
        self.assertEqual(g.index(1, 0), 2)
        self.assertEqual(g.coord(3), (1, 1))

    def test_given_wrong_length_or_unpaired_ids_when_initialized_then_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            Grid(2, 2, [0, 0, 1])
        with self.assertRaises(InvalidConfiguration):
            Grid(2, 2, [0, 0, 0, 1])
        with self.assertRaises(InvalidConfiguration):
            Grid(1, 3, [0, 0, 1])

    def test_given_face_down_cell_when_reveal_then_face_up_and_id_returned(self):
        g = self._mk_grid()
        self.assertEqual(g.reveal(1), 1)
        self.assertTrue(g.cell(1).revealed)
        with self.assertRaises(AlreadyRevealed):
            g.reveal(1)

    def test_given_bad_index_when_reveal_then_out_of_range_and_no_change(self):
        g = self._mk_grid()
        before = g.cells
        for bad in (-1, 4, 99):
            with self.assertRaises(OutOfRange):
                g.reveal(bad)
        with self.assertRaises(OutOfRange):
            g.index(2, 0)
        self.assertEqual(g.cells, before)
        self.assertTrue(issubclass(OutOfRange, InvalidCell))

    def test_given_revealed_pair_when_mark_matched_then_terminal(self):
        g = self._mk_grid()
        g.reveal(0)
        g.reveal(3)
        g.mark_matched(0, 3)
        self.assertTrue(g.cell(0).matched and g.cell(0).revealed)
        self.assertEqual(g.matched_count(), 2)
        self.assertEqual(g.remaining_pairs(), 1)
        before = g.cells
        with self.assertRaises(AlreadyMatched):
            g.reveal(0)
        with self.assertRaises(InvalidTransition):
            g.conceal(3)
        self.assertEqual(g.cells, before)

    def test_given_invalid_pairs_when_mark_matched_then_invalid_transition(self):
        g = self._mk_grid()
        g.reveal(0)
        with self.assertRaises(InvalidTransition):
            g.mark_matched(0, 3)  # 3 still face down
        g.reveal(1)
        with self.assertRaises(InvalidTransition):
            g.mark_matched(0, 1)  # ids differ
        with self.assertRaises(InvalidTransition):
            g.mark_matched(0, 0)

    def test_given_face_down_cell_when_conceal_then_no_op(self):
        g = self._mk_grid()
        g.conceal(2)
        self.assertFalse(g.cell(2).revealed)
        g.reveal(2)
        g.conceal(2)
        self.assertFalse(g.cell(2).revealed)

    def test_given_matched_flags_when_restoring_then_pairs_must_be_whole(self):
        g = Grid(2, 2, [0, 1, 1, 0], matched=[True, False, False, True])
        self.assertEqual(g.remaining_pairs(), 1)
        self.assertTrue(g.cell(3).revealed)
        with self.assertRaises(InvalidConfiguration):
            Grid(2, 2, [0, 1, 1, 0], matched=[True, False, False, False])
        with self.assertRaises(InvalidConfiguration):
            Grid(2, 2, [0, 1, 1, 0], matched=[True, False])

    def test_given_mixed_cells_when_pretty_then_symbols_rendered(self):
        g = self._mk_grid()
        g.reveal(0)
        g.reveal(3)
        g.mark_matched(0, 3)
        g.reveal(1)
        txt = g.pretty([1])
        self.assertIn('[ 0]', txt)
        self.assertIn('* 1*', txt)
        self.assertIn('##', txt)
        self.assertEqual(len(txt.splitlines()), 2)


if __name__ == '__main__':
    unittest.main(verbosity=2)
