import unittest

from game import Event, EventChannel, GameListener, ManualClock, Scheduler


class TestScheduler(unittest.TestCase):
    def setUp(self):
        self.clock = ManualClock()
        self.sched = Scheduler(self.clock)
        self.ran = []

    def test_given_delays_when_clock_advances_then_callbacks_run_in_deadline_order(self):
        self.sched.call_later(1.0, self.ran.append, 'b')
        self.sched.call_later(0.5, self.ran.append, 'a')
        self.sched.call_later(1.0, self.ran.append, 'c')
        self.assertEqual(self.sched.run_due(), 0)
        self.assertEqual(self.sched.next_deadline(), 0.5)

        self.clock.advance(0.6)
        self.assertEqual(self.sched.run_due(), 1)
        self.clock.advance(1.0)
        self.assertEqual(self.sched.run_due(), 2)
        self.assertEqual(self.ran, ['a', 'b', 'c'])
        self.assertIsNone(self.sched.next_deadline())

    def test_given_cancelled_handles_when_due_then_skipped(self):
        h = self.sched.call_later(0.1, self.ran.append, 'x')
        self.sched.call_later(0.2, self.ran.append, 'y')
        self.sched.cancel(h)
        self.assertEqual(self.sched.pending, 1)
        self.clock.advance(1.0)
        self.sched.run_due()
        self.assertEqual(self.ran, ['y'])

        self.sched.call_later(0.1, self.ran.append, 'z')
        self.assertEqual(self.sched.cancel_all(), 1)
        self.clock.advance(1.0)
        self.assertEqual(self.sched.run_due(), 0)
        self.assertEqual(self.ran, ['y'])

    def test_given_callback_scheduling_more_work_when_due_then_chain_runs(self):
        def first():
            self.ran.append(1)
            self.sched.call_later(0.0, self.ran.append, 2)

        self.sched.call_later(0.0, first)
        self.sched.run_due()
        self.assertEqual(self.ran, [1, 2])

    def test_given_postponed_deadlines_when_clock_advances_then_order_kept_and_run_later(self):
        self.sched.call_later(0.5, self.ran.append, 'a')
        self.sched.call_later(1.0, self.ran.append, 'b')
        self.sched.postpone(10.0)
        self.assertEqual(self.sched.next_deadline(), 10.5)
        self.clock.advance(5.0)
        self.assertEqual(self.sched.run_due(), 0)
        self.clock.advance(6.0)
        self.assertEqual(self.sched.run_due(), 2)
        self.assertEqual(self.ran, ['a', 'b'])

    def test_given_manual_clock_when_advancing_backwards_then_value_error(self):
        with self.assertRaises(ValueError):
            self.clock.advance(-1)


class _Boom(GameListener):
    def on_cell_concealed(self, index):
        raise RuntimeError('render failed')


class _Seen(GameListener):
    def __init__(self):
        self.seen = []

    def on_cell_concealed(self, index):
        self.seen.append(index)

    def on_game_over(self, final_score, final_moves):
        self.seen.append((final_score, final_moves))


class TestEventChannel(unittest.TestCase):
    def test_given_failing_listener_when_emitting_then_others_still_notified(self):
        ch = EventChannel()
        seen = _Seen()
        ch.subscribe(_Boom())
        ch.subscribe(seen)
        with self.assertLogs('runebreak_core.events', level='ERROR'):
            ch.cell_concealed(3)
        ch.game_over(500, 9)
        self.assertEqual(seen.seen, [3, (500, 9)])

    def test_given_events_when_drained_then_queue_empties(self):
        ch = EventChannel()
        ch.cell_revealed(1, 7)
        ch.moves_changed(1)
        events = ch.drain()
        self.assertEqual(events[0], Event('cell_revealed', {'index': 1, 'card_id': 7}))
        self.assertEqual(events[1].to_json(), {'event': 'moves_changed', 'moves': 1})
        self.assertEqual(ch.drain(), [])

    def test_given_small_queue_when_overflowing_then_oldest_dropped(self):
        ch = EventChannel(maxlen=2)
        for i in range(5):
            ch.cell_concealed(i)
        self.assertEqual([e.payload['index'] for e in ch.drain()], [3, 4])

    def test_given_unsubscribed_listener_when_emitting_then_not_called(self):
        ch = EventChannel()
        seen = _Seen()
        ch.subscribe(seen)
        ch.subscribe(seen)
        ch.unsubscribe(seen)
        ch.cell_concealed(0)
        self.assertEqual(seen.seen, [])


if __name__ == '__main__':
    unittest.main(verbosity=2)
