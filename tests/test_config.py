import unittest

from game import LEVELS, GameConfig, InvalidConfiguration, level_size


class TestConfig(unittest.TestCase):
    def test_given_empty_environment_when_from_env_then_defaults(self):
        cfg = GameConfig.from_env({})
        self.assertEqual(cfg, GameConfig())
        self.assertEqual((cfg.default_rows, cfg.default_cols), (4, 4))
        self.assertEqual((cfg.match_points, cfg.combo_bonus, cfg.combo_window), (100, 50, 3.0))
        self.assertEqual(cfg.mismatch_delay, 1.0)
        self.assertEqual(cfg.reveal_delay, 0.5)

    def test_given_overrides_when_from_env_then_applied(self):
        cfg = GameConfig.from_env({
            "RUNEBREAK_ROWS": "2",
            "RUNEBREAK_COLS": "3",
            "RUNEBREAK_MISMATCH_DELAY": "0.25",
            "RUNEBREAK_SAVE_BACKEND": "SQLite",
            "RUNEBREAK_SAVE": "/tmp/slot.db",
            "RUNEBREAK_COMBO_WINDOW": " ",
        })
        self.assertEqual((cfg.default_rows, cfg.default_cols), (2, 3))
        self.assertEqual(cfg.mismatch_delay, 0.25)
        self.assertEqual(cfg.save_backend, "sqlite")
        self.assertEqual(cfg.save_path, "/tmp/slot.db")
        self.assertEqual(cfg.combo_window, 3.0)

    def test_given_bad_values_when_building_then_invalid_configuration(self):
        with self.assertRaises(InvalidConfiguration):
            GameConfig.from_env({"RUNEBREAK_ROWS": "four"})
        with self.assertRaises(InvalidConfiguration):
            GameConfig.from_env({"RUNEBREAK_ROWS": "3", "RUNEBREAK_COLS": "3"})
        with self.assertRaises(InvalidConfiguration):
            GameConfig(save_backend="xml")
        with self.assertRaises(InvalidConfiguration):
            GameConfig(mismatch_delay=-1)

    def test_given_levels_when_looked_up_then_canonical_sizes(self):
        self.assertEqual(LEVELS, ((2, 2), (2, 3), (4, 4), (4, 5), (5, 6)))
        for i, (r, c) in enumerate(LEVELS):
            self.assertEqual(level_size(i), (r, c))
            self.assertEqual((r * c) % 2, 0)
        with self.assertRaises(InvalidConfiguration):
            level_size(len(LEVELS))
        with self.assertRaises(InvalidConfiguration):
            level_size(-1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
