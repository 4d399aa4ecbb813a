import random
import unittest

from alphasignal.assets import ASSETS, AssetSpec
from alphasignal.candles.bucket import CandleBucketEngine
from alphasignal.candles.simulation import SimulationGenerator
from alphasignal.models.market import BUCKET_MS

NOW = 1_700_000_100_000 + 123_456  # mid-bucket
BUCKET_START = 1_700_000_100_000


def generator(seed=1, now=NOW):
    rng = random.Random(seed)
    clock = lambda: now
    return SimulationGenerator(CandleBucketEngine(rng=rng, now_ms=clock), rng=rng, now_ms=clock)


class TestColdStart(unittest.TestCase):
    def test_full_window_ending_at_current_bucket(self):
        out = generator().cold(ASSETS["BTCUSD"], 60)

        self.assertEqual(len(out), 60)
        self.assertEqual(out[-1].timestamp, BUCKET_START)
        for prev, curr in zip(out, out[1:]):
            self.assertEqual(curr.timestamp - prev.timestamp, BUCKET_MS)

    def test_candle_invariants(self):
        for asset in ASSETS.values():
            out = generator(seed=3).cold(asset, 60)
            self.assertEqual(out[0].open, asset.seed_price)
            for c in out:
                self.assertGreaterEqual(c.high, max(c.open, c.close))
                self.assertLessEqual(c.low, min(c.open, c.close))
                self.assertTrue(100 <= c.volume <= 1099)
                # close moves at most `volatility` away from open
                self.assertLessEqual(abs(c.close - c.open), c.open * asset.volatility + 1e-9)
            for prev, curr in zip(out, out[1:]):
                self.assertEqual(curr.open, prev.close)

    def test_deterministic_with_fixed_seed(self):
        asset = AssetSpec("TEST", "Test", "crypto", 100.0, 0.01, "Test Feed")
        self.assertEqual(generator(seed=11).cold(asset, 30), generator(seed=11).cold(asset, 30))
        self.assertNotEqual(generator(seed=11).cold(asset, 30), generator(seed=12).cold(asset, 30))

    def test_invalid_window(self):
        with self.assertRaises(ValueError):
            generator().cold(ASSETS["USOIL"], 0)


class TestWarmContinuation(unittest.TestCase):
    def test_empty_prior_falls_back_to_cold(self):
        out = generator().warm(ASSETS["XAUUSD"], [])
        self.assertEqual(len(out), 60)

    def test_extends_by_one_decision(self):
        asset = ASSETS["USOIL"]
        prior = generator(seed=5).cold(asset, 20)

        same = generator(seed=6, now=NOW + 1000).warm(asset, prior)
        self.assertEqual(len(same), 20)
        self.assertEqual(same[-1].timestamp, prior[-1].timestamp)

        new = generator(seed=6, now=NOW + BUCKET_MS).warm(asset, prior)
        self.assertEqual(len(new), 21)
        self.assertEqual(new[-1].open, prior[-1].close)


if __name__ == "__main__":
    unittest.main()
