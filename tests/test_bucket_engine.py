import random
import unittest

from alphasignal.candles.bucket import CandleBucketEngine
from alphasignal.models.market import BUCKET_MS, Candle

T0 = 1_700_000_100_000  # bucket aligned
VOL = 0.002


def series(n, start=T0, price=100.0):
    out = []
    for i in range(n):
        out.append(Candle.at(start + i * BUCKET_MS, price, price + 1, price - 1, price + 0.5, 50))
        price += 0.5
    return out


def engine(now, max_window=100, seed=7):
    return CandleBucketEngine(max_window=max_window, rng=random.Random(seed), now_ms=lambda: now)


class TestSameBucket(unittest.TestCase):
    def test_mutates_last_candle_only(self):
        prior = series(10)
        last = prior[-1]
        out = engine(now=last.timestamp + 4 * 60 * 1000).advance(prior, VOL)

        self.assertEqual(len(out), len(prior))
        self.assertEqual(out[:-1], prior[:-1])
        new = out[-1]
        self.assertEqual(new.timestamp, last.timestamp)
        self.assertEqual(new.open, last.open)
        self.assertGreaterEqual(new.high, last.high)
        self.assertLessEqual(new.low, last.low)
        self.assertGreaterEqual(new.high, new.close)
        self.assertLessEqual(new.low, new.close)
        self.assertGreaterEqual(new.volume, last.volume)
        self.assertLessEqual(new.volume, last.volume + 9)

    def test_drift_is_bounded(self):
        prior = series(3)
        last = prior[-1]
        bound = last.close * VOL / 20
        for seed in range(50):
            out = engine(now=last.timestamp + 1000, seed=seed).advance(prior, VOL)
            self.assertLessEqual(abs(out[-1].close - last.close), bound)

    def test_input_not_mutated(self):
        prior = series(5)
        snapshot = list(prior)
        engine(now=prior[-1].timestamp).advance(prior, VOL)
        self.assertEqual(prior, snapshot)


class TestNewBucket(unittest.TestCase):
    def test_appends_flat_candle(self):
        prior = series(10)
        last = prior[-1]
        out = engine(now=last.timestamp + BUCKET_MS).advance(prior, VOL)

        self.assertEqual(len(out), 11)
        new = out[-1]
        self.assertEqual(new.timestamp, last.timestamp + BUCKET_MS)
        self.assertEqual(new.open, last.close)
        self.assertEqual((new.high, new.low, new.close), (new.open, new.open, new.open))
        self.assertEqual(new.volume, 0)

    def test_evicts_oldest_at_window_cap(self):
        prior = series(60)
        out = engine(now=prior[-1].timestamp + BUCKET_MS, max_window=60).advance(prior, VOL)

        self.assertEqual(len(out), 60)
        self.assertEqual(out[0], prior[1])
        self.assertEqual(out[-1].open, prior[-1].close)

    def test_single_step_after_long_gap(self):
        prior = series(5)
        out = engine(now=prior[-1].timestamp + 7 * BUCKET_MS + 1234).advance(prior, VOL)

        self.assertEqual(len(out), 6)
        self.assertEqual(out[-1].timestamp - out[-2].timestamp, BUCKET_MS)

    def test_empty_series_rejected(self):
        with self.assertRaises(ValueError):
            engine(now=T0).advance([], VOL)


class TestIsSameBucket(unittest.TestCase):
    def test_boundaries(self):
        e = engine(now=T0)
        self.assertTrue(e.is_same_bucket(T0, T0 + BUCKET_MS - 1))
        self.assertFalse(e.is_same_bucket(T0, T0 + BUCKET_MS))
        self.assertFalse(e.is_same_bucket(T0, T0 - 1))


if __name__ == "__main__":
    unittest.main()
