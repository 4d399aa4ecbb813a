import asyncio
import threading
import unittest

from alphasignal.candles.store import SeriesStore
from alphasignal.jobs.refresher import MarketPoller
from alphasignal.models.market import Candle, RefreshResult
from alphasignal.models.signal import TradeSignal

T0 = 1_700_000_100_000


class BlockingTracker:
    """Tracker stand-in whose refresh blocks until released."""

    def __init__(self, is_live=True):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = []
        self.is_live = is_live

    def refresh(self, asset, prior):
        self.calls.append((asset.id, len(prior)))
        self.started.set()
        self.release.wait(timeout=5)
        return RefreshResult([Candle.at(T0, 1, 1, 1, 1, 1)], self.is_live)


async def wait_started(tracker):
    while not tracker.started.is_set():
        await asyncio.sleep(0.01)


class TestMarketPoller(unittest.IsolatedAsyncioTestCase):
    async def test_refresh_stores_result(self):
        tracker = BlockingTracker()
        tracker.release.set()
        store = SeriesStore()
        poller = MarketPoller(tracker, store, default_asset="BTCUSD")

        stored = await poller.refresh_once()

        self.assertTrue(stored)
        self.assertEqual(len(store.get_series("BTCUSD")), 1)
        self.assertTrue(store.is_live("BTCUSD"))
        self.assertTrue(store.is_fresh("BTCUSD", 60))

    async def test_overlapping_refresh_is_skipped(self):
        tracker = BlockingTracker()
        poller = MarketPoller(tracker, SeriesStore(), default_asset="BTCUSD")

        first = asyncio.create_task(poller.refresh_once("BTCUSD"))
        await wait_started(tracker)

        skipped = await poller.refresh_once("BTCUSD")
        tracker.release.set()

        self.assertFalse(skipped)
        self.assertTrue(await first)
        self.assertEqual(len(tracker.calls), 1)

    async def test_result_after_switch_is_discarded(self):
        tracker = BlockingTracker()
        store = SeriesStore()
        poller = MarketPoller(tracker, store, default_asset="BTCUSD")

        pending = asyncio.create_task(poller.refresh_once("BTCUSD"))
        await wait_started(tracker)

        self.assertTrue(poller.select("XAUUSD"))
        tracker.release.set()

        self.assertFalse(await pending)
        self.assertFalse(store.has_any_data("BTCUSD"))
        self.assertFalse(store.has_any_data("XAUUSD"))

    async def test_switch_back_discards_old_generation_but_refreshes_anew(self):
        tracker = BlockingTracker()
        store = SeriesStore()
        poller = MarketPoller(tracker, store, default_asset="BTCUSD")

        stale = asyncio.create_task(poller.refresh_once("BTCUSD"))
        await wait_started(tracker)
        poller.select("USOIL")
        poller.select("BTCUSD")

        # the first BTCUSD refresh is still running; the new generation is not blocked by it
        fresh = asyncio.create_task(poller.refresh_once("BTCUSD"))
        for _ in range(100):
            if len(tracker.calls) == 2:
                break
            await asyncio.sleep(0.01)
        self.assertEqual(len(tracker.calls), 2)
        tracker.release.set()

        self.assertFalse(await stale)
        self.assertTrue(await fresh)
        self.assertEqual(poller.generation, 2)
        self.assertTrue(store.has_any_data("BTCUSD"))

    async def test_switch_clears_stored_signal(self):
        store = SeriesStore()
        store.set_signal("BTCUSD", TradeSignal.safe_default())
        poller = MarketPoller(BlockingTracker(), store, default_asset="BTCUSD")

        poller.select("XAUUSD")

        self.assertIsNone(store.get_signal("BTCUSD"))

    async def test_switch_clears_store_and_refreshes(self):
        tracker = BlockingTracker()
        tracker.release.set()
        store = SeriesStore()
        poller = MarketPoller(tracker, store, default_asset="BTCUSD")
        await poller.refresh_once()

        changed = await poller.switch("usoil")
        self.assertTrue(changed)
        self.assertFalse(store.has_any_data("BTCUSD"))

        # the immediate refresh for the new asset runs in the background
        for _ in range(100):
            if store.has_any_data("USOIL"):
                break
            await asyncio.sleep(0.01)
        self.assertTrue(store.has_any_data("USOIL"))
        self.assertEqual(tracker.calls[-1], ("USOIL", 0))
        await poller.stop()

    async def test_select_same_asset_is_noop(self):
        poller = MarketPoller(BlockingTracker(), SeriesStore(), default_asset="BTCUSD")
        self.assertFalse(poller.select("BTCUSD"))
        self.assertEqual(poller.generation, 0)

    async def test_unknown_asset(self):
        poller = MarketPoller(BlockingTracker(), SeriesStore(), default_asset="BTCUSD")
        with self.assertRaises(KeyError):
            poller.select("DOGEUSD")
        with self.assertRaises(KeyError):
            MarketPoller(BlockingTracker(), SeriesStore(), default_asset="NOPE")

    async def test_prior_series_is_passed_back(self):
        tracker = BlockingTracker(is_live=False)
        tracker.release.set()
        poller = MarketPoller(tracker, SeriesStore(), default_asset="USOIL")

        await poller.refresh_once()
        await poller.refresh_once()

        self.assertEqual(tracker.calls, [("USOIL", 0), ("USOIL", 1)])


if __name__ == "__main__":
    unittest.main()
