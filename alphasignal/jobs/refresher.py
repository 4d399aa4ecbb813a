from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set, Tuple

from alphasignal.assets import AssetSpec, get_asset
from alphasignal.candles.store import SeriesStore
from alphasignal.tracker import LiveStateTracker

log = logging.getLogger("refresher")


class MarketPoller:
    """
    Periodic refresh of the active asset.

    - at most one refresh in flight per asset and generation; a tick
      that finds one running is skipped (a full provider chain can take
      longer than the poll interval). A refresh left over from before a
      switch does not block the new generation.
    - switching assets wipes the store and bumps a generation counter;
      a refresh that started before the switch is dropped when it lands
    - the tracker is blocking (sync HTTP), so it runs in a worker thread
    """

    def __init__(
        self,
        tracker: LiveStateTracker,
        store: SeriesStore,
        default_asset: str,
        interval_s: float = 3.0,
    ):
        self.tracker = tracker
        self.store = store
        self.interval_s = interval_s
        self._active: AssetSpec = get_asset(default_asset)
        self._generation = 0
        self._in_flight: Set[Tuple[str, int]] = set()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def active_asset(self) -> AssetSpec:
        return self._active

    @property
    def generation(self) -> int:
        return self._generation

    def select(self, asset_id: str) -> bool:
        """
        Make asset_id the active asset. Returns True if it changed.
        Raises KeyError for unknown assets.
        """
        asset = get_asset(asset_id)
        if asset.id == self._active.id:
            return False

        log.info("Switching asset %s -> %s", self._active.id, asset.id)
        self._active = asset
        self._generation += 1
        # No cross-asset state: the new asset starts from an empty series.
        self.store.clear()
        return True

    async def switch(self, asset_id: str) -> bool:
        changed = self.select(asset_id)
        if changed:
            self._spawn(self._active.id)
        return changed

    async def refresh_once(self, asset_id: Optional[str] = None) -> bool:
        """
        One refresh cycle. Returns True if its result was stored.
        """
        asset = get_asset(asset_id) if asset_id else self._active
        generation = self._generation
        key = (asset.id, generation)
        if key in self._in_flight:
            log.debug("Refresh already in flight for asset=%s, skipping tick", asset.id)
            return False

        self._in_flight.add(key)
        try:
            prior = self.store.get_series(asset.id)
            was_live = self.store.is_live(asset.id)
            result = await asyncio.to_thread(self.tracker.refresh, asset, prior)
        finally:
            self._in_flight.discard(key)

        if generation != self._generation or asset.id != self._active.id:
            log.debug("Discarding stale refresh asset=%s generation=%d", asset.id, generation)
            return False

        if prior and was_live != result.is_live:
            log.info(
                "Provenance changed asset=%s %s -> %s",
                asset.id,
                "live" if was_live else "simulated",
                "live" if result.is_live else "simulated",
            )
        self.store.replace(asset.id, result)
        return True

    def _spawn(self, asset_id: str) -> asyncio.Task:
        task = asyncio.create_task(self._guarded_refresh(asset_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded_refresh(self, asset_id: str) -> None:
        try:
            await self.refresh_once(asset_id)
        except Exception as e:
            # Keep the loop alive, but log the traceback.
            log.exception("Refresh failed for asset=%s error=%r", asset_id, e)

    async def run(self) -> None:
        """
        Background loop: refresh immediately, then once per interval.
        Each tick spawns a task so a slow chain never delays the timer.
        """
        while True:
            self._spawn(self._active.id)
            await asyncio.sleep(self.interval_s)

    async def stop(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
