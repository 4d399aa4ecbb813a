from __future__ import annotations

import logging
from typing import List, Optional

from alphasignal.assets import AssetSpec
from alphasignal.candles.simulation import SimulationGenerator
from alphasignal.models.market import Candle, RefreshResult
from alphasignal.providers.router import AssetSourceRouter

log = logging.getLogger("live_state")


class LiveStateTracker:
    """
    Entry point of one refresh cycle.

    live data     -> replaces the prior series wholesale, is_live=True
    no live data  -> prior series extended by simulation, is_live=False
    nothing at all -> cold-start simulation, is_live=False

    Holds no series itself: the caller passes the prior series in and
    keeps whatever comes back.
    """

    def __init__(
        self,
        router: AssetSourceRouter,
        simulator: Optional[SimulationGenerator] = None,
        cold_window: int = 60,
    ):
        self.router = router
        self.simulator = simulator or SimulationGenerator()
        self.cold_window = cold_window

    def refresh(self, asset: AssetSpec, prior: Optional[List[Candle]] = None) -> RefreshResult:
        live = self.router.resolve(asset)
        if live:
            return RefreshResult(live, True)

        if prior:
            return RefreshResult(self.simulator.warm(asset, prior), False)

        log.info("No prior series for asset=%s, starting simulation", asset.id)
        return RefreshResult(self.simulator.cold(asset, self.cold_window), False)
