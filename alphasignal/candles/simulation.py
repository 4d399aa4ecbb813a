from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

from alphasignal.assets import AssetSpec
from alphasignal.candles.bucket import CandleBucketEngine
from alphasignal.models.market import Candle, floor_to_bucket

log = logging.getLogger("simulation")


class SimulationGenerator:
    """
    Synthetic price series used when no live provider answers.

    cold(): a full window built from the asset's seed price.
    warm(): one CandleBucketEngine step on top of an existing series.

    Randomness and clock are injectable; with a seeded Random and a
    fixed clock the output is fully reproducible.
    """

    def __init__(
        self,
        engine: Optional[CandleBucketEngine] = None,
        rng: Optional[random.Random] = None,
        now_ms: Optional[Callable[[], int]] = None,
    ):
        self.engine = engine or CandleBucketEngine(rng=rng, now_ms=now_ms)
        self.rng = rng or self.engine.rng
        self.now_ms = now_ms or self.engine.now_ms

    def cold(self, asset: AssetSpec, window_size: int = 60) -> List[Candle]:
        if window_size < 1:
            raise ValueError("window_size must be >= 1")

        bucket_ms = self.engine.bucket_ms
        end_ts = floor_to_bucket(self.now_ms(), bucket_ms)
        vol = asset.volatility
        price = asset.seed_price

        out: List[Candle] = []
        for i in range(window_size - 1, -1, -1):
            ts = end_ts - i * bucket_ms

            change = price * (self.rng.random() - 0.5) * vol * 2
            open_ = price
            close = price + change
            high = max(open_, close) + self.rng.random() * price * vol * 0.5
            low = min(open_, close) - self.rng.random() * price * vol * 0.5
            volume = self.rng.randint(100, 1099)

            out.append(Candle.at(ts, open_, high, low, close, volume))
            price = close

        log.info("Cold-start simulation asset=%s bars=%d last_close=%.4f", asset.id, len(out), price)
        return out

    def warm(self, asset: AssetSpec, prior: List[Candle]) -> List[Candle]:
        if not prior:
            return self.cold(asset)
        return self.engine.advance(prior, asset.volatility)
