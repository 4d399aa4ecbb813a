from __future__ import annotations

import random
import time
from dataclasses import replace
from typing import Callable, List, Optional

from alphasignal.models.market import BUCKET_MS, Candle


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class CandleBucketEngine:
    """
    Keeps a series moving between provider answers.

    One call to advance() makes one decision against the last candle:
    - now is still inside its bucket  -> SameBucket: rework the last candle
    - now is in any later bucket      -> NewBucket: append one flat candle

    NewBucket advances exactly one bucket, however much time went by;
    there is no back-fill of skipped buckets.
    """

    def __init__(
        self,
        bucket_ms: int = BUCKET_MS,
        max_window: int = 100,
        rng: Optional[random.Random] = None,
        now_ms: Optional[Callable[[], int]] = None,
    ):
        self.bucket_ms = bucket_ms
        self.max_window = max_window
        self.rng = rng or random.Random()
        self.now_ms = now_ms or wall_clock_ms

    def is_same_bucket(self, last_ts: int, now: int) -> bool:
        return now // self.bucket_ms == last_ts // self.bucket_ms

    def advance(self, series: List[Candle], volatility: float) -> List[Candle]:
        """Returns a new list; the input series is left untouched."""
        if not series:
            raise ValueError("cannot advance an empty series")

        last = series[-1]
        if self.is_same_bucket(last.timestamp, self.now_ms()):
            return series[:-1] + [self._same_bucket(last, volatility)]
        return self._new_bucket(series)

    def _same_bucket(self, last: Candle, volatility: float) -> Candle:
        """Simulated tick inside the current bucket."""
        drift = last.close * (self.rng.random() - 0.5) * (volatility / 10)
        close = last.close + drift
        return replace(
            last,
            close=close,
            high=max(last.high, close),
            low=min(last.low, close),
            volume=last.volume + self.rng.randint(0, 9),
        )

    def _new_bucket(self, series: List[Candle]) -> List[Candle]:
        last = series[-1]
        price = last.close
        candle = Candle.at(
            timestamp=last.timestamp + self.bucket_ms,
            open=price,
            high=price,
            low=price,
            close=price,
            volume=0,
        )

        kept = series if len(series) < self.max_window else series[len(series) - self.max_window + 1:]
        return kept + [candle]
