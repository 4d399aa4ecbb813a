from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import List, NamedTuple

# Fixed candle span: 5 minutes, in epoch millis.
BUCKET_MS = 5 * 60 * 1000


def floor_to_bucket(ts_ms: int, bucket_ms: int = BUCKET_MS) -> int:
    """Round an epoch-millis timestamp down to the start of its bucket."""
    return (ts_ms // bucket_ms) * bucket_ms


def time_label(ts_ms: int) -> str:
    """HH:MM label (UTC) shown next to a candle."""
    dt = datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc)
    return dt.strftime("%H:%M")


@dataclass(frozen=True)
class Candle:
    """
    Candle (OHLCV) for one 5 minute bucket.

    time: HH:MM label of the bucket start
    timestamp: bucket start in epoch millis
    open/high/low/close: prices during the bucket
    volume: traded (or simulated) volume during the bucket

    Frozen: a series handed back to the caller never changes under it.
    Updates produce a new Candle via dataclasses.replace().
    """
    time: str
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @classmethod
    def at(cls, timestamp: int, open: float, high: float, low: float, close: float, volume: float) -> "Candle":
        bucket_ts = floor_to_bucket(int(timestamp))
        return cls(
            time=time_label(bucket_ts),
            timestamp=bucket_ts,
            open=float(open),
            high=float(high),
            low=float(low),
            close=float(close),
            volume=float(volume),
        )

    def to_dict(self) -> dict:
        return asdict(self)


class RefreshResult(NamedTuple):
    """Outcome of one refresh cycle: the new series plus its provenance."""
    series: List[Candle]
    is_live: bool
