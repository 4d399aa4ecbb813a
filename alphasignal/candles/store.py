from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from typing import Dict, List, Optional

from alphasignal.models.market import Candle, RefreshResult
from alphasignal.models.signal import TradeSignal


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SeriesStore:
    """
    In-memory series storage + freshness tracking, keyed by asset id.

    series[asset]        -> latest series returned by a refresh cycle
    live[asset]          -> provenance of that series
    last_updated[asset]  -> when a refresh last wrote the asset
    signals[asset]       -> last trade signal generated for the asset

    The poller writes series; the /signal route writes signals.
    The core itself keeps no state.
    """
    series: Dict[str, List[Candle]] = field(default_factory=dict)
    live: Dict[str, bool] = field(default_factory=dict)
    last_updated: Dict[str, datetime] = field(default_factory=dict)
    signals: Dict[str, TradeSignal] = field(default_factory=dict)

    def get_series(self, asset_id: str) -> List[Candle]:
        return self.series.get(asset_id, [])

    def is_live(self, asset_id: str) -> bool:
        return self.live.get(asset_id, False)

    def replace(self, asset_id: str, result: RefreshResult) -> None:
        """Store a refresh result in one shot."""
        self.series[asset_id] = list(result.series)
        self.live[asset_id] = result.is_live
        self.last_updated[asset_id] = utcnow()

    def get_last_updated(self, asset_id: str) -> Optional[datetime]:
        return self.last_updated.get(asset_id)

    def has_any_data(self, asset_id: str) -> bool:
        return len(self.series.get(asset_id, [])) > 0

    def is_fresh(self, asset_id: str, max_age_seconds: float) -> bool:
        """
        Freshness check:
        - Must have some data
        - last_updated must be within max_age_seconds
        """
        if not self.has_any_data(asset_id):
            return False

        last = self.get_last_updated(asset_id)
        if last is None:
            return False

        return (utcnow() - last) <= timedelta(seconds=max_age_seconds)

    def set_signal(self, asset_id: str, signal: TradeSignal) -> None:
        self.signals[asset_id] = signal

    def get_signal(self, asset_id: str) -> Optional[TradeSignal]:
        return self.signals.get(asset_id)

    def clear(self) -> None:
        self.series.clear()
        self.live.clear()
        self.last_updated.clear()
        self.signals.clear()
