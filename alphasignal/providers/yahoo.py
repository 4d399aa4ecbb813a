from __future__ import annotations

import time
from typing import Callable, List, Optional

from alphasignal.errors import ParseFailure
from alphasignal.models.market import Candle
from alphasignal.providers.base import ProviderAdapter, decode_json
from alphasignal.providers.relay import ProxyRelay


class YahooAdapter(ProviderAdapter):
    """
    Yahoo Finance chart endpoint, generic last-resort source (GC=F, CL=F).

      GET {base_url}/v8/finance/chart/GC=F?interval=5m&range=1d&includePrePost=false

    Quotes contain interior nulls (no trade in that bucket); those
    indices are skipped. Only the 60 most recent valid bars are kept.
    """

    name = "yahoo"
    max_bars = 60

    def __init__(
        self,
        relay: ProxyRelay,
        base_url: str = "https://query1.finance.yahoo.com",
        now_ms: Optional[Callable[[], int]] = None,
    ) -> None:
        super().__init__()
        self.relay = relay
        self.base_url = base_url.rstrip("/")
        self._now_ms = now_ms or (lambda: int(time.time() * 1000))

    def close(self) -> None:
        self.relay.close()

    def _fetch(self, instrument: str) -> List[Candle]:
        # Cache buster: relays happily serve a stale chart otherwise.
        url = (
            f"{self.base_url}/v8/finance/chart/{instrument}"
            f"?interval=5m&range=1d&includePrePost=false&useYfid=true&_={self._now_ms()}"
        )
        data = decode_json(self.relay.deliver(url))

        try:
            result = data["chart"]["result"][0]
            timestamps = result["timestamp"]
            quote = result["indicators"]["quote"][0]
        except (KeyError, IndexError, TypeError):
            raise ParseFailure("chart payload has no result/timestamp/quote")
        if not timestamps or not quote:
            return []
        if not isinstance(quote, dict) or not isinstance(timestamps, list):
            raise ParseFailure("chart quote is not an object of columns")

        opens = quote.get("open") or []
        highs = quote.get("high") or []
        lows = quote.get("low") or []
        closes = quote.get("close") or []
        volumes = quote.get("volume") or []

        out: List[Candle] = []
        for i, ts in enumerate(timestamps):
            # Columns may be shorter than the timestamp list.
            if any(i >= len(col) or col[i] is None for col in (opens, highs, lows, closes)):
                continue
            vol = volumes[i] if i < len(volumes) else None
            candle = Candle.at(
                timestamp=int(ts) * 1000,
                open=round(float(opens[i]), 2),
                high=round(float(highs[i]), 2),
                low=round(float(lows[i]), 2),
                close=round(float(closes[i]), 2),
                volume=float(vol or 0),
            )
            # The trailing bar is stamped with the last trade time, which
            # floors into the bucket already present: keep the newest.
            if out and out[-1].timestamp == candle.timestamp:
                out[-1] = candle
            else:
                out.append(candle)
        return out[-self.max_bars:]
