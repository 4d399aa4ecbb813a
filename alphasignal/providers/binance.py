from __future__ import annotations

from typing import List, Optional

import httpx

from alphasignal.errors import ParseFailure
from alphasignal.models.market import Candle
from alphasignal.providers.base import ProviderAdapter, decode_json, get_direct


class BinanceAdapter(ProviderAdapter):
    """
    Binance spot klines (crypto, and PAXGUSDT as a gold surrogate).

    Binance serves CORS headers itself, so no relay is involved:
      GET {base_url}/api/v3/klines?symbol=BTCUSDT&interval=5m&limit=100

    Rows are positional:
      [open_time_ms, open, high, low, close, volume, close_time, ...]
    """

    name = "binance"

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        base_url: str = "https://api.binance.com",
        timeout_s: float = 10.0,
    ) -> None:
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout_s)

    def close(self) -> None:
        self._client.close()

    def _fetch(self, instrument: str) -> List[Candle]:
        url = f"{self.base_url}/api/v3/klines"
        params = {"symbol": instrument, "interval": "5m", "limit": str(self.max_bars)}

        data = decode_json(get_direct(self._client, url, params=params))
        if not isinstance(data, list):
            raise ParseFailure(f"klines payload is {type(data).__name__}, expected list")

        out: List[Candle] = []
        for row in data:
            if not isinstance(row, list) or len(row) < 6:
                raise ParseFailure(f"malformed kline row: {row!r}")
            out.append(
                Candle.at(
                    timestamp=int(row[0]),
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=float(row[5]),
                )
            )
        return out
