from __future__ import annotations

from typing import List

from alphasignal.errors import ParseFailure
from alphasignal.models.market import Candle
from alphasignal.providers.base import ProviderAdapter, decode_json
from alphasignal.providers.relay import ProxyRelay

COLUMNS = ("time", "open", "high", "low", "close", "vol")


class MexcAdapter(ProviderAdapter):
    """
    MEXC contract klines (energy futures), reached through ProxyRelay:
      GET {base_url}/api/v1/contract/kline/USOIL_USDT?interval=Min5

    The payload is column-oriented:
      {"success": true, "data": {"time": [...], "open": [...], ..., "vol": [...]}}
    """

    name = "mexc"

    def __init__(self, relay: ProxyRelay, base_url: str = "https://contract.mexc.com") -> None:
        super().__init__()
        self.relay = relay
        self.base_url = base_url.rstrip("/")

    def close(self) -> None:
        self.relay.close()

    def _fetch(self, instrument: str) -> List[Candle]:
        url = f"{self.base_url}/api/v1/contract/kline/{instrument}?interval=Min5"
        payload = decode_json(self.relay.deliver(url))

        if not isinstance(payload, dict) or not payload.get("success"):
            raise ParseFailure("kline payload not successful")
        data = payload.get("data")
        if not isinstance(data, dict) or not data.get("time"):
            raise ParseFailure("kline payload has no time column")

        columns = {}
        for name in COLUMNS:
            col = data.get(name)
            if not isinstance(col, list):
                raise ParseFailure(f"column '{name}' missing")
            columns[name] = col

        length = len(columns["time"])
        if any(len(col) != length for col in columns.values()):
            raise ParseFailure(
                "column lengths differ: " + ", ".join(f"{k}={len(v)}" for k, v in columns.items())
            )

        out: List[Candle] = []
        for i in range(max(0, length - self.max_bars), length):
            out.append(
                Candle.at(
                    timestamp=int(columns["time"][i]) * 1000,
                    open=float(columns["open"][i]),
                    high=float(columns["high"][i]),
                    low=float(columns["low"][i]),
                    close=float(columns["close"][i]),
                    volume=float(columns["vol"][i]),
                )
            )
        return out
