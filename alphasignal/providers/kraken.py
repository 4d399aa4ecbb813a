from __future__ import annotations

from typing import Dict, List, Tuple

from alphasignal.errors import ParseFailure
from alphasignal.models.market import Candle
from alphasignal.providers.base import ProviderAdapter, decode_json
from alphasignal.providers.relay import ProxyRelay

# Kraken names the result key after its own pair naming convention,
# which does not always match the requested pair (XAUUSD -> XXAUZUSD).
RESULT_KEY_ALIASES: Dict[str, Tuple[str, ...]] = {
    "XAUUSD": ("XAUUSD", "XXAUZUSD"),
    "XBTUSD": ("XXBTZUSD", "XBTUSD"),
    "ETHUSD": ("XETHZUSD", "ETHUSD"),
}

# Always present next to the data key: the "since" cursor.
SENTINEL_KEY = "last"


def select_result_key(pair: str, result: dict) -> str:
    """
    Pick the key holding the OHLC rows.

    1) known aliases for the pair, in order
    2) fallback for unlisted pairs: the single key that is not "last"

    Anything else (no match, several candidates) is a ParseFailure.
    """
    aliases = RESULT_KEY_ALIASES.get(pair.upper())
    if aliases:
        for key in aliases:
            if key in result:
                return key
        raise ParseFailure(f"none of the known result keys {aliases} present for {pair}: {sorted(result)}")

    candidates = [k for k in result if k != SENTINEL_KEY]
    if len(candidates) != 1:
        raise ParseFailure(f"cannot pick result key for {pair}: candidates={sorted(candidates)}")
    return candidates[0]


class KrakenAdapter(ProviderAdapter):
    """
    Kraken public OHLC (spot metals), reached through ProxyRelay:
      GET {base_url}/0/public/OHLC?pair=XAUUSD&interval=5

    Rows: [time_s, open, high, low, close, vwap, volume, count]
    """

    name = "kraken"

    def __init__(self, relay: ProxyRelay, base_url: str = "https://api.kraken.com") -> None:
        super().__init__()
        self.relay = relay
        self.base_url = base_url.rstrip("/")

    def close(self) -> None:
        self.relay.close()

    def _fetch(self, instrument: str) -> List[Candle]:
        url = f"{self.base_url}/0/public/OHLC?pair={instrument}&interval=5"
        data = decode_json(self.relay.deliver(url))

        if not isinstance(data, dict):
            raise ParseFailure("OHLC payload is not an object")
        errors = data.get("error") or []
        if errors:
            raise ParseFailure(f"provider error: {', '.join(map(str, errors))}")

        result = data.get("result")
        if not isinstance(result, dict):
            raise ParseFailure("OHLC payload has no result object")

        rows = result[select_result_key(instrument, result)]
        if not isinstance(rows, list):
            raise ParseFailure("OHLC rows are not a list")

        out: List[Candle] = []
        for row in rows[-self.max_bars:]:
            if not isinstance(row, list) or len(row) < 7:
                raise ParseFailure(f"malformed OHLC row: {row!r}")
            out.append(
                Candle.at(
                    timestamp=int(row[0]) * 1000,
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=float(row[6]),
                )
            )
        return out
