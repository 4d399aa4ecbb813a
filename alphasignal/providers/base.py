from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List

import httpx

from alphasignal.errors import ParseFailure, TransportFailure
from alphasignal.models.market import Candle


class ProviderAdapter(ABC):
    """
    Provider contract (interface).

    Any adapter must implement _fetch(), which may raise freely.
    Callers only ever use fetch(), which never raises: transport and
    parse failures are logged and become an empty list. An empty list
    is what lets the router fall through to the next adapter.
    """

    name: str = "provider"
    max_bars: int = 100

    def __init__(self) -> None:
        self.log = logging.getLogger(f"{self.name}_adapter")

    def fetch(self, instrument: str) -> List[Candle]:
        try:
            candles = self._fetch(instrument)
        except TransportFailure as e:
            self.log.warning("%s transport failure instrument=%s error=%s", self.name, instrument, e)
            return []
        except ParseFailure as e:
            self.log.warning("%s parse failure instrument=%s error=%s", self.name, instrument, e)
            return []
        except httpx.HTTPError as e:
            self.log.warning("%s http error instrument=%s error=%r", self.name, instrument, e)
            return []
        except Exception as e:
            self.log.warning("%s unexpected payload instrument=%s error=%r", self.name, instrument, e)
            return []

        if self.max_bars and len(candles) > self.max_bars:
            candles = candles[-self.max_bars:]
        return candles

    @abstractmethod
    def _fetch(self, instrument: str) -> List[Candle]:
        raise NotImplementedError

    def close(self) -> None:
        pass


def decode_json(resp: httpx.Response) -> Any:
    """
    Parse a response body as JSON.

    Some relays answer 200 with an HTML error page, so decoding is
    treated as part of the schema check.
    """
    try:
        return json.loads(resp.text)
    except ValueError:
        raise ParseFailure(f"response is not JSON (first bytes: {resp.text[:60]!r})")


def get_direct(client: httpx.Client, url: str, **kwargs) -> httpx.Response:
    """GET without a relay; non-2xx and transport errors become TransportFailure."""
    try:
        resp = client.get(url, **kwargs)
    except httpx.HTTPError as e:
        raise TransportFailure(f"GET {url} failed: {e!r}")
    if not resp.is_success:
        raise TransportFailure(f"GET {url} returned status {resp.status_code}")
    return resp
