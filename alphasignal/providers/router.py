from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from alphasignal.assets import AssetSpec
from alphasignal.errors import ConfigurationError
from alphasignal.models.market import Candle
from alphasignal.providers.base import ProviderAdapter

log = logging.getLogger("source_router")


@dataclass(frozen=True)
class SourceLink:
    """One step of a chain: an adapter plus the instrument it is asked for."""
    adapter: ProviderAdapter
    instrument: str

    def describe(self) -> str:
        return f"{self.adapter.name}:{self.instrument}"


class AssetSourceRouter:
    """
    Ordered provider chain per asset.

    The first link returning candles wins and the rest of the chain is
    never called. Results are never merged across providers.
    """

    def __init__(self, chains: Dict[str, List[SourceLink]]):
        self.chains = {asset_id: list(links) for asset_id, links in chains.items()}

    def validate(self, assets: Iterable[AssetSpec]) -> None:
        """Fail at startup if any asset has no chain."""
        missing = [a.id for a in assets if not self.chains.get(a.id)]
        if missing:
            raise ConfigurationError(f"No provider chain registered for: {', '.join(missing)}")

    def chain_for(self, asset: AssetSpec) -> List[SourceLink]:
        chain = self.chains.get(asset.id)
        if not chain:
            raise ConfigurationError(f"No provider chain registered for asset '{asset.id}'")
        return chain

    def resolve(self, asset: AssetSpec) -> List[Candle]:
        """
        Returns the first non-empty provider result, or [] when every
        link came back empty ("no live data right now").
        """
        chain = self.chain_for(asset)
        for position, link in enumerate(chain):
            candles = link.adapter.fetch(link.instrument)
            if candles:
                log.info(
                    "Resolved asset=%s via=%s position=%d bars=%d",
                    asset.id, link.describe(), position, len(candles),
                )
                return candles
            log.info("Empty result asset=%s via=%s, trying next", asset.id, link.describe())

        log.warning("No live data for asset=%s (chain=%s)", asset.id, [l.describe() for l in chain])
        return []

    def close(self) -> None:
        seen = set()
        for chain in self.chains.values():
            for link in chain:
                if id(link.adapter) not in seen:
                    seen.add(id(link.adapter))
                    link.adapter.close()
