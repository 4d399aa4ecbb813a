from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class AssetSpec:
    """
    One tradable asset.

    seed_price: starting price of a cold-start simulation
    volatility: fractional dispersion per 5m bucket (0.002 = 0.2%)
    live_label: provenance label shown while data comes from a live provider
    """
    id: str
    name: str
    asset_class: str  # "crypto" | "metal" | "energy"
    seed_price: float
    volatility: float
    live_label: str


ASSETS: Dict[str, AssetSpec] = {
    "BTCUSD": AssetSpec(
        id="BTCUSD",
        name="Bitcoin",
        asset_class="crypto",
        seed_price=91000.0,
        volatility=0.002,
        live_label="Binance Live Feed",
    ),
    "XAUUSD": AssetSpec(
        id="XAUUSD",
        name="Gold",
        asset_class="metal",
        seed_price=2715.0,
        volatility=0.0008,
        live_label="Kraken Live Feed",
    ),
    "USOIL": AssetSpec(
        id="USOIL",
        name="US Oil",
        asset_class="energy",
        seed_price=68.50,
        volatility=0.0015,
        live_label="Mexc Live Feed",
    ),
}

SIMULATED_LABEL = "Simulated (Offline)"


def get_asset(asset_id: str) -> AssetSpec:
    """Registry lookup. Raises KeyError for unknown ids."""
    key = (asset_id or "").strip().upper()
    if key not in ASSETS:
        raise KeyError(f"Unknown asset '{asset_id}'. Expected one of: {', '.join(ASSETS)}")
    return ASSETS[key]


def source_label(asset: AssetSpec, is_live: bool) -> str:
    return asset.live_label if is_live else SIMULATED_LABEL
