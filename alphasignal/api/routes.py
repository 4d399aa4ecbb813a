from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from alphasignal.assets import ASSETS, source_label
from alphasignal.indicators.engine import compute_metrics
from alphasignal.state import poller, signal_service, store

router = APIRouter()

# A series older than a few poll intervals means the poller is stuck.
FRESHNESS_SECONDS = 30


def iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


@router.get("/assets")
def assets():
    return [
        {
            "id": a.id,
            "name": a.name,
            "asset_class": a.asset_class,
            "active": a.id == poller.active_asset.id,
        }
        for a in ASSETS.values()
    ]


@router.get("/market")
def market():
    """
    Snapshot of the active asset:
    - candles (latest window)
    - provenance (is_live + source label)
    - dashboard metrics and freshness
    - the last generated signal, if any
    """
    asset = poller.active_asset
    candles = store.get_series(asset.id)
    is_live = store.is_live(asset.id)
    last_signal = store.get_signal(asset.id)

    return {
        "asset": asset.id,
        "name": asset.name,
        "is_live": is_live,
        "source": source_label(asset, is_live),
        "last_updated": iso(store.get_last_updated(asset.id)),
        "fresh": store.is_fresh(asset.id, FRESHNESS_SECONDS),
        "metrics": compute_metrics(candles),
        "last_signal": last_signal.model_dump() if last_signal else None,
        "candles": [c.to_dict() for c in candles],
    }


@router.post("/market/select")
async def select_asset(asset: str = Query(..., description="Asset id, e.g., BTCUSD, XAUUSD, USOIL")):
    """
    Switch the active asset. The old series is dropped and a refresh
    for the new asset starts immediately.
    """
    try:
        changed = await poller.switch(asset)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown asset '{asset}'")
    return {"ok": True, "asset": poller.active_asset.id, "changed": changed}


@router.post("/signal")
async def signal():
    """Ask the signal generator about the active series. Always answers."""
    asset = poller.active_asset
    generation = poller.generation
    candles = store.get_series(asset.id)
    result = await asyncio.to_thread(signal_service.generate, asset, candles)
    # Dropped if the user switched assets while the generator was running.
    if poller.generation == generation:
        store.set_signal(asset.id, result)
    return {"asset": asset.id, "signal": result.model_dump()}
