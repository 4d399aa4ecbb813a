from __future__ import annotations

import argparse
import logging

from alphasignal.assets import ASSETS, get_asset, source_label
from alphasignal.candles.simulation import SimulationGenerator
from alphasignal.config import get_settings
from alphasignal.providers.loader import get_router
from alphasignal.tracker import LiveStateTracker


def run(asset_ids: list[str], cycles: int = 3) -> None:
    """
    Runs a few refresh cycles per asset against the real providers and
    prints where the data came from.

    - cycle 1 starts with no prior series
    - later cycles feed the previous result back in, like the poller does
    """
    settings = get_settings()
    router = get_router(settings)
    tracker = LiveStateTracker(router, SimulationGenerator(), cold_window=settings.cold_start_window)

    try:
        for asset_id in asset_ids:
            asset = get_asset(asset_id)
            series = []
            for i in range(cycles):
                series, is_live = tracker.refresh(asset, series)
                last = series[-1]
                print(
                    f"[{asset.id} #{i + 1}] {source_label(asset, is_live)} "
                    f"bars={len(series)} last={last.time} "
                    f"O={last.open:.2f} H={last.high:.2f} L={last.low:.2f} C={last.close:.2f} V={last.volume:.0f}"
                )
    finally:
        router.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Refresh each asset against live providers")
    parser.add_argument("assets", nargs="*", default=list(ASSETS))
    parser.add_argument("--cycles", type=int, default=3)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    run(args.assets, args.cycles)
