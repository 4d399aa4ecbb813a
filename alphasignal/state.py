from alphasignal.candles.bucket import CandleBucketEngine
from alphasignal.candles.simulation import SimulationGenerator
from alphasignal.candles.store import SeriesStore
from alphasignal.config import get_settings
from alphasignal.jobs.refresher import MarketPoller
from alphasignal.providers.loader import get_router
from alphasignal.signals.service import SignalService
from alphasignal.tracker import LiveStateTracker

settings = get_settings()

# Global in-memory store for the running API process
store = SeriesStore()

# Provider chains (validated against the asset registry on creation)
router = get_router(settings)

tracker = LiveStateTracker(
    router,
    SimulationGenerator(CandleBucketEngine(max_window=settings.window_max)),
    cold_window=settings.cold_start_window,
)

# Poller that writes into the store
poller = MarketPoller(
    tracker,
    store,
    default_asset=settings.default_asset,
    interval_s=settings.poll_interval_seconds,
)

signal_service = SignalService(settings)
