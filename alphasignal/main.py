import asyncio
import logging

from fastapi import FastAPI

from alphasignal.api.routes import router as api_router
from alphasignal.state import poller, router as source_router, settings, signal_service

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="AlphaSignal Market Data API", version="0.1.0")
app.include_router(api_router)

_poll_task: asyncio.Task | None = None


@app.on_event("startup")
async def _startup():
    global _poll_task
    # Refreshes the active asset now and every POLL_INTERVAL_SECONDS after.
    _poll_task = asyncio.create_task(poller.run())


@app.on_event("shutdown")
async def _shutdown():
    if _poll_task is not None:
        _poll_task.cancel()
    await poller.stop()
    source_router.close()
    signal_service.close()


@app.get("/health")
def health():
    return {
        "status": "ok",
        "app_env": settings.app_env,
        "active_asset": poller.active_asset.id,
        "poll_interval_seconds": settings.poll_interval_seconds,
    }
