from alphasignal.assets import ASSETS
from alphasignal.config import Settings, get_settings
from alphasignal.providers.binance import BinanceAdapter
from alphasignal.providers.kraken import KrakenAdapter
from alphasignal.providers.mexc import MexcAdapter
from alphasignal.providers.relay import ProxyRelay
from alphasignal.providers.router import AssetSourceRouter, SourceLink
from alphasignal.providers.yahoo import YahooAdapter


def get_router(settings: Settings | None = None) -> AssetSourceRouter:
    """
    Provider chain factory.

    This is the single place that knows about concrete providers and the
    order they are tried in for each asset. The router is validated
    against the asset registry before it is handed out.
    """
    settings = settings or get_settings()

    relay = ProxyRelay(settings.relay_templates, timeout_s=settings.relay_timeout_seconds)
    binance = BinanceAdapter(timeout_s=settings.http_timeout_seconds)
    kraken = KrakenAdapter(relay)
    mexc = MexcAdapter(relay)
    yahoo = YahooAdapter(relay)

    router = AssetSourceRouter(
        {
            "BTCUSD": [SourceLink(binance, "BTCUSDT")],
            "XAUUSD": [
                SourceLink(kraken, "XAUUSD"),
                # Paxos Gold tracks spot gold almost 1:1.
                SourceLink(binance, "PAXGUSDT"),
                SourceLink(yahoo, "GC=F"),
            ],
            "USOIL": [
                SourceLink(mexc, "USOIL_USDT"),
                SourceLink(yahoo, "CL=F"),
            ],
        }
    )
    router.validate(ASSETS.values())
    return router
