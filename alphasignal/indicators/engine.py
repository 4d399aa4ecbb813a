from __future__ import annotations

from typing import Dict, List

from alphasignal.models.market import BUCKET_MS, Candle


def has_gaps(candles: List[Candle], expected_ms: int = BUCKET_MS, max_check: int = 50) -> bool:
    """True if consecutive timestamps are not exactly one bucket apart."""
    if len(candles) < 2:
        return False

    tail = candles[-max_check:]
    for prev, curr in zip(tail, tail[1:]):
        if curr.timestamp - prev.timestamp != expected_ms:
            return True
    return False


# -------------------------
# Trend strength
# -------------------------
def calculate_trend(candles: List[Candle], period: int = 20) -> Dict[str, object]:
    """
    Close-to-close move over the last `period` bars.

    A 1% move over 20 five-minute bars counts as a full-strength trend.
    """
    if len(candles) < 5:
        return {"direction": "Neutral", "strength": 0}

    lookback = min(len(candles), period)
    start = candles[-lookback].close
    end = candles[-1].close
    if start == 0:
        return {"direction": "Neutral", "strength": 0}

    change_pct = (end - start) / start * 100
    strength = min(round(abs(change_pct) * 80), 100)

    direction = "Neutral"
    if strength > 10:
        direction = "Bullish" if change_pct > 0 else "Bearish"
    return {"direction": direction, "strength": strength}


# -------------------------
# Volatility (avg range %)
# -------------------------
def calculate_volatility(candles: List[Candle], window: int = 10) -> Dict[str, str]:
    if len(candles) < 5:
        return {"label": "Low", "value": "0.00%"}

    subset = [c for c in candles[-window:] if c.open]
    if not subset:
        return {"label": "Low", "value": "0.00%"}
    avg_pct = sum((c.high - c.low) / c.open for c in subset) / len(subset) * 100

    label = "Low"
    if avg_pct > 0.35:
        label = "High"
    elif avg_pct > 0.15:
        label = "Medium"
    return {"label": label, "value": f"{avg_pct:.2f}%"}


# -------------------------
# Price change
# -------------------------
def price_change(candles: List[Candle]) -> Dict[str, float]:
    """
    Current close vs the previous close (or the current open when
    there is only one candle).
    """
    if not candles:
        return {"price": 0.0, "change": 0.0, "change_pct": 0.0}

    current = candles[-1]
    reference = candles[-2].close if len(candles) > 1 else current.open
    change = current.close - reference
    pct = change / reference * 100 if reference else 0.0
    return {"price": float(current.close), "change": float(change), "change_pct": float(pct)}


def compute_metrics(candles: List[Candle]) -> Dict[str, object]:
    return {
        **price_change(candles),
        "trend": calculate_trend(candles),
        "volatility": calculate_volatility(candles),
        "continuous": not has_gaps(candles),
    }
