from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from alphasignal.assets import AssetSpec
from alphasignal.config import Settings
from alphasignal.models.market import Candle
from alphasignal.models.signal import TradeSignal

log = logging.getLogger("signal_service")

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "type": {"type": "STRING", "enum": ["BUY", "SELL", "HOLD"]},
        "entryPrice": {"type": "NUMBER"},
        "stopLoss": {"type": "NUMBER"},
        "takeProfit": {"type": "NUMBER"},
        "confidence": {"type": "NUMBER"},
        "reasoning": {"type": "STRING"},
        "riskRewardRatio": {"type": "STRING"},
    },
    "required": [
        "type", "entryPrice", "stopLoss", "takeProfit",
        "confidence", "reasoning", "riskRewardRatio",
    ],
}


def build_prompt(asset: AssetSpec, window: List[Candle]) -> str:
    current_price = window[-1].close
    rows = [
        {"t": c.time, "o": c.open, "h": c.high, "l": c.low, "c": c.close, "v": c.volume}
        for c in window
    ]
    return f"""
Analyze the following OHLC (Open, High, Low, Close) market data for {asset.id} on a 5-minute timeframe.

Data (JSON):
{json.dumps(rows)}

Your task:
1. Identify the immediate trend and key support/resistance levels.
2. Generate a TRADING SIGNAL: BUY, SELL, or HOLD.
3. If BUY or SELL:
   - Entry Price: {current_price} (Current Market Price)
   - Stop Loss (SL): below support (Buy) or above resistance (Sell).
   - Take Profit (TP): exactly a 1:2 Risk:Reward ratio relative to the SL distance.
   - Risk:Reward Ratio must be "1:2".
4. Provide a brief, technical reasoning (max 2 sentences).
5. Confidence score (0-100). If the setup isn't clear, output HOLD with 0 entry/sl/tp.

Return JSON strictly matching the schema.
""".strip()


def parse_signal(text: str) -> TradeSignal:
    """
    Parse the generator's JSON text.

    Null / empty optional fields fall back to the model defaults
    (0 prices, "Market uncertain.", "N/A"). A missing or unknown type
    is a failure.
    """
    raw = json.loads(text or "{}")
    if not isinstance(raw, dict):
        raise ValueError("signal payload is not an object")
    cleaned = {k: v for k, v in raw.items() if k == "type" or v not in (None, "")}
    cleaned.pop("timestamp", None)
    return TradeSignal.model_validate(cleaned)


class SignalService:
    """
    Gemini-backed trade signal generator.

    generate() never raises: any failure (no key, no candles, HTTP
    error, malformed output) gives TradeSignal.safe_default().
    """

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.api_key = settings.gemini_api_key
        self.model = settings.gemini_model
        self.base_url = settings.gemini_base_url
        self.window = settings.signal_window
        self._client = client or httpx.Client(timeout=30.0)

    def close(self) -> None:
        self._client.close()

    def _build_url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _build_request_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "systemInstruction": {
                "parts": [{"text": "You are an expert high-frequency quantitative trader."}]
            },
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    @staticmethod
    def _response_text(response: Dict[str, Any]) -> str:
        candidates = response.get("candidates") or []
        if not candidates:
            raise ValueError("no candidates in response")
        parts = candidates[0].get("content", {}).get("parts") or []
        if not parts:
            raise ValueError("no content parts in response")
        return parts[0].get("text", "")

    def generate(self, asset: AssetSpec, candles: List[Candle]) -> TradeSignal:
        if not self.api_key:
            log.warning("GEMINI_API_KEY not set, returning safe default signal")
            return TradeSignal.safe_default()
        if not candles:
            log.warning("No candles for asset=%s, returning safe default signal", asset.id)
            return TradeSignal.safe_default()

        window = candles[-self.window:]
        body = self._build_request_body(build_prompt(asset, window))

        try:
            resp = self._client.post(
                self._build_url(),
                params={"key": self.api_key},
                json=body,
            )
            resp.raise_for_status()
            signal = parse_signal(self._response_text(resp.json()))
        except httpx.HTTPError as e:
            log.error("Signal request failed asset=%s error=%r", asset.id, e)
            return TradeSignal.safe_default()
        except (ValueError, ValidationError, AttributeError, TypeError) as e:
            log.error("Malformed signal output asset=%s error=%r", asset.id, e)
            return TradeSignal.safe_default()

        log.info(
            "Signal asset=%s type=%s confidence=%.0f entry=%s",
            asset.id, signal.type, signal.confidence, signal.entry_price,
        )
        return signal
