from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SAFE_DEFAULT_REASONING = "Analysis service temporarily unavailable."


def now_ms() -> int:
    return int(time.time() * 1000)


class TradeSignal(BaseModel):
    """
    Structured recommendation from the signal generator.

    type:
      - BUY / SELL: entry, stop loss and take profit are set
      - HOLD: no clear setup; prices are 0

    confidence:
      0-100

    risk_reward_ratio:
      e.g. "1:2"; "N/A" when there is no trade

    Accepts the generator's camelCase keys (entryPrice, stopLoss, ...)
    as well as the snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["BUY", "SELL", "HOLD"]
    entry_price: float = Field(0.0, alias="entryPrice")
    stop_loss: float = Field(0.0, alias="stopLoss")
    take_profit: float = Field(0.0, alias="takeProfit")
    confidence: float = Field(0.0, ge=0, le=100)
    reasoning: str = "Market uncertain."
    risk_reward_ratio: str = Field("N/A", alias="riskRewardRatio")
    timestamp: int = Field(default_factory=now_ms)

    @classmethod
    def safe_default(cls) -> "TradeSignal":
        """What callers get whenever the generator fails."""
        return cls(
            type="HOLD",
            entry_price=0.0,
            stop_loss=0.0,
            take_profit=0.0,
            confidence=0.0,
            reasoning=SAFE_DEFAULT_REASONING,
            risk_reward_ratio="N/A",
        )
