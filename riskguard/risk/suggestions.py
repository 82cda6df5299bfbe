from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from riskguard.risk.risk_engine import PositionType, TradeParams


@dataclass(frozen=True)
class ChartSuggestion:
    """Partial trade levels read off a chart screenshot."""

    entry: Optional[float] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    reasoning: Optional[str] = None


def suggestion_from_payload(payload: Mapping[str, Any]) -> ChartSuggestion:
    """Build a suggestion from a loosely shaped JSON object, dropping unusable prices."""
    reasoning = payload.get("reasoning")
    return ChartSuggestion(
        entry=_extract_price(payload, "entry", "entryPrice", "entry_price"),
        stop_loss=_extract_price(payload, "stopLoss", "stop_loss", "stopLossPrice", "stop"),
        take_profit=_extract_price(payload, "takeProfit", "take_profit", "takeProfitPrice", "target"),
        reasoning=str(reasoning).strip() if reasoning not in (None, "") else None,
    )


def apply_suggestion(params: TradeParams, suggestion: ChartSuggestion) -> TradeParams:
    """
    Merge suggested levels into the current parameters.

    Missing levels keep their current values. Direction is inferred only when both
    entry and stop are suggested: LONG if entry sits above the stop, SHORT otherwise.
    """
    position_type = params.position_type
    if suggestion.entry and suggestion.stop_loss:
        position_type = PositionType.LONG if suggestion.entry > suggestion.stop_loss else PositionType.SHORT
    return replace(
        params,
        entry_price=suggestion.entry or params.entry_price,
        stop_loss_price=suggestion.stop_loss or params.stop_loss_price,
        take_profit_price=suggestion.take_profit or params.take_profit_price,
        position_type=position_type,
    )


def _extract_price(payload: Mapping[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        if key in payload:
            value = payload[key]
            if value is None:
                return None
            try:
                numeric = float(value)
            except (TypeError, ValueError):
                return None
            if not math.isfinite(numeric) or numeric <= 0:
                return None
            return numeric
    return None
