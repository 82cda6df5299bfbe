from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# Taker fee per side, applied to the open and the close leg.
TAKER_FEE_RATE = 0.0006

ERROR_MISSING_FIELDS = "Enter required fields"
ERROR_SL_ABOVE_ENTRY = "SL must be below Entry"
ERROR_SL_BELOW_ENTRY = "SL must be above Entry"
ERROR_ZERO_PRICE_DIFF = "Price difference is zero"


class PositionType(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class RiskMode(str, Enum):
    FIXED = "FIXED"
    PORTFOLIO = "PORTFOLIO"


@dataclass(frozen=True)
class TradeParams:
    entry_price: float = 0.0
    stop_loss_price: float = 0.0
    take_profit_price: Optional[float] = 0.0
    position_type: PositionType = PositionType.LONG
    risk_mode: RiskMode = RiskMode.FIXED
    risk_amount: float = 50.0
    portfolio_size: float = 1000.0
    risk_percentage: float = 1.0
    leverage: float = 10.0
    include_fees: bool = False


@dataclass(frozen=True)
class TradeResults:
    position_size_usdt: float = 0.0
    quantity: float = 0.0
    risk_reward_ratio: float = 0.0
    stop_loss_percentage: float = 0.0
    take_profit_percentage: float = 0.0
    potential_profit: float = 0.0
    net_profit: float = 0.0
    estimated_fees: float = 0.0
    required_margin: float = 0.0
    actual_risk_amount: float = 0.0
    is_valid: bool = False
    error: Optional[str] = None


def resolve_risk_amount(params: TradeParams) -> float:
    """Dollar amount lost if the stop is hit, per the selected risk mode."""
    if params.risk_mode == RiskMode.PORTFOLIO:
        return (params.portfolio_size or 0.0) * (params.risk_percentage or 0.0) / 100
    return params.risk_amount or 0.0


def calculate_position_size(params: TradeParams) -> TradeResults:
    """
    Derive position size, margin and profit projection for a leveraged futures trade.

    Never raises for numeric input: incomplete or inconsistent parameters come back
    as ``is_valid=False`` with one of the ``ERROR_*`` messages and zeroed figures.
    Checks run in order and stop at the first failure: required fields, stop side
    relative to entry, zero distance. Take-profit side is not validated, so a target
    on the losing side still projects a positive reward.
    """
    actual_risk = resolve_risk_amount(params)
    entry = params.entry_price
    stop = params.stop_loss_price

    if not all(map(_is_positive_number, (actual_risk, entry, stop))):
        return _invalid(ERROR_MISSING_FIELDS)

    is_long = params.position_type == PositionType.LONG
    if is_long and stop >= entry:
        return _invalid(ERROR_SL_ABOVE_ENTRY)
    if not is_long and stop <= entry:
        return _invalid(ERROR_SL_BELOW_ENTRY)

    price_diff = abs(entry - stop)
    if price_diff == 0:
        return _invalid(ERROR_ZERO_PRICE_DIFF)

    quantity = actual_risk / price_diff
    position_size = quantity * entry
    stop_loss_pct = price_diff / entry * 100
    required_margin = position_size / _effective_leverage(params.leverage)

    take_profit = params.take_profit_price if _is_set(params.take_profit_price) else 0.0
    gross_profit = 0.0
    reward_ratio = 0.0
    take_profit_pct = 0.0
    if take_profit:
        profit_diff = abs(take_profit - entry)
        gross_profit = quantity * profit_diff
        reward_ratio = gross_profit / actual_risk
        take_profit_pct = profit_diff / entry * 100

    total_fees = 0.0
    if params.include_fees:
        open_fee = position_size * TAKER_FEE_RATE
        close_fee = quantity * (take_profit or entry) * TAKER_FEE_RATE
        total_fees = open_fee + close_fee

    return TradeResults(
        position_size_usdt=position_size,
        quantity=quantity,
        risk_reward_ratio=reward_ratio,
        stop_loss_percentage=stop_loss_pct,
        take_profit_percentage=take_profit_pct,
        potential_profit=gross_profit,
        net_profit=gross_profit - total_fees,
        estimated_fees=total_fees,
        required_margin=required_margin,
        actual_risk_amount=actual_risk,
        is_valid=True,
    )


def _invalid(error: str) -> TradeResults:
    return TradeResults(is_valid=False, error=error)


def _effective_leverage(leverage: Any) -> float:
    if not _is_positive_number(leverage):
        return 1.0
    return max(float(leverage), 1.0)


def _is_set(value: Any) -> bool:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return False
    return numeric != 0 and not math.isnan(numeric)


def _is_positive_number(value: Any) -> bool:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return False
    return not math.isnan(numeric) and numeric > 0
