import math
import sys
from dataclasses import replace
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from riskguard.risk.risk_engine import (  # noqa: E402
    ERROR_MISSING_FIELDS,
    ERROR_SL_ABOVE_ENTRY,
    ERROR_SL_BELOW_ENTRY,
    TAKER_FEE_RATE,
    PositionType,
    RiskMode,
    TradeParams,
    TradeResults,
    calculate_position_size,
    resolve_risk_amount,
)


def base_params(**overrides) -> TradeParams:
    params = TradeParams(
        entry_price=100,
        stop_loss_price=95,
        take_profit_price=110,
        position_type=PositionType.LONG,
        risk_mode=RiskMode.FIXED,
        risk_amount=50,
        leverage=10,
        include_fees=False,
    )
    return replace(params, **overrides)


def test_long_worked_scenario():
    result = calculate_position_size(base_params())
    assert isinstance(result, TradeResults)
    assert result.is_valid is True
    assert result.error is None
    assert math.isclose(result.quantity, 10.0)  # 50 / (100 - 95)
    assert math.isclose(result.position_size_usdt, 1000.0)
    assert math.isclose(result.stop_loss_percentage, 5.0)
    assert math.isclose(result.required_margin, 100.0)
    assert math.isclose(result.potential_profit, 100.0)
    assert math.isclose(result.risk_reward_ratio, 2.0)
    assert math.isclose(result.take_profit_percentage, 10.0)
    assert result.net_profit == result.potential_profit
    assert result.estimated_fees == 0
    assert result.actual_risk_amount == 50


def test_short_sizing_basic():
    result = calculate_position_size(
        base_params(entry_price=95, stop_loss_price=100, take_profit_price=85, position_type=PositionType.SHORT)
    )
    assert result.is_valid is True
    assert math.isclose(result.quantity, 10.0)
    assert math.isclose(result.position_size_usdt, 950.0)
    assert math.isclose(result.potential_profit, 100.0)
    assert math.isclose(result.risk_reward_ratio, 2.0)


def test_repeated_calls_are_identical():
    params = base_params(include_fees=True)
    assert calculate_position_size(params) == calculate_position_size(params)


def test_portfolio_mode_matches_fixed_risk():
    fixed = calculate_position_size(base_params(risk_amount=10))
    portfolio = calculate_position_size(
        base_params(risk_mode=RiskMode.PORTFOLIO, portfolio_size=1000, risk_percentage=1, risk_amount=999)
    )
    assert portfolio.actual_risk_amount == 10
    assert portfolio.actual_risk_amount == fixed.actual_risk_amount
    assert portfolio.quantity == fixed.quantity
    assert portfolio.position_size_usdt == fixed.position_size_usdt
    assert portfolio.required_margin == fixed.required_margin


def test_fixed_mode_ignores_portfolio_fields():
    params = base_params(portfolio_size=0, risk_percentage=0)
    assert resolve_risk_amount(params) == 50


@pytest.mark.parametrize(
    "overrides",
    [
        {"entry_price": 0},
        {"entry_price": 0, "stop_loss_price": 0, "position_type": PositionType.SHORT},
        {"stop_loss_price": 0},
        {"risk_amount": 0},
        {"risk_amount": -5},
        {"entry_price": float("nan")},
        {"stop_loss_price": None},
        {"risk_mode": RiskMode.PORTFOLIO, "portfolio_size": 0},
        {"risk_mode": RiskMode.PORTFOLIO, "risk_percentage": 0},
    ],
)
def test_missing_fields_take_precedence(overrides):
    result = calculate_position_size(base_params(**overrides))
    assert result.is_valid is False
    assert result.error == ERROR_MISSING_FIELDS
    assert result.quantity == 0
    assert result.actual_risk_amount == 0


def test_long_stop_equal_to_entry_rejected():
    result = calculate_position_size(base_params(entry_price=100, stop_loss_price=100))
    assert result.is_valid is False
    assert result.error == ERROR_SL_ABOVE_ENTRY


def test_long_stop_above_entry_rejected():
    result = calculate_position_size(base_params(stop_loss_price=101))
    assert result.error == ERROR_SL_ABOVE_ENTRY


def test_short_stop_below_or_equal_entry_rejected():
    below = calculate_position_size(base_params(position_type=PositionType.SHORT))
    equal = calculate_position_size(base_params(position_type=PositionType.SHORT, stop_loss_price=100))
    assert below.error == ERROR_SL_BELOW_ENTRY
    assert equal.error == ERROR_SL_BELOW_ENTRY


def test_invalid_results_are_zeroed():
    result = calculate_position_size(base_params(stop_loss_price=120))
    assert result == TradeResults(is_valid=False, error=ERROR_SL_ABOVE_ENTRY)


def test_missing_take_profit_leaves_reward_empty():
    for tp in (0, None):
        result = calculate_position_size(base_params(take_profit_price=tp))
        assert result.is_valid is True
        assert result.potential_profit == 0
        assert result.risk_reward_ratio == 0
        assert result.take_profit_percentage == 0
        assert result.net_profit == 0


def test_take_profit_on_wrong_side_still_projects_reward():
    result = calculate_position_size(base_params(take_profit_price=90))
    assert result.is_valid is True
    assert math.isclose(result.potential_profit, 100.0)
    assert math.isclose(result.risk_reward_ratio, 2.0)


def test_fees_reduce_net_profit_by_estimate():
    without = calculate_position_size(base_params())
    with_fees = calculate_position_size(base_params(include_fees=True))
    expected_fees = 1000 * TAKER_FEE_RATE + 10 * 110 * TAKER_FEE_RATE
    assert math.isclose(with_fees.estimated_fees, expected_fees)
    assert with_fees.potential_profit == without.potential_profit
    assert with_fees.net_profit == with_fees.potential_profit - with_fees.estimated_fees
    assert with_fees.net_profit < without.net_profit


def test_fees_without_take_profit_use_entry_for_close_leg():
    result = calculate_position_size(base_params(take_profit_price=0, include_fees=True))
    assert math.isclose(result.estimated_fees, 2 * 1000 * TAKER_FEE_RATE)
    assert math.isclose(result.net_profit, -result.estimated_fees)


@pytest.mark.parametrize("leverage", [0, None, 1])
def test_leverage_floor(leverage):
    result = calculate_position_size(base_params(leverage=leverage))
    assert result.is_valid is True
    assert math.isclose(result.required_margin, result.position_size_usdt)


def test_leverage_divides_margin():
    result = calculate_position_size(base_params(leverage=25))
    assert math.isclose(result.required_margin, 40.0)
