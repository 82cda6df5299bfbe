from fastapi import APIRouter

from riskguard.core.config import get_settings
from riskguard.core.logging import get_logger
from riskguard.risk.risk_engine import PositionType, RiskMode, TradeParams, calculate_position_size
from riskguard.trading.schemas import TradeParamsRequest, TradeResultsResponse

router = APIRouter(prefix="/api", tags=["sizing"])

logger = get_logger(__name__)


def default_params() -> TradeParams:
    settings = get_settings()
    return TradeParams(
        position_type=PositionType.LONG,
        risk_mode=RiskMode.FIXED,
        risk_amount=settings.default_risk_amount,
        portfolio_size=settings.default_portfolio_size,
        risk_percentage=settings.default_risk_pct,
        leverage=settings.default_leverage,
        include_fees=False,
    )


@router.get("/sizing/defaults", response_model=TradeParamsRequest)
async def sizing_defaults():
    """Initial form values for a fresh calculator."""
    return TradeParamsRequest.from_params(default_params())


@router.post("/sizing", response_model=TradeResultsResponse)
async def sizing(request: TradeParamsRequest):
    """Compute position size, margin and projected profit; incomplete input is not an error."""
    results = calculate_position_size(request.to_params())
    if not results.is_valid:
        logger.debug(
            "sizing_incomplete",
            extra={"event": "sizing_incomplete", "reason": results.error, "position_type": request.position_type.value},
        )
    return TradeResultsResponse.from_results(results)
