from dataclasses import asdict
from typing import Optional

from pydantic import BaseModel, Field, validator

from riskguard.risk.risk_engine import PositionType, RiskMode, TradeParams, TradeResults
from riskguard.risk.suggestions import ChartSuggestion


class TradeParamsRequest(BaseModel):
    entry_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    stop_loss_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    take_profit_price: Optional[float] = Field(0.0, ge=0, allow_inf_nan=False)
    position_type: PositionType = PositionType.LONG
    risk_mode: RiskMode = RiskMode.FIXED
    risk_amount: float = Field(50.0, ge=0, allow_inf_nan=False)
    portfolio_size: float = Field(1000.0, ge=0, allow_inf_nan=False)
    risk_percentage: float = Field(1.0, ge=0, le=100, allow_inf_nan=False)
    leverage: float = Field(10.0, ge=0, allow_inf_nan=False)
    include_fees: bool = False

    @validator("position_type", "risk_mode", pre=True)
    def normalize_enum(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def to_params(self) -> TradeParams:
        return TradeParams(
            entry_price=self.entry_price,
            stop_loss_price=self.stop_loss_price,
            take_profit_price=self.take_profit_price,
            position_type=self.position_type,
            risk_mode=self.risk_mode,
            risk_amount=self.risk_amount,
            portfolio_size=self.portfolio_size,
            risk_percentage=self.risk_percentage,
            leverage=self.leverage,
            include_fees=self.include_fees,
        )

    @classmethod
    def from_params(cls, params: TradeParams) -> "TradeParamsRequest":
        return cls(**asdict(params))


class TradeResultsResponse(BaseModel):
    position_size_usdt: float
    quantity: float
    risk_reward_ratio: float
    stop_loss_percentage: float
    take_profit_percentage: float
    potential_profit: float
    net_profit: float
    estimated_fees: float
    required_margin: float
    actual_risk_amount: float
    is_valid: bool
    error: Optional[str] = None

    @classmethod
    def from_results(cls, results: TradeResults) -> "TradeResultsResponse":
        return cls(**asdict(results))


class ChartSuggestionResponse(BaseModel):
    entry: Optional[float] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    reasoning: Optional[str] = None

    @classmethod
    def from_suggestion(cls, suggestion: ChartSuggestion) -> "ChartSuggestionResponse":
        return cls(**asdict(suggestion))


class ChartAnalysisRequest(BaseModel):
    image: str = Field(..., min_length=1)
    params: Optional[TradeParamsRequest] = None


class ChartAnalysisResponse(BaseModel):
    suggestion: ChartSuggestionResponse
    params: Optional[TradeParamsRequest] = None
    results: Optional[TradeResultsResponse] = None


class AdviceRequest(BaseModel):
    risk_amount: float = Field(..., ge=0, allow_inf_nan=False)
    reward_ratio: float = Field(..., ge=0, allow_inf_nan=False)
    stop_loss_percentage: float = Field(..., ge=0, allow_inf_nan=False)


class AdviceResponse(BaseModel):
    advice: str


class ErrorResponse(BaseModel):
    error: str
    detail: str
    context: Optional[dict] = None
