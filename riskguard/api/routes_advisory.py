from fastapi import APIRouter, Depends, HTTPException

from riskguard.advisory.gemini_service import ChartAnalysisError, GeminiService, ImagePayloadError
from riskguard.api.errors import CHART_ANALYSIS_FAILED, UNEXPECTED_ERROR, VALIDATION_ERROR, error_response
from riskguard.core.logging import get_logger
from riskguard.risk.risk_engine import calculate_position_size
from riskguard.risk.suggestions import apply_suggestion
from riskguard.trading.schemas import (
    AdviceRequest,
    AdviceResponse,
    ChartAnalysisRequest,
    ChartAnalysisResponse,
    ChartSuggestionResponse,
    ErrorResponse,
    TradeParamsRequest,
    TradeResultsResponse,
)

router = APIRouter(prefix="/api", tags=["advisory"])

_service: GeminiService | None = None
logger = get_logger(__name__)


def configure_gemini_service(service: GeminiService) -> None:
    global _service
    _service = service


def get_gemini_service() -> GeminiService:
    if _service is None:
        raise HTTPException(status_code=500, detail="AI service not configured")
    return _service


@router.post(
    "/chart/analyze",
    response_model=ChartAnalysisResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def analyze_chart(request: ChartAnalysisRequest, service: GeminiService = Depends(get_gemini_service)):
    """Read trade levels from a chart screenshot and optionally merge them into the given params."""
    try:
        suggestion = await service.analyze_chart(request.image)
    except ImagePayloadError as exc:
        return error_response(status_code=400, code=VALIDATION_ERROR, detail=str(exc))
    except ChartAnalysisError as exc:
        return error_response(
            status_code=502,
            code=CHART_ANALYSIS_FAILED,
            detail=str(exc),
            context={"params_unchanged": request.params is not None},
        )
    except Exception:
        logger.exception("chart_analyze_request_failed", extra={"event": "chart_analyze_request_failed"})
        return error_response(status_code=500, code=UNEXPECTED_ERROR, detail="Unexpected error. Check server logs.")

    response = ChartAnalysisResponse(suggestion=ChartSuggestionResponse.from_suggestion(suggestion))
    if request.params is not None:
        merged = apply_suggestion(request.params.to_params(), suggestion)
        response.params = TradeParamsRequest.from_params(merged)
        response.results = TradeResultsResponse.from_results(calculate_position_size(merged))
    return response


@router.post("/advice", response_model=AdviceResponse)
async def advice(request: AdviceRequest, service: GeminiService = Depends(get_gemini_service)):
    """Short assessment of a risk profile; generator failures come back as fallback text."""
    text = await service.trade_advice(request.risk_amount, request.reward_ratio, request.stop_loss_percentage)
    return AdviceResponse(advice=text)
