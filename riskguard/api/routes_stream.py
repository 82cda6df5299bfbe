import asyncio
import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from riskguard.advisory.gemini_service import GeminiService
from riskguard.advisory.scheduler import AdviceScheduler
from riskguard.api.errors import VALIDATION_ERROR, error_payload
from riskguard.api.routes_advisory import get_gemini_service
from riskguard.core.config import get_settings
from riskguard.core.logging import get_logger
from riskguard.risk.risk_engine import calculate_position_size
from riskguard.trading.schemas import TradeParamsRequest, TradeResultsResponse

router = APIRouter(tags=["stream"])
logger = get_logger(__name__)


@router.websocket("/ws/sizing")
async def sizing_stream(
    websocket: WebSocket,
    service: GeminiService = Depends(get_gemini_service),
) -> None:
    """Recompute sizing on every params message; push debounced advice for the latest valid result."""
    await websocket.accept()
    send_lock = asyncio.Lock()

    async def _send(message: Dict[str, Any]) -> None:
        async with send_lock:
            await websocket.send_json(message)

    async def _push_advice(text: str) -> None:
        try:
            await _send({"type": "advice", "payload": {"advice": text}})
        except Exception as exc:
            logger.warning("advice_push_failed", extra={"event": "advice_push_failed", "error": str(exc)})

    scheduler = AdviceScheduler(
        service,
        delay=get_settings().advice_debounce_seconds,
        on_advice=_push_advice,
    )
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                request = TradeParamsRequest.model_validate(json.loads(raw))
            except (ValueError, ValidationError) as exc:
                await _send({"type": "error", "payload": _invalid_message_payload(exc)})
                continue
            results = calculate_position_size(request.to_params())
            await _send({"type": "results", "payload": TradeResultsResponse.from_results(results).model_dump()})
            scheduler.submit(results)
    except WebSocketDisconnect:
        logger.info("sizing_stream_closed", extra={"event": "sizing_stream_closed"})
    finally:
        scheduler.cancel()


def _invalid_message_payload(exc: Exception) -> Dict[str, Any]:
    if isinstance(exc, ValidationError):
        errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
        return error_payload(VALIDATION_ERROR, "Invalid trade parameters", {"errors": errors})
    return error_payload(VALIDATION_ERROR, "Message is not valid JSON")
