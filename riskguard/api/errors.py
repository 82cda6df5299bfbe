from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

VALIDATION_ERROR = "validation_error"
CHART_ANALYSIS_FAILED = "chart_analysis_failed"
UNEXPECTED_ERROR = "unexpected_error"


def error_response(
    *,
    status_code: int,
    code: str,
    detail: str,
    context: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Return a consistent error payload for API responses."""
    return JSONResponse(status_code=status_code, content=error_payload(code, detail, context))


def error_payload(code: str, detail: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Same error shape for WebSocket messages, which carry no status code."""
    payload: Dict[str, Any] = {"error": code, "detail": detail}
    if context:
        payload["context"] = context
    return payload
