import base64
import binascii
import json
import re
from typing import Any, Optional, Tuple, Union

from riskguard.core.config import Settings
from riskguard.core.logging import get_logger
from riskguard.risk.suggestions import ChartSuggestion, suggestion_from_payload

logger = get_logger(__name__)

ANALYSIS_FAILED_MESSAGE = "Failed to analyze image. Please try again."
ADVICE_FALLBACK = "Unable to fetch AI advice at this time."
ADVICE_EMPTY = "Trade parameters look nominal."

_DATA_URL_RE = re.compile(r"^data:(image/(?:png|jpeg|jpg|webp));base64,", re.IGNORECASE)

CHART_PROMPT = """
Analyze this trading chart screenshot.
Identify if there is a Long or Short position tool visible.
Extract the specific numerical values for:
1. Entry Price
2. Stop Loss Price
3. Take Profit Price (Target)

If you cannot clearly see a specific value, return null for that field.
Also provide a very brief reasoning of what you found.
Respond with a JSON object with the keys "entry", "stopLoss", "takeProfit" and "reasoning".
""".strip()

ADVICE_PROMPT = """
I am planning a crypto futures trade with the following parameters:
- Risk Amount: ${risk}
- Risk/Reward Ratio: {rr:.2f}
- Stop Loss Width: {sl_pct:.2f}%

Give me a 1-sentence quick assessment of this risk profile.
Is the stop loss too tight? Is the R:R favorable?
Keep it professional and concise.
""".strip()


class ChartAnalysisError(Exception):
    """Raised when a chart screenshot cannot be turned into trade levels."""


class ImagePayloadError(ValueError):
    """Raised when the uploaded image payload cannot be decoded."""


def decode_image(image: Union[str, bytes]) -> Tuple[bytes, str]:
    """Return raw image bytes and mime type from bytes or a (data URL) base64 string."""
    if isinstance(image, (bytes, bytearray)):
        if not image:
            raise ImagePayloadError("Image payload is empty")
        return bytes(image), "image/png"
    text = (image or "").strip()
    mime_type = "image/png"
    match = _DATA_URL_RE.match(text)
    if match:
        mime_type = match.group(1).lower().replace("jpg", "jpeg")
        text = text[match.end():]
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImagePayloadError("Image payload is not valid base64") from exc
    if not raw:
        raise ImagePayloadError("Image payload is empty")
    return raw, mime_type


class GeminiService:
    """Thin async wrapper around the Gemini SDK for chart reading and trade advice."""

    def __init__(self, settings: Settings, model: Optional[Any] = None) -> None:
        self.settings = settings
        self.model = model if model is not None else self._init_model(settings)

    def _init_model(self, settings: Settings) -> Optional[Any]:
        if not settings.gemini_api_key:
            logger.warning("gemini_disabled", extra={"event": "gemini_disabled", "reason": "missing_api_key"})
            return None
        import google.generativeai as genai

        genai.configure(api_key=settings.gemini_api_key)
        return genai.GenerativeModel(settings.gemini_model)

    @property
    def enabled(self) -> bool:
        return self.model is not None

    async def analyze_chart(self, image: Union[str, bytes]) -> ChartSuggestion:
        """Read entry/stop/target off a chart image; any failure raises ChartAnalysisError."""
        raw, mime_type = decode_image(image)
        if self.model is None:
            raise ChartAnalysisError(ANALYSIS_FAILED_MESSAGE)
        try:
            response = await self.model.generate_content_async(
                [{"mime_type": mime_type, "data": raw}, CHART_PROMPT],
                generation_config={"response_mime_type": "application/json"},
            )
            text = (response.text or "").strip()
            if not text:
                raise ValueError("No response from AI")
            payload = json.loads(text)
            if not isinstance(payload, dict):
                raise ValueError("AI response is not a JSON object")
        except Exception as exc:
            logger.warning(
                "chart_analysis_failed",
                extra={"event": "chart_analysis_failed", "mime_type": mime_type, "error": str(exc)},
            )
            raise ChartAnalysisError(ANALYSIS_FAILED_MESSAGE) from exc
        suggestion = suggestion_from_payload(payload)
        logger.info(
            "chart_analyzed",
            extra={
                "event": "chart_analyzed",
                "entry": suggestion.entry,
                "stop_loss": suggestion.stop_loss,
                "take_profit": suggestion.take_profit,
            },
        )
        return suggestion

    async def trade_advice(self, risk: float, rr: float, sl_percent: float) -> str:
        """One-sentence assessment of a risk profile; never raises."""
        if self.model is None:
            return ADVICE_FALLBACK
        prompt = ADVICE_PROMPT.format(risk=_format_amount(risk), rr=rr, sl_pct=sl_percent)
        try:
            response = await self.model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as exc:
            logger.warning("trade_advice_failed", extra={"event": "trade_advice_failed", "error": str(exc)})
            return ADVICE_FALLBACK
        return text or ADVICE_EMPTY


def _format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"
