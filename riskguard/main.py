from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from riskguard.advisory.gemini_service import GeminiService
from riskguard.api.routes_advisory import configure_gemini_service, router as advisory_router
from riskguard.api.routes_sizing import router as sizing_router
from riskguard.api.routes_stream import router as stream_router
from riskguard.core.config import get_settings
from riskguard.core.logging import get_logger, init_logging


def create_app() -> FastAPI:
    settings = get_settings()
    init_logging(settings.log_level)
    logger = get_logger(__name__)

    service = GeminiService(settings)
    configure_gemini_service(service)

    app = FastAPI(
        title="RiskGuard Futures Position Calculator",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "ai": "enabled" if service.enabled else "disabled"}

    app.include_router(sizing_router)
    app.include_router(advisory_router)
    app.include_router(stream_router)
    logger.info("app_created", extra={"event": "app_created", "env": settings.app_env, "ai_enabled": service.enabled})
    return app


app = create_app()
