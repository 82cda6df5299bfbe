from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = BASE_DIR / ".env"

# Load environment variables from .env if present
load_dotenv(ENV_PATH)


class Settings(BaseSettings):
    app_env: str = Field("development", env="APP_ENV")
    app_host: str = Field("127.0.0.1", env="APP_HOST")
    app_port: int = Field(8000, env="APP_PORT")
    log_level: str = Field("INFO", env="LOG_LEVEL")

    gemini_api_key: Optional[str] = Field(None, env="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-1.5-flash", env="GEMINI_MODEL")
    advice_debounce_seconds: float = Field(1.5, env="ADVICE_DEBOUNCE_SECONDS")

    default_risk_amount: float = Field(50.0, env="DEFAULT_RISK_AMOUNT")
    default_portfolio_size: float = Field(1000.0, env="DEFAULT_PORTFOLIO_SIZE")
    default_risk_pct: float = Field(1.0, env="DEFAULT_RISK_PCT")
    default_leverage: float = Field(10.0, env="DEFAULT_LEVERAGE")

    class Config:
        env_file = ENV_PATH
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

