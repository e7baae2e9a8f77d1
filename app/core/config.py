import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    openrouter_api_key: Optional[str] = Field(default=os.getenv("OPENROUTER_API_KEY"))
    base_url: str = Field(default=os.getenv("AI_BASE_URL", "https://openrouter.ai/api/v1/chat/completions"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "anthropic/claude-3.5-sonnet"))
    max_tokens: int = Field(default=int(os.getenv("AI_MAX_TOKENS", "2000")))
    extraction_max_tokens: int = Field(default=int(os.getenv("AI_EXTRACTION_MAX_TOKENS", "1000")))
    timeout_seconds: float = Field(default=float(os.getenv("AI_TIMEOUT_SECONDS", "60")))
    # 1 means no retries
    max_attempts: int = Field(default=int(os.getenv("AI_MAX_ATTEMPTS", "1")), ge=1)
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    skip_when_empty: bool = Field(default=os.getenv("AI_SKIP_WHEN_EMPTY", "true").lower() == "true")
    temperature: float = 0.7

class Config(BaseModel):
    app_name: str = "Review Synthesis Service"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Injected at deploy time; exports and health probes report it
    version: str = os.getenv("APP_VERSION", "2.1.1")
    build_id: str = os.getenv("BUILD_ID", "local")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # AI Components
    ai: AISettings = AISettings()

    # Uploads
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "10"))

    request_id_header: str = "X-Request-ID"

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:3001,"
                "http://127.0.0.1:3000,http://127.0.0.1:3001",
            ).split(",")
            if o.strip()
        ]
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

settings = Config()

_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing") and not settings.ai.openrouter_api_key:
    _logger.warning("OPENROUTER_API_KEY is not set; every synthesis will use fallback text.")
