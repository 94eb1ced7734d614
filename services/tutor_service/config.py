from __future__ import annotations

import os
from dataclasses import dataclass, field

from shared.llm_adapter import ModelType, ProviderSettings

DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


@dataclass(frozen=True)
class TutorConfig:
    providers: ProviderSettings = field(default_factory=ProviderSettings)
    default_model: ModelType = ModelType.LLAMA
    max_retries: int = 2
    retry_base_delay_ms: int = 1000
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    app_env: str = "production"
    log_level: str = "INFO"

    @property
    def expose_error_detail(self) -> bool:
        return self.app_env == "development"

    @property
    def retry_base_delay_s(self) -> float:
        return self.retry_base_delay_ms / 1000

    @classmethod
    def from_env(cls) -> TutorConfig:
        origins = os.environ.get("ALLOWED_ORIGINS", "")
        return cls(
            providers=ProviderSettings.from_env(),
            default_model=ModelType.from_value(
                os.environ.get("DOUBT_RESOLUTION_MODEL", "llama").lower()
            ),
            max_retries=max(0, _int_env("AI_MAX_RETRIES", 2)),
            retry_base_delay_ms=max(0, _int_env("AI_RETRY_BASE_DELAY_MS", 1000)),
            allowed_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                or DEFAULT_ALLOWED_ORIGINS
            ),
            app_env=(
                os.environ.get("APP_ENV") or os.environ.get("NODE_ENV") or "production"
            ).lower(),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )
