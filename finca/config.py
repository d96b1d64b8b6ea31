"""
Configuración central de la aplicación.
Usa Pydantic BaseSettings para validar variables de entorno.
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────
    APP_NAME: str = "Finca Manager Sync"
    APP_ENV: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # ── CORS ─────────────────────────────────────────
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # ── Base de datos local (SQLite embebido) ────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./finca_manager.db"
    DATABASE_ECHO: bool = False

    # ── Almacén remoto de documentos ─────────────────
    REMOTE_STORE_BACKEND: Literal["http", "memory"] = "http"
    REMOTE_STORE_URL: str = "http://localhost:8080/v1"
    REMOTE_STORE_TOKEN: str = ""
    REMOTE_STORE_TIMEOUT_SECONDS: float = 10.0

    # ── Sincronización ───────────────────────────────
    SYNC_ERROR_LOG_SIZE: int = 100
    SYNC_SWEEP_INTERVAL_SECONDS: int = 300  # 0 = sin barrido periódico

    # ── Celery ───────────────────────────────────────
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # ── Usuario del dispositivo (auth provider estático) ──
    DEVICE_USER_ID: str | None = None

    @field_validator("SYNC_ERROR_LOG_SIZE")
    @classmethod
    def validate_error_log_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("SYNC_ERROR_LOG_SIZE debe ser al menos 1")
        return v

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
