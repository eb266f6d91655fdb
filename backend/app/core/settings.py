# backend/app/core/settings.py

import logging
import os
from typing import List, Optional, Union

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # =========================
    # Infra obligatoria
    # =========================
    SUPABASE_URL: AnyHttpUrl
    SUPABASE_KEY: str
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # =========================
    # App metadata
    # =========================
    PROJECT_NAME: str = "PurchaseLedger"
    VERSION: str = "1.0.0"
    PORT: int = 8000

    # Entorno
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # =========================
    # Store layout
    # =========================
    PURCHASES_TABLE: str = "purchases"
    CLIENTS_TABLE: str = "clients"
    # Postgres function doing the atomic purchase_count += delta
    PURCHASE_COUNT_RPC: str = "adjust_purchase_count"

    # One purchase per client is enforced on create. Product has not settled
    # this rule yet; switch off to allow several purchases per client.
    SINGLE_PURCHASE_PER_CLIENT: bool = True

    # =========================
    # CORS
    # =========================
    ALLOWED_ORIGINS: Union[List[str], str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v):
        """Convierte string separado por comas en lista."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v or []

    # Guards the admin endpoints (counter reconciliation)
    ADMIN_TOKEN: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# ===== INSTANCIA GLOBAL =====
settings = Settings()


def log_settings() -> None:
    """Log seguro de configuración sin exponer secretos."""
    logger.info("===== %s v%s =====", settings.PROJECT_NAME, settings.VERSION)
    logger.info("Environment: %s (debug=%s)", settings.ENVIRONMENT, settings.DEBUG)
    logger.info("CORS origins: %s", ", ".join(settings.ALLOWED_ORIGINS))
    logger.info("Supabase URL: %s", str(settings.SUPABASE_URL))
    logger.info("Supabase key: %s...", str(settings.SUPABASE_KEY)[:4])
    logger.info("JWT secret: %s", "configured" if settings.JWT_SECRET else "missing")
    logger.info(
        "Tables: purchases=%s clients=%s rpc=%s",
        settings.PURCHASES_TABLE,
        settings.CLIENTS_TABLE,
        settings.PURCHASE_COUNT_RPC,
    )
    logger.info("Single purchase per client: %s", settings.SINGLE_PURCHASE_PER_CLIENT)
    logger.info("Admin token: %s", "configured" if settings.ADMIN_TOKEN else "not configured")


def should_log_settings() -> bool:
    return settings.DEBUG or os.getenv("LOG_CONFIG") == "1"
