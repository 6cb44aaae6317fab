# lavanderia/core/config.py

from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def find_dotenv_path(filename: str = ".env") -> Optional[str]:
    """Busca o arquivo .env subindo a partir do CWD."""
    current_dir = Path.cwd()
    for _ in range(10):
        env_path = current_dir / filename
        if env_path.is_file():
            return str(env_path)
        if current_dir.parent == current_dir:
            break
        current_dir = current_dir.parent
    return None


class Settings(BaseSettings):
    PROJECT_NAME: str = "Lavanderia Back-Office API"
    API_PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    PORT: int = 3000

    # Database
    MONGODB_URI: str
    MONGODB_DB_NAME: Optional[str] = None

    # Tenancy
    DEFAULT_ORG_ID: Optional[str] = None
    CORS_ORIGINS: str = "*"
    TIMEZONE: str = "America/Mexico_City"

    # Identity provider
    IDENTITY_URL: Optional[str] = None
    IDENTITY_ANON_KEY: Optional[str] = None
    IDENTITY_JWT_SECRET: Optional[str] = None
    IDENTITY_JWT_AUDIENCE: str = "authenticated"
    JWT_ALGORITHM: str = "HS256"

    # Object storage
    STORAGE_URL: Optional[str] = None
    STORAGE_SERVICE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "evidencias"
    EVIDENCE_MAX_BYTES: int = 5 * 1024 * 1024

    # Meta / WhatsApp API Credentials
    META_ACCESS_TOKEN: Optional[str] = None
    META_PHONE_NUMBER_ID: Optional[str] = None
    META_GRAPH_API_VERSION: str = "v19.0"
    MESSAGE_PACING_SECONDS: float = Field(default=0.1, ge=0)
    MESSAGE_MAX_CONCURRENCY: int = Field(default=1, ge=1)

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Scheduled notifier
    SCHEDULED_ORG_IDS: str = ""
    SCHEDULED_MESSAGE_TEMPLATE: str = "Hola [Nombre]! Te esperamos en tu lavanderia de confianza."
    SCHEDULED_HOUR: int = Field(default=9, ge=0, le=23)
    SCHEDULED_MINUTE: int = Field(default=0, ge=0, le=59)
    SCHEDULED_INACTIVE_DAYS: Optional[int] = Field(default=None, ge=1)

    # Public tracking
    TRACKING_RATE_LIMIT: str = "30/minute"
    FOLIO_PREFIX: str = "LAV"

    # Gunicorn
    GUNICORN_WORKERS: Optional[int] = None
    GUNICORN_WORKER_CLASS: str = "uvicorn.workers.UvicornWorker"

    model_config = SettingsConfigDict(
        env_file=find_dotenv_path(".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def cors_origins(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def scheduled_org_ids(self) -> List[str]:
        org_ids = [o.strip() for o in self.SCHEDULED_ORG_IDS.split(",") if o.strip()]
        if not org_ids and self.DEFAULT_ORG_ID:
            org_ids = [self.DEFAULT_ORG_ID]
        return org_ids

    def today(self) -> date:
        """Dia corrente no fuso configurado (TIMEZONE)."""
        return datetime.now(ZoneInfo(self.TIMEZONE)).date()

    @property
    def mongodb_db_name(self) -> str:
        if self.MONGODB_DB_NAME:
            return self.MONGODB_DB_NAME
        uri_path = self.MONGODB_URI.rsplit("/", 1)[-1].split("?")[0]
        if not uri_path or "@" in uri_path or ":" in uri_path or len(uri_path) > 63:
            return "lavanderia"
        return uri_path


@lru_cache()
def get_settings() -> Settings:
    """Carrega e valida as configurações da aplicação (uma vez por processo)."""
    logger.info("Loading application settings...")
    settings_instance = Settings()

    wa_keys = ["META_ACCESS_TOKEN", "META_PHONE_NUMBER_ID"]
    missing_wa = [k for k in wa_keys if not getattr(settings_instance, k, None)]
    if missing_wa:
        logger.warning(f"WhatsApp API keys missing ({', '.join(missing_wa)}). Messages will only be simulated.")
    if not settings_instance.IDENTITY_URL:
        logger.warning("IDENTITY_URL not configured. Login will be unavailable.")
    if not settings_instance.DEFAULT_ORG_ID:
        logger.debug("DEFAULT_ORG_ID not set; requests must send org_id explicitly.")

    logger.info("Settings loaded.")
    return settings_instance
