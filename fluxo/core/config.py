from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # API Settings
    PROJECT_NAME: str = "Fluxo API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Payables, receivables and cash ledger for small businesses"

    # Storage
    STORAGE_BACKEND: str = "mongo"  # "mongo" or "memory"
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "fluxo"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Display / status rules
    DUE_SOON_DAYS: int = 7
    DISPLAY_LOCALE: str = "pt_BR"  # "pt_BR" or "en_US"
    CURRENCY: str = "BRL"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
