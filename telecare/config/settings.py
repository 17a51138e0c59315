"""Application configuration and settings."""

from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service Configuration
    service_name: str = "telecare-triage"
    triage_service_port: int = 8010
    environment: str = "development"

    # MongoDB Configuration
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "telecare"
    mongodb_collection_doctors: str = "doctors"
    mongodb_collection_consultations: str = "consultations"

    # Gemini Generative Language API
    gemini_api_key: Optional[str] = None
    gemini_endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-flash"
    gemini_timeout_seconds: float = 20.0
    gemini_temperature: float = 0.3
    gemini_top_p: float = 0.9
    gemini_top_k: int = 40
    advice_max_output_tokens: int = 512
    prescription_max_output_tokens: int = 1024
    advice_char_budget: int = 1600

    # Reference datasets
    symptoms_dataset_path: str = str(_DATA_DIR / "symptoms.json")
    medicines_dataset_path: str = str(_DATA_DIR / "medicines.json")

    # Triage rules
    complex_threshold_score: int = 3
    max_recommended_doctors: int = 3
    max_suggested_medicines: int = 3

    # JWT Configuration
    auth_enabled: bool = True
    jwt_algorithm: str = "HS256"
    jwt_secret_key: Optional[str] = None
    jwt_public_key_path: Optional[str] = None
    jwt_issuer: Optional[str] = None
    jwt_access_cookie_name: str = "access_token"

    # CORS
    cors_allow_origins: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
