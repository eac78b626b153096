"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings, loaded once at startup and passed to services."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # App info
    app_name: str = "Health Navigator"
    app_version: str = "1.0.0"
    debug: bool = False
    app_id: str = "default-app-id"  # namespaces every persisted record

    # Session tokens
    secret_key: str = "your-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 1 day
    custom_token_secret: Optional[str] = None  # falls back to secret_key

    # In-memory session state
    session_idle_minutes: int = 120  # evict sessions untouched this long
    max_sessions: int = 10000

    # Document store
    document_store: str = "local"  # local, firestore
    local_storage_path: str = "./data"
    firebase_credentials_path: Optional[str] = None
    firebase_project_id: Optional[str] = None

    # Google Fit OAuth
    google_client_id: Optional[str] = None
    google_redirect_uri: str = "http://localhost:3000"
    google_fit_timeout: float = 30.0

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash-preview-09-2025"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: float = 60.0

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/health_navigator.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses
    log_llm_calls: bool = True  # Log Gemini calls with token usage
