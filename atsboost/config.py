"""
Configuration management for ATSBoost.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Database
    database_url: str = ""

    # Auth
    jwt_secret: str = "dev-secret-change-me-before-deploying"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7
    password_reset_minutes: int = 60
    email_verification_hours: int = 24

    # LLM
    deepseek_api_key: str = ""
    ai_model: str = "deepseek-chat"
    ai_temperature: float = 0.2
    ai_timeout: float = 60.0
    analysis_cache_ttl: int = 24 * 60 * 60

    # Email (SendGrid)
    sendgrid_api_key: str = ""
    email_from: str = "noreply@atsboost.co.za"

    # WhatsApp (Twilio)
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_whatsapp_number: str = ""

    # Payments (PayFast)
    payfast_merchant_id: str = ""
    payfast_merchant_key: str = ""
    payfast_passphrase: str = ""
    payfast_sandbox: bool = True
    payfast_validate_itn: bool = True

    # App
    app_url: str = "http://localhost:5173"
    api_url: str = "http://localhost:8000"
    cors_origins: str = "http://localhost:5173"
    max_upload_size: int = 2 * 1024 * 1024
    http_timeout: float = 30.0
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars


settings = Settings()
