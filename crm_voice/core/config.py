"""
Configuration management for the CRM voice service
Uses Pydantic Settings for environment variable management
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Twilio Configuration
    twilio_account_sid: str = Field(default=...)
    twilio_auth_token: str = Field(default=...)
    twilio_phone_number: str = Field(default=...)
    twilio_api_key: Optional[str] = Field(default=None)
    twilio_api_secret: Optional[str] = Field(default=None)
    twiml_app_sid: Optional[str] = Field(default=None)

    # Voice & IVR
    business_name: str = Field(default="GS Autobrokers")
    business_hours_message: str = Field(
        default="Our showroom is open Monday to Saturday, from 9 AM to 7 PM."
    )
    voice_name: str = Field(default="alice")
    voice_language: str = Field(default="en-US")
    client_identity_prefix: str = Field(default="client:")
    inbound_routing_mode: str = Field(default="direct")  # "direct" or "ivr"
    ivr_input: str = Field(default="dtmf")
    ivr_gather_timeout: int = Field(default=5)
    ivr_max_attempts: int = Field(default=3)

    # Agent selection
    sales_agent_roles: str = Field(default="Admin,Supervisor,Broker")
    direct_agent_roles: str = Field(default="")
    agent_selection_seed: Optional[int] = Field(default=None)

    # Document store
    document_store_backend: str = Field(default="firestore")  # "firestore" or "memory"
    firestore_project_id: Optional[str] = Field(default=None)
    firestore_database: Optional[str] = Field(default=None)
    store_timeout_seconds: float = Field(default=5.0)

    # Staff authentication
    secret_key: str = Field(default="default-secret-key")
    jwt_algorithm: str = Field(default="HS256")
    voice_token_ttl_seconds: int = Field(default=3600)

    # Application Settings
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    environment: str = Field(default="development")

    # Server Configuration
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8000)
    public_base_url: str = Field(default="http://localhost:8000")

    # CORS Settings
    allowed_origins: str = Field(default="http://localhost:3000,http://localhost:8000")

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def sales_roles(self) -> List[str]:
        return _split_csv(self.sales_agent_roles)

    @property
    def direct_roles(self) -> List[str]:
        return _split_csv(self.direct_agent_roles)

    def webhook_url(self, path: str) -> str:
        """Absolute URL of a webhook path under /api/v1/webhooks/twilio"""
        return f"{self.public_base_url.rstrip('/')}/api/v1/webhooks/twilio/{path.lstrip('/')}"


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
