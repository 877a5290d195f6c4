# courier_hub/config/settings.py
from decimal import Decimal
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # App Info
    app_name: str = "Courier Hub API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./courier_hub.db"
    database_echo: bool = False

    # Identity provider
    identity_provider: str = "firebase"  # firebase | shared_secret
    firebase_project_id: Optional[str] = None
    firebase_certs_url: str = (
        "https://www.googleapis.com/robot/v1/metadata/x509/"
        "securetoken@system.gserviceaccount.com"
    )
    identity_secret_key: str = "change-in-production"
    identity_algorithm: str = "HS256"
    identity_timeout_seconds: float = 5.0
    identity_admin_url: Optional[str] = None
    identity_admin_api_key: Optional[str] = None

    # Payments
    stripe_secret_key: Optional[str] = None
    stripe_currency: str = "usd"
    stripe_timeout_seconds: int = 10
    stripe_max_network_retries: int = 2

    # Business rules
    rider_leg_commission: Decimal = Decimal("0.35")
    default_page_size: int = 10

    # Server
    cors_origins: List[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 5000

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
