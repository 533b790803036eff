from typing import Optional, List, Dict
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import Environment


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # Service Settings
    app_name: str = "usage-billing-engine"
    debug: bool = False
    log_level: str = "INFO"

    # Database Components (usage/subscription store adapters)
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "billing"
    db_use_nullpool: bool = (
        False  # True for batch invoicing runs (sequential), False for API (concurrent)
    )
    db_pool_size: int = 10
    db_pool_overflow: int = 5

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # OpenTelemetry
    otel_service_name: str = "usage-billing-engine"
    otel_service_version: str = "0.1.0"
    otel_exporter_otlp_endpoint: Optional[str] = None  # e.g. https://collector:4318
    otel_exporter_otlp_headers: Dict[str, str] = {}

    # Billing
    billing_invoice_grace_period_days: int = 30
    billing_invoice_prefix: str = "INV"
    billing_fallback_plan_id: Optional[str] = (
        "free"  # Plan applied to subscribers without a usable subscription
    )
    billing_heavy_tier_plan_ids: List[str] = ["enterprise"]
    billing_usage_warning_threshold_percent: int = 80
    billing_plan_catalog_file: Optional[str] = None  # JSON file overriding defaults


settings = Settings()
