from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRAVEL_DESK_",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Travel Desk"
    environment: str = "local"
    log_level: str = "INFO"

    storage_backend: str = Field("memory", description="memory|file")
    storage_dir: str = "./data"
    storage_key: str = "travelbaba_data"
    seed_sample_data: bool = True

    admin_username: str = "akvin"
    admin_password: str = "242005"

    health_check_interval_seconds: float = 30.0
    slow_operation_threshold_ms: float = 1000.0
    max_log_entries: int = 100
    persisted_log_entries: int = 20
    max_timing_samples: int = 100
    memory_warning_mb: float = 512.0

    payment_default_gateway: str = "razorpay"
    payment_init_delay_seconds: float = 1.0
    payment_process_delay_seconds: float = 2.0
    payment_seed: int | None = None


@lru_cache()
def get_settings() -> Settings:
    load_dotenv(".env")
    return Settings()


settings = get_settings()
