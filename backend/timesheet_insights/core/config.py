from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    app_name: str = "Timesheet Insights"
    app_version: str = "0.1.0"
    environment: str = "dev"
    cors_origins: list[str] = ["http://localhost:5173", "http://frontend:5173"]
    log_level: str = "INFO"
    log_format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    all_sentinel: str = "Todos"
    matrix_placeholder: str = "-"

    # Performance
    indirect_min_seconds: int = 3600
    # Punctuality
    late_start_max_seconds: int = 900
    early_stop_max_seconds: int = 300
    slow_exit_max_minutes: int = 5
    # Break / turnstile
    turnstile_max_seconds: int = 3630
    return_gap_max_seconds: int = 600
    total_interval_max_seconds: int = 4200

    model_config = SettingsConfigDict(
        env_prefix="TSI_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
