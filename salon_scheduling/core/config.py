from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"

    SALON_BACKEND: str = "mock"  # "mock" | "http"
    SALON_API_BASE_URL: str = "http://localhost:8080/api"
    SALON_API_TOKEN: str | None = None
    SALON_API_TIMEOUT_SECONDS: float = 10.0

    APPOINTMENT_STORE: str = "memory"  # "memory" | "json"
    APPOINTMENT_DATA_DIR: str = "./data/appointments"

    SLOT_GRID_START: str = "9:00 AM"
    SLOT_GRID_END: str = "6:00 PM"
    SLOT_INCREMENT_MINUTES: int = 30
    LUNCH_BREAK_START: str | None = "1:00 PM"
    LUNCH_BREAK_END: str | None = "2:00 PM"

    DEFAULT_PAGE_SIZE: int = 10
    DASHBOARD_WINDOW_DAYS: int = 7


settings = Settings()
